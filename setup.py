# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- STORAGE ---
    "duckdb>=0.10.0",

    # --- MODELS & CONFIG ---
    "pydantic>=2.0.0",
    "python-dotenv>=1.0.0",
    "pyyaml>=6.0.0",

    # --- CLI ---
    "rich>=13.0.0",
]

extras_require = {
    # --- TESTS---
    "test": [
        "pytest",
        "pytest-asyncio>=0.23",
    ],
}

setup(
    name="delora-storefront",
    version="0.1.0",
    description="Delora storefront state core",
    packages=find_packages(include=["delora", "delora.*"]),
    include_package_data=True,
    package_data={
        "delora.shared.config": ["settings/*.yaml"],
        "delora.storefront": ["catalog.yaml"],
    },
    install_requires=install_requires,
    extras_require=extras_require,
    entry_points={
        "console_scripts": [
            "delora=delora.storefront.main:main",
        ],
    },
    python_requires=">=3.10",
)
