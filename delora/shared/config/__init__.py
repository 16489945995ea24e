"""
Shared Config Module
====================

YAML settings shipped with the package.

Structure:
- settings/defaults.yaml: system defaults
- settings/user.yaml: optional per-machine overrides (not shipped)
"""
