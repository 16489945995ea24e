"""
Configuration Management System for the Delora storefront

Centralized configuration with a 3-tier precedence hierarchy:
environment → user file → system defaults file (→ pydantic defaults).
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_DIR = Path(__file__).resolve().parent.parent / "config" / "settings"


class ValidationLevel(Enum):
    """Configuration validation strictness levels"""
    STRICT = "strict"      # Fail fast on validation errors
    LENIENT = "lenient"    # Log warnings, use defaults


class StorageConfig(BaseModel):
    """Key-value persistence configuration"""
    model_config = ConfigDict(extra='forbid')

    backend: Literal["duckdb", "memory"] = Field(default="duckdb", description="Durable backend, or memory only")
    db_path: str = Field(default="data/db/delora_state.duckdb", description="DuckDB file path")
    table: str = Field(default="kv_records", description="Table holding the key-value records")

    # Durable record keys
    cart_key: str = Field(default="deloraCart", description="Record holding the cart lines")
    accounts_key: str = Field(default="deloraAccounts", description="Record holding the account directory")
    current_user_key: str = Field(default="deloraCurrentUser", description="Record holding the session")

    @field_validator("table")
    @classmethod
    def _table_is_identifier(cls, value: str) -> str:
        if not value.isidentifier():
            raise ValueError(f"table must be a plain identifier, got {value!r}")
        return value


class AccountConfig(BaseModel):
    """Local account store configuration"""
    model_config = ConfigDict(extra='forbid')

    brand_name: str = Field(default="Delora", description="Used in the welcome message")
    min_password_length: int = Field(default=6, ge=1, le=128, description="Minimum password length on registration")


class DisplayConfig(BaseModel):
    """Presentation helpers for the projection"""
    model_config = ConfigDict(extra='forbid')

    currency_symbol: str = Field(default="$", description="Prefix for formatted amounts")
    fraction_digits: int = Field(default=0, ge=0, le=4, description="Digits after the decimal point")


class StorefrontConfig(BaseModel):
    """Complete storefront configuration"""
    model_config = ConfigDict(extra='forbid')

    storage: StorageConfig = Field(default_factory=StorageConfig)
    accounts: AccountConfig = Field(default_factory=AccountConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)

    # Metadata
    schema_version: int = Field(default=1, description="Configuration schema version")


# Environment variable → (section, key)
ENV_MAP = {
    'DELORA_STORAGE_BACKEND': ('storage', 'backend'),
    'DELORA_DB_PATH': ('storage', 'db_path'),
    'DELORA_MIN_PASSWORD_LENGTH': ('accounts', 'min_password_length'),
    'DELORA_BRAND_NAME': ('accounts', 'brand_name'),
    'DELORA_CURRENCY_SYMBOL': ('display', 'currency_symbol'),
}

INT_KEYS = {'min_password_length'}


class ConfigManager:
    """Centralized configuration manager with env → user → defaults precedence"""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else DEFAULT_SETTINGS_DIR
        self._defaults: Optional[Dict[str, Any]] = None
        self._user_config: Optional[Dict[str, Any]] = None

    def _load_yaml_file(self, file_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Failed to load {file_path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {file_path}: top level is not a mapping")
            return {}
        return data

    def _save_yaml_file(self, file_path: Path, data: Dict[str, Any]) -> bool:
        """Save configuration to YAML file"""
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2)
            return True
        except OSError as e:
            logger.error(f"Failed to save {file_path}: {e}")
            return False

    def _load_defaults(self) -> Dict[str, Any]:
        """Load the system defaults file"""
        if self._defaults is None:
            self._defaults = self._load_yaml_file(self.config_dir / "defaults.yaml")
        return self._defaults

    def _load_user_config(self) -> Dict[str, Any]:
        """Load user-level configuration"""
        if self._user_config is None:
            self._user_config = self._load_yaml_file(self.config_dir / "user.yaml")
        return self._user_config

    def _merge_configs(self) -> Dict[str, Any]:
        """Merge configurations with precedence: env → user → defaults"""
        merged = StorefrontConfig().model_dump()
        self._deep_merge(merged, self._load_defaults())
        self._deep_merge(merged, self._load_user_config())
        self._deep_merge(merged, self._get_env_overrides())
        return merged

    def _deep_merge(self, base: Dict[str, Any], updates: Dict[str, Any]) -> None:
        """Deep merge configuration dictionaries"""
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _get_env_overrides(self) -> Dict[str, Any]:
        """Extract configuration overrides from environment variables"""
        overrides: Dict[str, Any] = {}
        for env_key, (section, config_key) in ENV_MAP.items():
            value = os.getenv(env_key)
            if value is None or value.strip() == "":
                continue

            if config_key in INT_KEYS:
                try:
                    converted: Any = int(value)
                except ValueError:
                    logger.warning(f"Ignoring {env_key}={value!r}: not an integer")
                    continue
            else:
                converted = value.strip()
            overrides.setdefault(section, {})[config_key] = converted

        return overrides

    def get_config(self, validation_level: ValidationLevel = ValidationLevel.STRICT) -> StorefrontConfig:
        """Get merged configuration with validation"""
        merged_config = self._merge_configs()

        try:
            return StorefrontConfig(**merged_config)
        except ValidationError as e:
            if validation_level == ValidationLevel.STRICT:
                raise ValueError(f"Configuration validation failed: {e}") from e
            logger.warning(f"Configuration validation failed, using defaults: {e}")
            return StorefrontConfig()

    def save_user_config(self, config_updates: Dict[str, Any]) -> bool:
        """Merge updates into the user configuration file"""
        user_path = self.config_dir / "user.yaml"
        existing_config = self._load_yaml_file(user_path)
        self._deep_merge(existing_config, config_updates)

        success = self._save_yaml_file(user_path, existing_config)
        if success:
            self._user_config = None
        return success

    def reload_config(self) -> None:
        """Clear cached configurations and reload from files"""
        self._defaults = None
        self._user_config = None


# Global instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """Get global configuration manager instance"""
    global _config_manager
    if _config_manager is None or config_dir is not None:
        _config_manager = ConfigManager(config_dir)
    return _config_manager


def get_config(validation_level: ValidationLevel = ValidationLevel.STRICT) -> StorefrontConfig:
    """Get current storefront configuration"""
    return get_config_manager().get_config(validation_level)
