"""
Shared Core Module
==================

Event system, error taxonomy, configuration and cleanup registry.
"""

# Event System
from .event_bus import EventBus, EventPayload
from . import events

# Errors
from .errors import (
    DuplicateAccountError,
    InvalidCredentialsError,
    PersistenceDegraded,
    StorefrontError,
    ValidationError,
)

# Cleanup
from .service_registry import register_cleanup_handler, run_cleanup_handlers

# Configuration
from .configuration import (
    AccountConfig,
    ConfigManager,
    DisplayConfig,
    StorageConfig,
    StorefrontConfig,
    ValidationLevel,
    get_config,
    get_config_manager,
)

__all__ = [
    # Event System
    "EventBus",
    "EventPayload",
    "events",
    # Errors
    "StorefrontError",
    "ValidationError",
    "DuplicateAccountError",
    "InvalidCredentialsError",
    "PersistenceDegraded",
    # Cleanup
    "register_cleanup_handler",
    "run_cleanup_handlers",
    # Configuration
    "ConfigManager",
    "StorefrontConfig",
    "StorageConfig",
    "AccountConfig",
    "DisplayConfig",
    "ValidationLevel",
    "get_config_manager",
    "get_config",
]
