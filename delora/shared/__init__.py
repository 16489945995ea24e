"""
Delora Shared Kernel
====================

State core used by the storefront front end.

Architecture:
- core: EventBus, errors, configuration, cleanup registry
- infrastructure: durable key-value storage adapters
- domain: cart, accounts, product listing, status messages
"""

__version__ = "0.1.0"

__all__ = []
