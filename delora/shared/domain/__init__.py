"""
Shared Domain Module
====================

Storefront business logic: cart, accounts, product listing, status messages.
"""

from delora.shared.domain.cart import CartLine, CartStore
from delora.shared.domain.accounts import AccountStore, AccountView, AccountViewMachine
from delora.shared.domain.catalog import ListingEngine, ProductCandidate, SortMode
from delora.shared.domain.notifications import MessageChannel, Severity, StatusMessage

__all__ = [
    # Cart
    "CartLine",
    "CartStore",
    # Accounts
    "AccountStore",
    "AccountView",
    "AccountViewMachine",
    # Catalog
    "ListingEngine",
    "ProductCandidate",
    "SortMode",
    # Notifications
    "MessageChannel",
    "Severity",
    "StatusMessage",
]
