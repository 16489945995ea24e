"""Storefront page state.

Architecture:
- AppState: owns the cart, accounts, account view, listing and status message
- commands: one value type per UI event
- controller: dispatch table, error boundary and projection publishing
- projection: pure snapshot handed to the renderer
"""

from .app_state import AppState
from .commands import (
    AddItem,
    ChangeFilter,
    ChangeSort,
    Checkout,
    ClearCart,
    CloseAccount,
    CloseCart,
    Command,
    OpenAccount,
    OpenCart,
    Register,
    RemoveItem,
    SelectTab,
    SignIn,
    SignOut,
    ToggleCart,
)
from .controller import TRANSITIONS, StorefrontController, apply_command
from .projection import Projection, ProjectedLine, format_currency, project

__all__ = [
    "AppState",
    "StorefrontController",
    "TRANSITIONS",
    "apply_command",
    "Projection",
    "ProjectedLine",
    "format_currency",
    "project",
    "Command",
    "AddItem",
    "RemoveItem",
    "ClearCart",
    "Register",
    "SignIn",
    "SignOut",
    "SelectTab",
    "ChangeFilter",
    "ChangeSort",
    "OpenAccount",
    "CloseAccount",
    "OpenCart",
    "CloseCart",
    "ToggleCart",
    "Checkout",
]
