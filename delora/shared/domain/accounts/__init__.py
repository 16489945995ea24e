from .service import AccountStore, Identity, Session, get_initials, normalize_email
from .view import AccountView, AccountViewMachine, PanelId, VisiblePanels, visible_panel, visible_panels

__all__ = [
    "AccountStore",
    "Identity",
    "Session",
    "get_initials",
    "normalize_email",
    "AccountView",
    "AccountViewMachine",
    "PanelId",
    "VisiblePanels",
    "visible_panel",
    "visible_panels",
]
