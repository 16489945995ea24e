"""Account panel view state.

Which form or summary the account panel shows is a pure function of the
current view and whether a session exists (``visible_panel``). The machine
only remembers the last tab picked before signing in.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class AccountView(str, Enum):
    LOGIN = "login"
    REGISTER = "register"
    SUMMARY = "summary"


class PanelId(str, Enum):
    LOGIN_FORM = "login-form"
    REGISTER_FORM = "register-form"
    SUMMARY = "summary"


class VisiblePanels(BaseModel):
    """Everything the account panel shows for one (view, signed-in) pair."""
    model_config = ConfigDict(frozen=True)

    panel: PanelId
    tabs_visible: bool
    active_tab: Optional[AccountView]
    login_form: bool
    register_form: bool
    summary: bool


TAB_VIEWS = (AccountView.LOGIN, AccountView.REGISTER)


def visible_panel(view: AccountView, signed_in: bool) -> PanelId:
    if signed_in:
        return PanelId.SUMMARY
    if view is AccountView.REGISTER:
        return PanelId.REGISTER_FORM
    return PanelId.LOGIN_FORM


def visible_panels(view: AccountView, signed_in: bool) -> VisiblePanels:
    panel = visible_panel(view, signed_in)
    return VisiblePanels(
        panel=panel,
        tabs_visible=not signed_in,
        active_tab=None if signed_in else (view if view in TAB_VIEWS else AccountView.LOGIN),
        login_form=panel is PanelId.LOGIN_FORM,
        register_form=panel is PanelId.REGISTER_FORM,
        summary=panel is PanelId.SUMMARY,
    )


class AccountViewMachine:
    """login <-> register while signed out, summary while signed in."""

    def __init__(self, signed_in: bool = False) -> None:
        self._view = AccountView.SUMMARY if signed_in else AccountView.LOGIN
        self._last_tab = AccountView.LOGIN

    @property
    def view(self) -> AccountView:
        return self._view

    @property
    def last_tab(self) -> AccountView:
        return self._last_tab

    def select_tab(self, view: AccountView | str, signed_in: bool) -> bool:
        """Switch between the login and register tabs.

        Returns True only when the view actually changed. Selecting the active
        tab, selecting while signed in, or selecting ``summary`` changes nothing.
        """
        view = AccountView(view)
        if signed_in or view not in TAB_VIEWS:
            logger.debug(f"Ignoring tab selection {view.value!r} (signed_in={signed_in})")
            return False
        if view is self._view:
            return False
        self._view = view
        self._last_tab = view
        return True

    def session_established(self) -> None:
        self._view = AccountView.SUMMARY

    def signed_out(self) -> None:
        self._view = AccountView.LOGIN
        self._last_tab = AccountView.LOGIN

    def open_panel(self, signed_in: bool, view: AccountView | str | None = None) -> AccountView:
        """Pick the view shown when the account panel opens."""
        if signed_in:
            self._view = AccountView.SUMMARY
            return self._view
        requested = AccountView(view) if view else self._last_tab
        if requested not in TAB_VIEWS:
            requested = AccountView.LOGIN
        self._view = requested
        self._last_tab = requested
        return self._view

    def panels(self, signed_in: bool) -> VisiblePanels:
        return visible_panels(self._view, signed_in)
