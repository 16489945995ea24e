"""Command dispatch for the storefront page.

``TRANSITIONS`` maps each command class to a function that mutates an
``AppState``. ``apply_command`` runs one transition and converts storefront
errors into an error status message; ``StorefrontController`` serializes
commands and publishes a projection after each of them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

from delora.shared.core import events
from delora.shared.core.errors import StorefrontError
from delora.shared.core.event_bus import EventBus
from delora.shared.domain.accounts import AccountView
from delora.shared.domain.notifications import StatusMessage

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
from .projection import Projection, project

logger = logging.getLogger(__name__)

Transition = Callable[[AppState, Command], None]


# --- Cart ---

def _add_item(state: AppState, command: AddItem) -> None:
    if state.cart.add_item(command.item_id, command.name, command.price, command.quantity):
        state.cart_open = True


def _remove_item(state: AppState, command: RemoveItem) -> None:
    state.cart.remove_item(command.item_id)


def _clear_cart(state: AppState, command: ClearCart) -> None:
    state.cart.clear()


def _open_cart(state: AppState, command: OpenCart) -> None:
    state.cart_open = True


def _close_cart(state: AppState, command: CloseCart) -> None:
    state.cart_open = False


def _toggle_cart(state: AppState, command: ToggleCart) -> None:
    state.cart_open = not state.cart_open


# --- Accounts ---

def _register(state: AppState, command: Register) -> None:
    state.messages.clear()
    message = state.accounts.register(command.name, command.email, command.password)
    state.view.session_established()
    state.messages.show(message)


def _sign_in(state: AppState, command: SignIn) -> None:
    state.messages.clear()
    message = state.accounts.sign_in(command.email, command.password)
    state.view.session_established()
    state.messages.show(message)


def _sign_out(state: AppState, command: SignOut) -> None:
    message = state.accounts.sign_out()
    state.view.signed_out()
    state.messages.show(message)


def _select_tab(state: AppState, command: SelectTab) -> None:
    try:
        view = AccountView(command.view)
    except ValueError:
        logger.debug(f"Ignoring unknown account tab {command.view!r}")
        return
    if state.view.select_tab(view, state.signed_in):
        state.messages.clear()


def _show_account_panel(state: AppState, view: Optional[str]) -> None:
    try:
        requested = AccountView(view) if view else None
    except ValueError:
        requested = None
    state.view.open_panel(state.signed_in, requested)
    state.account_open = True
    state.messages.clear()
    user = state.accounts.current_user
    if user is not None:
        state.messages.show(StatusMessage.success(f"Signed in as {user.name}"))


def _open_account(state: AppState, command: OpenAccount) -> None:
    _show_account_panel(state, command.view)


def _close_account(state: AppState, command: CloseAccount) -> None:
    state.account_open = False


def _checkout(state: AppState, command: Checkout) -> None:
    if state.cart.is_empty:
        state.messages.show(StatusMessage.error("Add an item to your cart to continue."))
        state.cart_open = True
        return
    _show_account_panel(state, AccountView.SUMMARY.value if state.signed_in else AccountView.LOGIN.value)
    state.cart_open = False


# --- Listing ---

def _change_filter(state: AppState, command: ChangeFilter) -> None:
    state.listing.set_category(command.category)


def _change_sort(state: AppState, command: ChangeSort) -> None:
    state.listing.set_sort(command.sort)


TRANSITIONS: Dict[type, Transition] = {
    AddItem: _add_item,
    RemoveItem: _remove_item,
    ClearCart: _clear_cart,
    OpenCart: _open_cart,
    CloseCart: _close_cart,
    ToggleCart: _toggle_cart,
    Register: _register,
    SignIn: _sign_in,
    SignOut: _sign_out,
    SelectTab: _select_tab,
    OpenAccount: _open_account,
    CloseAccount: _close_account,
    Checkout: _checkout,
    ChangeFilter: _change_filter,
    ChangeSort: _change_sort,
}


def apply_command(state: AppState, command: Command) -> bool:
    """Run one command against ``state``.

    Returns False when the command failed with a ``StorefrontError``; the
    failure is then the current status message and the stores are unchanged.

    Raises:
        TypeError: ``command`` is not a known command type
    """
    transition = TRANSITIONS.get(type(command))
    if transition is None:
        raise TypeError(f"Unknown command: {command!r}")
    try:
        transition(state, command)
    except StorefrontError as e:
        logger.info(f"{type(command).__name__} failed: {type(e).__name__}: {e.message}")
        state.messages.show(StatusMessage.error(e.message))
        return False
    return True


class StorefrontController:
    """Runs commands one at a time and publishes the resulting projection.

    Usage:
        state = AppState.load(open_key_value_store(config.storage), config, catalog)
        controller = StorefrontController(state, event_bus)
        projection = await controller.dispatch(AddItem("sku1", "Vase", 25))
    """

    def __init__(
        self,
        state: AppState,
        event_bus: Optional[EventBus] = None,
        on_projection: Optional[Callable[[Projection], None]] = None,
    ) -> None:
        self.state = state
        self.bus = event_bus or EventBus()
        self.on_projection = on_projection
        self._lock: Optional[asyncio.Lock] = None
        self._loop_id: Optional[int] = None
        self._last: Optional[Projection] = None

    def _ensure_lock(self) -> asyncio.Lock:
        loop_id = id(asyncio.get_running_loop())
        if self._lock is None or self._loop_id != loop_id:
            self._lock = asyncio.Lock()
            self._loop_id = loop_id
        return self._lock

    @property
    def projection(self) -> Projection:
        """The latest projection, computed on first access."""
        if self._last is None:
            self._last = project(self.state)
        return self._last

    async def dispatch(self, command: Command) -> Projection:
        """Apply ``command`` and publish the new projection.

        The state mutation, including its persistence write, finishes before
        any subscriber runs. Callbacks and events leave in dispatch order.
        """
        async with self._ensure_lock():
            before = self.projection
            apply_command(self.state, command)
            after = project(self.state)
            self._last = after

            if self.on_projection is not None:
                self.on_projection(after)
            await self._publish(type(command).__name__, before, after)
        return after

    async def _publish(self, name: str, before: Projection, after: Projection) -> None:
        await self.bus.publish(
            events.TOPIC_STATE_PROJECTED,
            events.create_state_projected_event(name, after.model_dump(mode="json")),
        )
        if after.message != before.message and not after.message.is_empty:
            await self.bus.publish(
                events.TOPIC_STATUS_MESSAGE,
                events.create_status_message_event(after.message.text, after.message.severity.value),
            )
        if after.lines != before.lines:
            await self.bus.publish(
                events.TOPIC_CART_CHANGED,
                events.create_cart_changed_event(
                    [line.model_dump(mode="json") for line in after.lines],
                    after.total,
                    after.item_count,
                ),
            )
        if after.user != before.user:
            await self.bus.publish(
                events.TOPIC_SESSION_CHANGED,
                events.create_session_changed_event(after.user.model_dump() if after.user else None),
            )
