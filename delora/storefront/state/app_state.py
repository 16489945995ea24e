"""Application state for the storefront page.

One ``AppState`` owns every store the page works with. It is built once at
startup and handed to the controller; nothing in here is a module global.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from delora.shared.core.configuration import StorefrontConfig
from delora.shared.domain.accounts import AccountStore, AccountViewMachine
from delora.shared.domain.cart import CartStore
from delora.shared.domain.catalog import ListingEngine, ProductCandidate
from delora.shared.domain.notifications import MessageChannel
from delora.shared.infrastructure.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


class AppState:
    """Cart, accounts, account view, listing and status message of one page.

    Besides the stores it tracks whether the mini-cart and the account panel
    are open; those two flags are not persisted.
    """

    def __init__(
        self,
        cart: CartStore,
        accounts: AccountStore,
        listing: ListingEngine,
        config: Optional[StorefrontConfig] = None,
        view: Optional[AccountViewMachine] = None,
        messages: Optional[MessageChannel] = None,
    ) -> None:
        self.config = config or StorefrontConfig()
        self.cart = cart
        self.accounts = accounts
        self.listing = listing
        self.view = view or AccountViewMachine(signed_in=accounts.is_signed_in)
        self.messages = messages or MessageChannel()

        self.cart_open = False
        self.account_open = False

    @classmethod
    def load(
        cls,
        store: KeyValueStore,
        config: Optional[StorefrontConfig] = None,
        candidates: Sequence[ProductCandidate] = (),
    ) -> "AppState":
        """Restore all persisted stores and start the view machine.

        The account view starts at ``summary`` when a session was persisted,
        otherwise at ``login``.
        """
        config = config or StorefrontConfig()
        storage = config.storage

        cart = CartStore.load(store, storage.cart_key)
        accounts = AccountStore.load(
            store,
            accounts_key=storage.accounts_key,
            current_user_key=storage.current_user_key,
            brand_name=config.accounts.brand_name,
            min_password_length=config.accounts.min_password_length,
        )
        state = cls(cart, accounts, ListingEngine(candidates), config=config)
        logger.info(
            f"State loaded: {len(cart)} cart line(s), "
            f"view={state.view.view.value}, durable={store.durable}"
        )
        return state

    @property
    def signed_in(self) -> bool:
        return self.accounts.is_signed_in
