"""Pure projection of ``AppState`` into what the page renders."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from delora.shared.domain.accounts import AccountView, Session, VisiblePanels
from delora.shared.domain.catalog import CategoryPill, ProductCandidate, SortMode
from delora.shared.domain.notifications import StatusMessage

from .app_state import AppState


class ProjectedLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price: float
    quantity: int
    line_total: float
    price_display: str
    line_total_display: str


class Projection(BaseModel):
    """Snapshot handed to the renderer after every command."""
    model_config = ConfigDict(frozen=True)

    # Cart
    total: float
    total_display: str
    item_count: int
    lines: List[ProjectedLine]
    cart_empty: bool
    cart_open: bool

    # Account
    view: AccountView
    panels: VisiblePanels
    signed_in: bool
    user: Optional[Session]
    account_initials: str
    account_label: str
    account_open: bool
    message: StatusMessage

    # Listing
    products: List[ProductCandidate]
    listing_empty: bool
    listing_placeholder: Optional[str]
    filter: str
    sort: SortMode
    pills: List[CategoryPill]


def format_currency(value: float, symbol: str = "$", fraction_digits: int = 0) -> str:
    """Format an amount like ``$1,250``, rounding halves away from zero."""
    quantum = Decimal(1).scaleb(-fraction_digits)
    amount = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{fraction_digits}f}"


def project(state: AppState) -> Projection:
    display = state.config.display

    def money(value: float) -> str:
        return format_currency(value, display.currency_symbol, display.fraction_digits)

    lines = [
        ProjectedLine(
            id=line.id,
            name=line.name,
            price=line.price,
            quantity=line.quantity,
            line_total=line.line_total,
            price_display=money(line.price),
            line_total_display=money(line.line_total),
        )
        for line in state.cart.lines()
    ]
    total = state.cart.total()

    user = state.accounts.current_user
    signed_in = user is not None
    listing = state.listing.result()

    return Projection(
        total=total,
        total_display=money(total),
        item_count=state.cart.quantity(),
        lines=lines,
        cart_empty=not lines,
        cart_open=state.cart_open,
        view=state.view.view,
        panels=state.view.panels(signed_in),
        signed_in=signed_in,
        user=user,
        account_initials=state.accounts.initials(),
        account_label=f"Account for {user.name}" if user else "Account",
        account_open=state.account_open,
        message=state.messages.current,
        products=listing.products,
        listing_empty=listing.is_empty,
        listing_placeholder=listing.placeholder,
        filter=state.listing.category,
        sort=state.listing.sort,
        pills=state.listing.pills(),
    )
