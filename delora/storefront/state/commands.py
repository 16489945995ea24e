"""Commands the presentation layer sends to the controller.

Each command is a plain value carrying the raw input of one UI event; form
fields arrive untrimmed and are normalized by the stores.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class AddItem:
    item_id: str
    name: str
    price: Any
    quantity: Optional[int] = 1


@dataclass(frozen=True)
class RemoveItem:
    item_id: str


@dataclass(frozen=True)
class ClearCart:
    pass


@dataclass(frozen=True)
class Register:
    name: str
    email: str
    password: str


@dataclass(frozen=True)
class SignIn:
    email: str
    password: str


@dataclass(frozen=True)
class SignOut:
    pass


@dataclass(frozen=True)
class SelectTab:
    view: str


@dataclass(frozen=True)
class ChangeFilter:
    category: Optional[str]


@dataclass(frozen=True)
class ChangeSort:
    sort: Optional[str]


@dataclass(frozen=True)
class OpenAccount:
    view: Optional[str] = None


@dataclass(frozen=True)
class CloseAccount:
    pass


@dataclass(frozen=True)
class OpenCart:
    pass


@dataclass(frozen=True)
class CloseCart:
    pass


@dataclass(frozen=True)
class ToggleCart:
    pass


@dataclass(frozen=True)
class Checkout:
    pass


Command = Union[
    AddItem,
    RemoveItem,
    ClearCart,
    Register,
    SignIn,
    SignOut,
    SelectTab,
    ChangeFilter,
    ChangeSort,
    OpenAccount,
    CloseAccount,
    OpenCart,
    CloseCart,
    ToggleCart,
    Checkout,
]
