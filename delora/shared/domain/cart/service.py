"""Cart store: quantity-aggregated line items backed by the key-value store."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from delora.shared.infrastructure.persistence.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_ITEM_NAME = "Delora Product"


class CartLine(BaseModel):
    """One purchasable id with its aggregated quantity."""
    model_config = ConfigDict(extra='ignore')

    id: str = Field(min_length=1)
    name: str = ""
    price: float = Field(gt=0, allow_inf_nan=False)
    quantity: int = Field(default=1, ge=1)

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "price": self.price, "quantity": self.quantity}


def _is_valid_price(price: Any) -> bool:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return False
    return math.isfinite(price) and price > 0


def _normalize_quantity(quantity: Any) -> Optional[int]:
    """Positive whole quantity as an int, or None. Integral floats such as 2.0 count."""
    if isinstance(quantity, bool):
        return None
    if isinstance(quantity, float):
        if not quantity.is_integer():
            return None
        quantity = int(quantity)
    if not isinstance(quantity, int) or quantity < 1:
        return None
    return quantity


class CartStore:
    """Ordered cart lines, persisted under one key after every change.

    Insertion order is display order. There is at most one line per id and
    every line has a quantity of at least 1.
    """

    def __init__(self, store: KeyValueStore, key: str = "deloraCart") -> None:
        self._store = store
        self._key = key
        self._lines: List[CartLine] = []

    @classmethod
    def load(cls, store: KeyValueStore, key: str = "deloraCart") -> "CartStore":
        """Restore the cart from persistence, dropping malformed records."""
        cart = cls(store, key)
        records = store.get(key, [])
        if not isinstance(records, list):
            logger.warning(f"Cart record '{key}' is not a list; starting empty")
            records = []

        dropped = 0
        for record in records:
            try:
                line = CartLine.model_validate(record)
            except ValidationError:
                dropped += 1
                continue
            existing = cart._find(line.id)
            if existing is None:
                cart._lines.append(line)
            else:
                existing.quantity += line.quantity

        if dropped:
            logger.warning(f"Dropped {dropped} malformed cart record(s) from '{key}'")
        logger.debug(f"Cart restored with {len(cart._lines)} line(s)")
        return cart

    def _find(self, item_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.id == item_id:
                return line
        return None

    def _persist(self) -> None:
        self._store.set(self._key, [line.to_record() for line in self._lines])

    # --- Mutations ---

    def add_item(self, item_id: str, name: str, price: float, quantity: Optional[int] = 1) -> bool:
        """Add ``quantity`` of an item, merging into an existing line.

        Returns False, leaving the cart untouched, for an id that is not a
        non-empty string, a price that is not a positive finite number, or a
        quantity that is not a positive whole number. A missing name becomes
        ``DEFAULT_ITEM_NAME``.
        """
        requested = 1 if quantity is None else quantity
        quantity = _normalize_quantity(requested)
        if not isinstance(item_id, str) or not item_id or not _is_valid_price(price) or quantity is None:
            logger.debug(f"Rejected add_item({item_id!r}, price={price!r}, quantity={requested!r})")
            return False
        name = str(name) if name not in (None, "") else DEFAULT_ITEM_NAME

        existing = self._find(item_id)
        if existing is not None:
            existing.quantity += quantity
        else:
            self._lines.append(CartLine(id=item_id, name=name, price=price, quantity=quantity))

        self._persist()
        logger.debug(f"Added {quantity} x {item_id} to cart")
        return True

    def remove_item(self, item_id: str) -> bool:
        """Remove the line for ``item_id``. Removing a missing id is a no-op."""
        for index, line in enumerate(self._lines):
            if line.id == item_id:
                del self._lines[index]
                self._persist()
                logger.debug(f"Removed {item_id} from cart")
                return True
        return False

    def clear(self) -> None:
        self._lines.clear()
        self._persist()

    # --- Derived reads ---

    def total(self) -> float:
        return sum(line.price * line.quantity for line in self._lines)

    def quantity(self) -> int:
        return sum(line.quantity for line in self._lines)

    def lines(self) -> List[CartLine]:
        """Copies of the lines in display order."""
        return [line.model_copy() for line in self._lines]

    def get(self, item_id: str) -> Optional[CartLine]:
        line = self._find(item_id)
        return line.model_copy() if line else None

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)
