"""Product listing: stable category filter and price sort over a fixed catalog."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
EMPTY_LISTING_TEXT = "No products match your filters yet. Adjust your filters to find more options."


class SortMode(str, Enum):
    FEATURED = "featured"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"

    @classmethod
    def parse(cls, value: Optional[str]) -> "SortMode":
        """Unknown or empty values sort as ``featured``."""
        try:
            return cls(value)
        except ValueError:
            return cls.FEATURED


class ProductCandidate(BaseModel):
    """A listable product, as authored in the page."""
    model_config = ConfigDict(frozen=True, extra='ignore')

    key: str
    display_name: str = ""
    price: float = 0.0
    category: str = ""
    base_order_index: int = Field(ge=0)

    @field_validator("price", mode="before")
    @classmethod
    def _price_or_zero(cls, value: Any) -> float:
        # Missing or unparsable prices list as 0
        try:
            price = float(value)
        except (TypeError, ValueError):
            return 0.0
        return price if math.isfinite(price) else 0.0


class CategoryPill(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    active: bool


class ListingResult(BaseModel):
    """Ordered products for the grid, or the empty placeholder."""
    model_config = ConfigDict(frozen=True)

    products: List[ProductCandidate]
    category: str
    sort: SortMode

    @property
    def is_empty(self) -> bool:
        return not self.products

    @property
    def placeholder(self) -> Optional[str]:
        return EMPTY_LISTING_TEXT if self.is_empty else None

    def keys(self) -> List[str]:
        return [product.key for product in self.products]


def apply_listing(
    candidates: Sequence[ProductCandidate],
    category: Optional[str] = ALL_CATEGORIES,
    sort: SortMode | str | None = SortMode.FEATURED,
) -> ListingResult:
    category = category or ALL_CATEGORIES
    sort_mode = sort if isinstance(sort, SortMode) else SortMode.parse(sort)

    if category == ALL_CATEGORIES:
        filtered = list(candidates)
    else:
        filtered = [candidate for candidate in candidates if candidate.category == category]

    if sort_mode is SortMode.PRICE_ASC:
        ordered = sorted(filtered, key=lambda c: (c.price, c.base_order_index))
    elif sort_mode is SortMode.PRICE_DESC:
        ordered = sorted(filtered, key=lambda c: (-c.price, c.base_order_index))
    else:
        ordered = sorted(filtered, key=lambda c: c.base_order_index)

    return ListingResult(products=ordered, category=category, sort=sort_mode)


def candidates_from_records(records: Iterable[Mapping[str, Any]]) -> List[ProductCandidate]:
    """Build the candidate set; records without an index get their position."""
    candidates = []
    for position, record in enumerate(records):
        data: Dict[str, Any] = dict(record)
        data.setdefault("base_order_index", position)
        candidates.append(ProductCandidate.model_validate(data))
    return candidates


class ListingEngine:
    """Holds the catalog and the single shared filter and sort values.

    The category dropdown and the category pills both write the same filter
    value, so the active pill always mirrors the dropdown.
    """

    def __init__(self, candidates: Sequence[ProductCandidate] = ()) -> None:
        keys = [candidate.key for candidate in candidates]
        if len(set(keys)) != len(keys):
            raise ValueError("Product keys must be unique")
        self._candidates = tuple(candidates)
        self._category = ALL_CATEGORIES
        self._sort = SortMode.FEATURED

    @property
    def candidates(self) -> tuple:
        return self._candidates

    @property
    def category(self) -> str:
        return self._category

    @property
    def sort(self) -> SortMode:
        return self._sort

    def set_category(self, value: Optional[str]) -> bool:
        value = value or ALL_CATEGORIES
        if value == self._category:
            return False
        self._category = value
        logger.debug(f"Listing filter set to {value!r}")
        return True

    def set_sort(self, value: SortMode | str | None) -> bool:
        mode = value if isinstance(value, SortMode) else SortMode.parse(value)
        if mode is self._sort:
            return False
        self._sort = mode
        return True

    def categories(self) -> List[str]:
        """Distinct categories in first-seen order."""
        seen: Dict[str, None] = {}
        for candidate in self._candidates:
            if candidate.category:
                seen.setdefault(candidate.category, None)
        return list(seen)

    def pills(self) -> List[CategoryPill]:
        values = [ALL_CATEGORIES, *self.categories()]
        return [CategoryPill(value=value, active=value == self._category) for value in values]

    def find(self, key: str) -> Optional[ProductCandidate]:
        for candidate in self._candidates:
            if candidate.key == key:
                return candidate
        return None

    def result(self) -> ListingResult:
        return apply_listing(self._candidates, self._category, self._sort)
