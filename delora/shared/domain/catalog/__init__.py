from .listing import (
    ALL_CATEGORIES,
    EMPTY_LISTING_TEXT,
    CategoryPill,
    ListingEngine,
    ListingResult,
    ProductCandidate,
    SortMode,
    apply_listing,
    candidates_from_records,
)

__all__ = [
    "ALL_CATEGORIES",
    "EMPTY_LISTING_TEXT",
    "CategoryPill",
    "ListingEngine",
    "ListingResult",
    "ProductCandidate",
    "SortMode",
    "apply_listing",
    "candidates_from_records",
]
