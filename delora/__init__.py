"""Delora storefront state core."""

from .shared.core.event_bus import EventBus
from .storefront.state import AppState, StorefrontController

__all__ = ["AppState", "EventBus", "StorefrontController"]
