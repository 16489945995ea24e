"""Canonical event definitions for the Delora storefront."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Literal, Optional

from .event_bus import EventPayload

# Event Topics
TOPIC_STATE_PROJECTED = "state.projected"
TOPIC_STATUS_MESSAGE = "status.message"
TOPIC_CART_CHANGED = "cart.changed"
TOPIC_SESSION_CHANGED = "session.changed"


def create_state_projected_event(command: str, projection: Dict[str, Any]) -> EventPayload:
    """Create a projection event, fired after every dispatched command.

    Args:
        command: Name of the command that produced the projection
        projection: The projection as a plain dictionary
    """
    return {
        "command": command,
        "projection": projection,
        "ts": time.time(),
    }


def create_status_message_event(
    text: str,
    severity: Literal["none", "error", "success"] = "none",
) -> EventPayload:
    """Create a status message event."""
    return {
        "text": text,
        "severity": severity,
    }


def create_cart_changed_event(
    lines: List[Dict[str, Any]],
    total: float,
    item_count: int,
) -> EventPayload:
    """Create a cart changed event."""
    return {
        "lines": lines,
        "total": total,
        "item_count": item_count,
    }


def create_session_changed_event(user: Optional[Dict[str, str]]) -> EventPayload:
    """Create a session changed event. ``user`` is None after sign-out."""
    return {
        "signed_in": user is not None,
        "user": user,
    }
