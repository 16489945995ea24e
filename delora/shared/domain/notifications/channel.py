"""Transient status messages shown next to the account forms."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class Severity(str, Enum):
    NONE = "none"
    ERROR = "error"
    SUCCESS = "success"


class StatusMessage(BaseModel):
    """Text plus severity. The empty message has severity ``none``."""
    model_config = ConfigDict(frozen=True)

    text: str = ""
    severity: Severity = Severity.NONE

    @classmethod
    def empty(cls) -> "StatusMessage":
        return cls()

    @classmethod
    def success(cls, text: str) -> "StatusMessage":
        return cls(text=text, severity=Severity.SUCCESS)

    @classmethod
    def error(cls, text: str) -> "StatusMessage":
        return cls(text=text, severity=Severity.ERROR)

    @property
    def is_empty(self) -> bool:
        return not self.text and self.severity is Severity.NONE


class MessageChannel:
    """Holds the single current status message."""

    def __init__(self) -> None:
        self._current = StatusMessage.empty()

    @property
    def current(self) -> StatusMessage:
        return self._current

    def set(self, text: str, severity: Severity | str = Severity.NONE) -> StatusMessage:
        self._current = StatusMessage(text=text, severity=Severity(severity))
        if self._current.severity is Severity.ERROR:
            logger.info(f"Status error: {text}")
        return self._current

    def show(self, message: StatusMessage) -> StatusMessage:
        self._current = message
        return message

    def clear(self) -> None:
        self._current = StatusMessage.empty()
