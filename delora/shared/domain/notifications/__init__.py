from .channel import MessageChannel, Severity, StatusMessage

__all__ = ["MessageChannel", "Severity", "StatusMessage"]
