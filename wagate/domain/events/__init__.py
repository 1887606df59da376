"""Protocol client lifecycle events."""

from .lifecycle_events import (
    Closed,
    CloseReason,
    CredentialsUpdated,
    DisconnectReason,
    LifecycleEvent,
    Opened,
    QrIssued,
)

__all__ = [
    "Closed",
    "CloseReason",
    "CredentialsUpdated",
    "DisconnectReason",
    "LifecycleEvent",
    "Opened",
    "QrIssued",
]
