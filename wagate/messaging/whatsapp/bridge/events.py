"""
Bridge event parsing.

The bridge forwards the protocol library's socket events as JSON text frames:

    {"type": "qr", "qr": "2@abc..."}
    {"type": "open", "user": {"id": "5551234:7@s.whatsapp.net"}}
    {"type": "close", "statusCode": 428, "error": "Connection Closed"}
    {"type": "creds.update", "creds": {...}, "keys": {"pre-key-1": {...}, "pre-key-2": null}}
"""

from typing import Any

from wagate.domain.events.lifecycle_events import (
    Closed,
    CloseReason,
    CredentialsUpdated,
    LifecycleEvent,
    Opened,
    QrIssued,
)
from wagate.domain.models.credentials import CredentialState


class BridgeEventError(ValueError):
    """A frame announced a known event type but was missing its data."""


def parse_bridge_event(data: dict[str, Any]) -> LifecycleEvent | None:
    """
    Convert a bridge frame into a lifecycle event.

    Args:
        data: Decoded JSON frame

    Returns:
        The lifecycle event, or None for frame types the gateway does not use

    Raises:
        BridgeEventError: If a known frame type lacks required fields
    """
    if not isinstance(data, dict):
        raise BridgeEventError(f"expected a JSON object, got {type(data).__name__}")

    event_type = data.get("type")

    if event_type == "qr":
        qr = data.get("qr")
        if not qr:
            raise BridgeEventError("qr frame without payload")
        return QrIssued(payload=qr)

    if event_type == "open":
        user_id = (data.get("user") or {}).get("id")
        if not user_id:
            raise BridgeEventError("open frame without user id")
        return Opened(identity=user_id)

    if event_type == "close":
        status_code = data.get("statusCode")
        return Closed(
            reason=CloseReason(
                status_code=int(status_code) if status_code is not None else None,
                message=data.get("error") or "",
            )
        )

    if event_type == "creds.update":
        return CredentialsUpdated(
            state=CredentialState(
                creds=data.get("creds") or {},
                keys=data.get("keys") or {},
            )
        )

    return None
