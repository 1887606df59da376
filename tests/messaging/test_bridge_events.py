"""
Tests for bridge frame parsing.
"""

import pytest

from wagate.domain.events.lifecycle_events import (
    Closed,
    CredentialsUpdated,
    DisconnectReason,
    Opened,
    QrIssued,
)
from wagate.messaging.whatsapp.bridge.events import BridgeEventError, parse_bridge_event


class TestParseBridgeEvent:
    def test_qr(self):
        assert parse_bridge_event({"type": "qr", "qr": "2@abc"}) == QrIssued("2@abc")

    def test_open(self):
        event = parse_bridge_event(
            {"type": "open", "user": {"id": "5551234:7@s.whatsapp.net"}}
        )

        assert event == Opened(identity="5551234:7@s.whatsapp.net")

    def test_close_with_status(self):
        event = parse_bridge_event({"type": "close", "statusCode": 401, "error": "Logged Out"})

        assert isinstance(event, Closed)
        assert event.reason.status_code == DisconnectReason.LOGGED_OUT
        assert event.reason.is_logged_out
        assert event.reason.message == "Logged Out"

    def test_close_without_status_is_recoverable(self):
        event = parse_bridge_event({"type": "close"})

        assert event.reason.status_code is None
        assert not event.reason.is_logged_out

    def test_creds_update(self):
        event = parse_bridge_event(
            {
                "type": "creds.update",
                "creds": {"registered": True},
                "keys": {"pre-key-1": None},
            }
        )

        assert isinstance(event, CredentialsUpdated)
        assert event.state.creds == {"registered": True}
        assert event.state.keys == {"pre-key-1": None}

    def test_unknown_type_is_ignored(self):
        assert parse_bridge_event({"type": "messages.upsert"}) is None

    @pytest.mark.parametrize(
        "frame",
        [
            {"type": "qr"},
            {"type": "open", "user": {}},
            ["not", "an", "object"],
        ],
    )
    def test_malformed_frames(self, frame):
        with pytest.raises(BridgeEventError):
            parse_bridge_event(frame)
