"""
Session state models.

SessionSnapshot is the read-only view of the connection that HTTP readers see.
The coordinator replaces it as a whole on every transition, so a reader always
observes a fully-applied state.
"""

from dataclasses import dataclass, replace
from enum import Enum


class SessionState(Enum):
    """Connection lifecycle states."""

    IDLE = "idle"
    """No live client; a reconnect may be scheduled."""

    PAIRING = "pairing"
    """Client created, waiting for the session to open (QR may be pending)."""

    CONNECTED = "connected"
    """Session open; messages can be sent."""

    LOGGED_OUT = "logged_out"
    """Terminal until an explicit connect."""


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable snapshot of the session."""

    state: SessionState = SessionState.IDLE
    phone: str | None = None
    qr: str | None = None

    @property
    def connected(self) -> bool:
        return self.state is SessionState.CONNECTED

    @property
    def has_qr(self) -> bool:
        return self.qr is not None

    @classmethod
    def idle(cls) -> "SessionSnapshot":
        return cls()

    def with_qr(self, qr: str) -> "SessionSnapshot":
        return replace(self, qr=qr)

    def to_status(self) -> dict:
        """Status payload served by /api/status."""
        return {
            "connected": self.connected,
            "phone": self.phone,
            "hasQR": self.has_qr,
        }
