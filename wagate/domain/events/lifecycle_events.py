"""
Lifecycle events emitted by a protocol client.

A client pushes these into the sink it was constructed with; the coordinator
tags each one with the generation of the client that produced it.
"""

from dataclasses import dataclass, field
from enum import IntEnum

from wagate.domain.models.credentials import CredentialState


class DisconnectReason(IntEnum):
    """Close status codes reported by the WhatsApp Web protocol library."""

    CONNECTION_LOST = 408
    TIMED_OUT = 408
    MULTIDEVICE_MISMATCH = 411
    CONNECTION_CLOSED = 428
    CONNECTION_REPLACED = 440
    LOGGED_OUT = 401
    FORBIDDEN = 403
    BAD_SESSION = 500
    UNAVAILABLE_SERVICE = 503
    RESTART_REQUIRED = 515


@dataclass(frozen=True)
class CloseReason:
    """Why a protocol session closed."""

    status_code: int | None = None
    message: str = ""

    @property
    def is_logged_out(self) -> bool:
        return self.status_code == DisconnectReason.LOGGED_OUT

    def __str__(self) -> str:
        code = self.status_code if self.status_code is not None else "?"
        return f"{code} {self.message}".strip()


@dataclass(frozen=True)
class QrIssued:
    payload: str


@dataclass(frozen=True)
class Opened:
    identity: str


@dataclass(frozen=True)
class Closed:
    reason: CloseReason = field(default_factory=CloseReason)


@dataclass(frozen=True)
class CredentialsUpdated:
    state: CredentialState


LifecycleEvent = QrIssued | Opened | Closed | CredentialsUpdated
