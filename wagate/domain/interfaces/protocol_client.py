"""
Protocol client interface.

The gateway never speaks the WhatsApp Web protocol itself. A protocol client
owns one remote session: it is built from the stored credentials and an event
sink, reports lifecycle events through that sink, and accepts a small command
set. One instance is one handle; reconnecting always builds a new instance.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from wagate.domain.events.lifecycle_events import LifecycleEvent
from wagate.domain.models.credentials import CredentialState

EventSink = Callable[[LifecycleEvent], None]


@dataclass(frozen=True)
class RegistrationResult:
    """Answer of a registration check for one number."""

    exists: bool
    jid: str | None = None


class IProtocolClient(ABC):
    """Single WhatsApp session handle."""

    @abstractmethod
    async def connect(self) -> None:
        """Open the remote session.

        Returns once the connection attempt is under way; progress is reported
        through the event sink (qr, open, close, credential updates).

        Raises:
            ProtocolClientError: If the session could not be started at all
        """
        pass

    @abstractmethod
    async def check_registered(self, number: str) -> RegistrationResult:
        """Check whether a phone number has a WhatsApp account."""
        pass

    @abstractmethod
    async def send_text(self, jid: str, body: str) -> str | None:
        """Send a text message and return its message id when known."""
        pass

    @abstractmethod
    async def logout(self) -> None:
        """Log the linked device out, invalidating the stored credentials."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the session without logging out."""
        pass


ProtocolClientFactory = Callable[[CredentialState, EventSink], IProtocolClient]
