"""
Domain interfaces.

Defines the contracts that infrastructure layer must implement.
"""

from .credential_store import ICredentialStore
from .protocol_client import (
    EventSink,
    IProtocolClient,
    ProtocolClientFactory,
    RegistrationResult,
)

__all__ = [
    "ICredentialStore",
    "IProtocolClient",
    "ProtocolClientFactory",
    "EventSink",
    "RegistrationResult",
]
