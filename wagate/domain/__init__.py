"""
Domain layer for the wagate gateway.

Session models, lifecycle events and the contracts the protocol client and
credential store implementations must satisfy.
"""

from .interfaces import ICredentialStore, IProtocolClient, RegistrationResult

__all__ = [
    "ICredentialStore",
    "IProtocolClient",
    "RegistrationResult",
]
