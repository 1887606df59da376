"""
Credential store interface.

Persists the credential bundle of the single session so it can resume without
pairing again.
"""

from abc import ABC, abstractmethod

from wagate.domain.models.credentials import CredentialState


class ICredentialStore(ABC):
    """Load/save/erase the persisted credential bundle."""

    @abstractmethod
    async def load(self) -> CredentialState:
        """Load the stored bundle.

        Returns an empty state when nothing has been stored yet.

        Raises:
            StoreUnavailable: If stored data exists but cannot be read or parsed
        """
        pass

    @abstractmethod
    async def save(self, state: CredentialState) -> None:
        """Persist creds and every key present in `state`.

        Keys whose payload is None are removed. Durable before returning.
        """
        pass

    @abstractmethod
    async def erase(self) -> None:
        """Remove all persisted material."""
        pass
