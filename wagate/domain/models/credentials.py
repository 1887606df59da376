"""
Credential bundle model.

The bundle is opaque to the gateway: `creds` is the protocol library's
authentication record and `keys` maps key-file names (e.g. "pre-key-12",
"session-5551234.0") to their JSON payloads. A None payload marks a key the
protocol library deleted.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CredentialState:
    """Persisted authentication material for the single WhatsApp session."""

    creds: dict[str, Any] = field(default_factory=dict)
    keys: dict[str, dict[str, Any] | None] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        """True when no pairing has happened yet (a QR code will be issued)."""
        return not self.creds

    def merge(self, update: "CredentialState") -> None:
        """Apply a credential-change update in place."""
        if update.creds:
            self.creds = dict(update.creds)
        for name, value in update.keys.items():
            if value is None:
                self.keys.pop(name, None)
            else:
                self.keys[name] = value
