"""
Persistence layer for wagate.

Only the credential bundle of the single session is persisted; the session
snapshot lives in memory.
"""

from .credentials import FileCredentialStore

__all__ = ["FileCredentialStore"]
