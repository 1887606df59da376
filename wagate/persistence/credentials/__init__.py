"""Credential persistence for the WhatsApp session."""

from .file_store import FileCredentialStore

__all__ = ["FileCredentialStore"]
