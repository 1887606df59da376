"""
File system credential store.

One folder per session: `creds.json` holds the authentication record and every
signal key lives in its own `<key-name>.json`, the same multi-file layout the
WhatsApp Web protocol library writes.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path
from typing import Any
from urllib.parse import quote, unquote

from wagate.core.exceptions import StoreUnavailable
from wagate.domain.interfaces.credential_store import ICredentialStore
from wagate.domain.models.credentials import CredentialState

logger = logging.getLogger("FileCredentialStore")

CREDS_FILE = "creds.json"


def _file_name(key_name: str) -> str:
    """Percent-encode a key name into a file name that decodes back to it."""
    return quote(key_name, safe="") + ".json"


class FileCredentialStore(ICredentialStore):
    """Stores the credential bundle as JSON files in one folder."""

    def __init__(self, folder: str | Path):
        self.folder = Path(folder)
        self._lock = asyncio.Lock()

    async def load(self) -> CredentialState:
        """Read creds.json and all key files.

        A missing folder or missing creds.json means no session has been paired.
        """
        async with self._lock:
            return await asyncio.to_thread(self._load_sync)

    async def save(self, state: CredentialState) -> None:
        """Write creds and every key present in `state`; None payloads delete."""
        async with self._lock:
            await asyncio.to_thread(self._save_sync, state)

    async def erase(self) -> None:
        """Remove the whole credential folder."""
        async with self._lock:
            await asyncio.to_thread(self._erase_sync)

    # =========================================================================
    # Blocking helpers (run in a worker thread)
    # =========================================================================

    def _load_sync(self) -> CredentialState:
        if not self.folder.exists():
            return CredentialState()
        if not self.folder.is_dir():
            raise StoreUnavailable(f"{self.folder} is not a directory")

        creds_path = self.folder / CREDS_FILE
        creds = self._read_json(creds_path) if creds_path.exists() else {}

        keys: dict[str, dict[str, Any] | None] = {}
        for path in sorted(self.folder.glob("*.json")):
            if path.name == CREDS_FILE:
                continue
            keys[unquote(path.stem)] = self._read_json(path)

        logger.debug(f"Loaded credentials from {self.folder} ({len(keys)} keys)")
        return CredentialState(creds=creds, keys=keys)

    def _read_json(self, path: Path) -> dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read credential file {path}: {e}")
            raise StoreUnavailable(f"Cannot read {path.name}: {e}") from e
        if not isinstance(data, dict):
            raise StoreUnavailable(f"{path.name} does not contain a JSON object")
        return data

    def _save_sync(self, state: CredentialState) -> None:
        try:
            self.folder.mkdir(parents=True, exist_ok=True)
            if state.creds:
                self._write_json(self.folder / CREDS_FILE, state.creds)
            for name, value in state.keys.items():
                path = self.folder / _file_name(name)
                if value is None:
                    path.unlink(missing_ok=True)
                else:
                    self._write_json(path, value)
        except OSError as e:
            logger.error(f"Failed to save credentials to {self.folder}: {e}")
            raise StoreUnavailable(f"Cannot write credentials: {e}") from e

    def _write_json(self, path: Path, data: dict[str, Any]) -> None:
        # Write to temporary file first, then rename (atomic operation)
        temp_file = path.with_suffix(path.suffix + ".tmp")
        temp_file.write_text(json.dumps(data), encoding="utf-8")
        temp_file.replace(path)

    def _erase_sync(self) -> None:
        if not self.folder.exists():
            return
        try:
            shutil.rmtree(self.folder)
        except OSError as e:
            logger.error(f"Failed to erase credentials in {self.folder}: {e}")
            raise StoreUnavailable(f"Cannot erase credentials: {e}") from e
        logger.info(f"Credentials erased from {self.folder}")
