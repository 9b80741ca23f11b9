"""Key-value state storage for issued tokens.

Stores are blind overwrite: ``set`` replaces whatever was stored under
the key. Values are AccessToken objects or plain strings (the pending
authorization state is stored as a string).
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from cryptography.fernet import Fernet, InvalidToken

from oauth2_grants.exceptions import TokenStoreError
from oauth2_grants.logging_config import get_logger
from oauth2_grants.oauth.tokens import AccessToken

logger = get_logger(__name__)

StoredValue = AccessToken | str


class StateStore(ABC):
    """Abstract key-value store."""

    @abstractmethod
    def set(self, key: str, value: StoredValue) -> None:
        """Store a value, replacing any previous value under key."""

    @abstractmethod
    def get(self, key: str) -> StoredValue | None:
        """Return the value under key, or None."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""


class InMemoryStateStore(StateStore):
    """In-memory store.

    Values are lost when the process exits.
    """

    def __init__(self) -> None:
        self._data: dict[str, StoredValue] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: StoredValue) -> None:
        with self._lock:
            self._data[key] = value
            logger.debug("Stored %s in memory", key)

    def get(self, key: str) -> StoredValue | None:
        with self._lock:
            return self._data.get(key)

    def delete(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                logger.debug("Deleted %s", key)

    def clear(self) -> None:
        """Clear all stored values."""
        with self._lock:
            self._data.clear()


class EncryptedFileStateStore(StateStore):
    """Encrypted file-based store.

    The whole store is a JSON document encrypted with Fernet. Every write
    rewrites the file atomically through a temp file in the same directory.
    """

    def __init__(self, encryption_key: str, file_path: str | Path) -> None:
        """Initialize encrypted file store.

        Args:
            encryption_key: Fernet-compatible encryption key
            file_path: Path to the storage file

        Raises:
            TokenStoreError: If encryption key is invalid
        """
        try:
            self._fernet = Fernet(encryption_key.encode())
        except Exception as e:
            raise TokenStoreError(f"Invalid encryption key: {e}") from e

        self._file_path = Path(file_path)
        self._lock = threading.Lock()
        self._data: dict[str, dict[str, Any]] = {}
        self._loaded = False

    def _load(self) -> None:
        """Load and decrypt data from file."""
        if self._loaded:
            return

        if not self._file_path.exists():
            self._data = {}
            self._loaded = True
            return

        try:
            decrypted = self._fernet.decrypt(self._file_path.read_bytes())
            self._data = json.loads(decrypted.decode())
            self._loaded = True
            logger.debug("Loaded state from %s", self._file_path)
        except InvalidToken:
            logger.error("Failed to decrypt state file - wrong key?")
            raise TokenStoreError("Failed to decrypt state file") from None
        except json.JSONDecodeError as e:
            logger.error("Failed to parse state file: %s", e)
            raise TokenStoreError(f"Failed to parse state file: {e}") from e

    def _save(self) -> None:
        """Encrypt and save data to file atomically."""
        encrypted = self._fernet.encrypt(json.dumps(self._data).encode())

        dir_path = self._file_path.parent
        dir_path.mkdir(parents=True, exist_ok=True)

        fd, temp_path_str = tempfile.mkstemp(dir=dir_path)
        temp_path = Path(temp_path_str)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encrypted)
            temp_path.replace(self._file_path)
            logger.debug("Saved state to %s", self._file_path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise

    @staticmethod
    def _serialize(value: StoredValue) -> dict[str, Any]:
        if isinstance(value, AccessToken):
            return {"access_token": value.to_dict()}
        if isinstance(value, str):
            return {"value": value}
        msg = f"Unsupported value type: {type(value).__name__}"
        raise TokenStoreError(msg)

    @staticmethod
    def _deserialize(data: dict[str, Any]) -> StoredValue:
        if "access_token" in data:
            try:
                return AccessToken.from_dict(data["access_token"])
            except (KeyError, TypeError, ValueError) as e:
                raise TokenStoreError(f"Corrupt token record: {e}") from e
        if "value" in data:
            return str(data["value"])
        raise TokenStoreError("Corrupt state record")

    def set(self, key: str, value: StoredValue) -> None:
        record = self._serialize(value)
        with self._lock:
            self._load()
            self._data[key] = record
            self._save()
            logger.debug("Stored encrypted %s", key)

    def get(self, key: str) -> StoredValue | None:
        with self._lock:
            self._load()
            data = self._data.get(key)
            if data is None:
                return None
            return self._deserialize(data)

    def delete(self, key: str) -> None:
        with self._lock:
            self._load()
            if key in self._data:
                del self._data[key]
                self._save()
                logger.debug("Deleted encrypted %s", key)


def create_state_store(
    encryption_key: str | None = None,
    file_path: str | Path | None = None,
) -> StateStore:
    """Create the store matching the configuration.

    A file path together with an encryption key selects the encrypted
    file store; anything else gives an in-memory store.
    """
    if file_path and encryption_key:
        return EncryptedFileStateStore(encryption_key, file_path)
    return InMemoryStateStore()
