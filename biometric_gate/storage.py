"""Persistent key-value stores for flags and the enrollment fingerprint."""

from __future__ import annotations

import binascii
import json
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol

import keyring
from keyring.errors import PasswordDeleteError

from .config import GateSettings
from .errors import StorageError
from .models import b64_decode, b64_encode

Transform = Callable[[Optional[bytes]], Optional[bytes]]


class PersistentKeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: Optional[bytes]) -> None:
        ...

    def update(self, key: str, transform: Transform) -> Optional[bytes]:
        """Atomically replace the value at ``key`` with ``transform(old)``."""
        ...


def _decode(key: str, serialized: str) -> bytes:
    try:
        return b64_decode(serialized)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise StorageError(f"Stored value for {key} is corrupt") from exc


class KeyringValueStore:
    """Values kept as keychain entries through keyring."""

    def __init__(self, settings: GateSettings):
        self.service = settings.keyring_service
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[bytes]:
        serialized = keyring.get_password(self.service, key)
        if serialized is None:
            return None
        return _decode(key, serialized)

    def set(self, key: str, value: Optional[bytes]) -> None:
        with self._lock:
            if value is None:
                try:
                    keyring.delete_password(self.service, key)
                except PasswordDeleteError:
                    pass
                return
            keyring.set_password(self.service, key, b64_encode(value))

    def update(self, key: str, transform: Transform) -> Optional[bytes]:
        with self._lock:
            value = transform(self.get(key))
            self.set(key, value)
            return value


class JsonFileValueStore:
    """Values kept in a single JSON document on disk."""

    def __init__(self, settings: GateSettings):
        self.path = Path(settings.store_path).expanduser()
        self._lock = threading.RLock()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self._write({})

    # File helpers ------------------------------------------------------
    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as exc:
            raise StorageError(f"Store file {self.path} is not valid JSON") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Store file {self.path} must contain an object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, sort_keys=True))
        tmp_path.replace(self.path)

    # Store -------------------------------------------------------------
    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            serialized = self._read().get(key)
        if serialized is None:
            return None
        return _decode(key, serialized)

    def set(self, key: str, value: Optional[bytes]) -> None:
        with self._lock:
            data = self._read()
            if value is None:
                if key not in data:
                    return
                data.pop(key)
            else:
                data[key] = b64_encode(value)
            self._write(data)

    def update(self, key: str, transform: Transform) -> Optional[bytes]:
        with self._lock:
            value = transform(self.get(key))
            self.set(key, value)
            return value


class MemoryValueStore:
    """Process-local store; nothing survives a restart."""

    def __init__(self) -> None:
        self._values: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: Optional[bytes]) -> None:
        with self._lock:
            if value is None:
                self._values.pop(key, None)
            else:
                self._values[key] = bytes(value)

    def update(self, key: str, transform: Transform) -> Optional[bytes]:
        with self._lock:
            value = transform(self._values.get(key))
            if value is None:
                self._values.pop(key, None)
            else:
                self._values[key] = bytes(value)
            return value


def build_store(settings: GateSettings) -> PersistentKeyValueStore:
    if settings.store_backend == "keyring":
        return KeyringValueStore(settings)
    if settings.store_backend == "file":
        return JsonFileValueStore(settings)
    return MemoryValueStore()
