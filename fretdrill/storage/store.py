from __future__ import annotations

"""Key -> bytes stores backing stats, profiles and preferences.

The engine only needs ``get`` and ``put``. ``update`` wraps a
read-modify-write of one key in a lock; for ``FileStore`` that is an
inter-process file lock, so every session sharing a data directory sees
the others' writes.
"""

import json
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

from filelock import FileLock

from ..logger import get_logger

logger = get_logger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.\-]+$")


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]: ...

    def put(self, key: str, value: bytes) -> None: ...

    def update(self, key: str, fn: Callable[[Optional[bytes]], bytes]) -> bytes: ...


class MemoryStore:
    """In-process store; handy for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: bytes) -> None:
        with self._lock:
            self._data[key] = bytes(value)

    def update(self, key: str, fn: Callable[[Optional[bytes]], bytes]) -> bytes:
        with self._lock:
            new = fn(self._data.get(key))
            self._data[key] = bytes(new)
            return new

    def keys(self):
        with self._lock:
            return sorted(self._data)


class FileStore:
    """One ``<key>.json`` file per key under ``data_dir``.

    Writes go through a temp file and ``os.replace`` so a crash never leaves a
    half-written record behind.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        p = self._path(key)
        with self._lock:
            if not p.exists():
                return None
            return p.read_bytes()

    def put(self, key: str, value: bytes) -> None:
        p = self._path(key)
        with self._lock:
            fd, tmp = tempfile.mkstemp(prefix=f".{key}.", dir=str(self.data_dir))
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(value)
                os.replace(tmp, p)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise

    def _file_lock(self, key: str) -> FileLock:
        self._path(key)
        return FileLock(str(self.data_dir / f".{key}.lock"))

    def update(self, key: str, fn: Callable[[Optional[bytes]], bytes]) -> bytes:
        # held across get -> fn -> put; other processes and other FileStore
        # instances on the same directory block here
        with self._lock, self._file_lock(key):
            new = fn(self.get(key))
            self.put(key, new)
            return new

    def keys(self):
        with self._lock:
            return sorted(p.stem for p in self.data_dir.glob("*.json"))


def decode_json(raw: Optional[bytes], default: Any = None) -> Any:
    """Parse stored bytes; absent or malformed data yields ``default``."""
    if raw is None:
        return default
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning(f"Discarding malformed stored value: {e}")
        return default


def encode_json(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def load_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    return decode_json(store.get(key), default)


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.put(key, encode_json(value))
