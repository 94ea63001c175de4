"""
Key-value persistence stores.

The engine only needs synchronous get/set/delete over string keys and
string values. InMemoryStore backs tests and embedded use; FileStore keeps
one UTF-8 file per key, following the kb/ directory convention.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Protocol, runtime_checkable

from ..errors import PersistenceError

logger = logging.getLogger(__name__)


@runtime_checkable
class PersistenceStore(Protocol):
    """Synchronous string key-value store that survives restarts."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class InMemoryStore:
    """
    Dict-backed store.

    fail_reads / fail_writes make every get / set raise PersistenceError,
    which lets callers exercise the degraded paths (quota exceeded,
    storage disabled) without touching the filesystem.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self.fail_reads = False
        self.fail_writes = False

    def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise PersistenceError(f"Read failed for {key}", key=key)
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise PersistenceError(f"Write failed for {key}", key=key)
        self._data[key] = value

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise PersistenceError(f"Delete failed for {key}", key=key)
        self._data.pop(key, None)

    def keys(self) -> list:
        return sorted(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileStore:
    """
    Stores each key in its own file under base_dir.

    Storage structure:
        {base_dir}/{key}.json

    The directory is created on first write. OS errors are wrapped in
    PersistenceError so the engine can degrade to session-only state.
    """

    def __init__(self, base_dir: Optional[Path] = None):
        """
        Initialize the file store.

        Args:
            base_dir: Directory for stored entries (default: kb/adaptive_ui)
        """
        if base_dir is None:
            base_dir = Path("kb/adaptive_ui")

        self.base_dir = Path(base_dir)

    def _path_for(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise PersistenceError(f"Unsafe store key: {key!r}", key=key)
        return self.base_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}", key=key, cause=e)

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(value, encoding="utf-8")
            tmp_path.replace(path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}", key=key, cause=e)

        logger.debug(f"[STORE] Wrote {key} to {path}")

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path}: {e}", key=key, cause=e)
