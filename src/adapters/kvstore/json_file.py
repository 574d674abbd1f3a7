"""
JSON file key-value store adapter - Implements KeyValueStore protocol.

All keys live in a single JSON object file. Writes replace the whole file
atomically via temp-file-then-rename with owner-only permissions, so a
crash mid-write never leaves a half-written store behind.

Read failures (missing file, unreadable file, invalid JSON, non-object
top level) degrade to an empty store and are logged at WARNING.
"""

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

# Owner-only directory permissions for the store directory.
_STORE_DIR_MODE = 0o700

# Owner-only file permissions for the store file.
_STORE_FILE_MODE = 0o600


class JsonFileKeyValueStore:
    """
    Implements KeyValueStore protocol on top of one local JSON file.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, path: str | Path) -> None:
        """
        Initialize store with the backing file path.

        Args:
            path: Location of the JSON file (created lazily on first write)
        """
        self._path = Path(path).resolve()

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> dict[str, object]:
        if not self._path.exists():
            return {}

        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning("Key-value store unreadable, treating as empty: %s (%s)", self._path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Key-value store is not a JSON object, treating as empty: %s", self._path)
            return {}
        return data

    def _write(self, data: dict[str, object]) -> None:
        directory = self._path.parent
        os.makedirs(str(directory), mode=_STORE_DIR_MODE, exist_ok=True)  # noqa: PTH103

        fd, tmp_path = tempfile.mkstemp(dir=str(directory), suffix=".tmp", prefix=".kvstore_")
        fd_owned = True
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                fd_owned = False  # os.fdopen took ownership; it will close fd
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, _STORE_FILE_MODE)  # noqa: PTH101
            Path(tmp_path).replace(self._path)
        except BaseException:
            if fd_owned:
                with contextlib.suppress(OSError):
                    os.close(fd)
            with contextlib.suppress(OSError):
                Path(tmp_path).unlink()
            raise
