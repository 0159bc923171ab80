"""
Session Store persistence.

Saves the whole ``SessionStore`` as one JSON snapshot file on every engine
mutation and loads it back at startup.

Thread Safety:
    Each save replaces the file atomically (write to a sibling temp file,
    then rename). Concurrent writers to the same path need external locking.

Last Grunted: 10/18/2026
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .models import SessionStore


__all__ = ["SessionStoreFile", "StoreReadError", "StoreWriteError", "SNAPSHOT_VERSION"]


logger = logging.getLogger(__name__)


SNAPSHOT_VERSION = "1.0"


class StoreWriteError(Exception):
    """Raised when writing the session snapshot fails."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write to {path}: {cause}")


class StoreReadError(Exception):
    """Raised when reading the session snapshot fails."""

    def __init__(self, path: Path, cause: Exception) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to read from {path}: {cause}")


def _format_utc_timestamp() -> str:
    """Return current UTC timestamp as ISO 8601 string with 'Z' suffix."""
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SessionStoreFile:
    """
    JSON file holding the session snapshot.

    Example:
        >>> store_file = SessionStoreFile(Path("./interview_state.json"))
        >>> store = store_file.load() or SessionStore()
        >>> engine = InterviewEngine(store, on_change=store_file.save)
    """

    def __init__(self, path: Path) -> None:
        """
        Initialize the snapshot file.

        Args:
            path: Snapshot location. Its parent directory is created if needed.
        """
        self.path = Path(path)
        self._ensure_parent_dir()

    def _ensure_parent_dir(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreWriteError(self.path.parent, e) from e

    def save(self, store: SessionStore) -> Path:
        """
        Write the full session snapshot, replacing any previous one.

        Returns:
            Path to the written file.

        Raises:
            StoreWriteError: If the file cannot be written.
        """
        data = store.model_dump(mode="json")
        data["_meta"] = {
            "written_at": _format_utc_timestamp(),
            "version": SNAPSHOT_VERSION,
        }

        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreWriteError(self.path, e) from e

        logger.debug("Wrote session snapshot to %s (%d candidates)", self.path, len(store.candidates))
        return self.path

    def load(self) -> Optional[SessionStore]:
        """
        Load the session snapshot.

        Returns:
            The stored SessionStore, or None if no snapshot exists yet.

        Raises:
            StoreReadError: If the file cannot be read or holds invalid data.
        """
        if not self.path.exists():
            logger.debug("No session snapshot at %s", self.path)
            return None

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise StoreReadError(self.path, e) from e
        except OSError as e:
            raise StoreReadError(self.path, e) from e

        if not isinstance(data, dict):
            raise StoreReadError(self.path, ValueError("snapshot root must be an object"))
        data.pop("_meta", None)

        try:
            store = SessionStore.model_validate(data)
        except ValidationError as e:
            raise StoreReadError(self.path, e) from e

        logger.info("Loaded session snapshot from %s (%d candidates)", self.path, len(store.candidates))
        return store

    def delete(self) -> bool:
        """
        Delete the snapshot (whole-session reset).

        Returns:
            True if a file was deleted, False if none existed.

        Raises:
            StoreWriteError: If deletion fails.
        """
        if not self.path.exists():
            return False
        try:
            self.path.unlink()
        except OSError as e:
            raise StoreWriteError(self.path, e) from e
        logger.info("Deleted session snapshot %s", self.path)
        return True
