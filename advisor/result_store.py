"""
advisor/result_store.py
-----------------------
Durable storage for the most recent AllocationResult.

Design
------
* One JSON file per deployment (default ``data/last_allocation.json``,
  overridable through ``ADVISOR_STORE_PATH``).  Every save overwrites it;
  there is no history.
* Payload::

      {
        "schema_version": 1,
        "saved_at":       "2026-10-19T12:00:00+00:00",
        "allocation":     {asset_class: {"percentage": …, "sub_assets": {…}}}
      }

* Python's ``json`` module writes floats with ``repr`` precision, so
  percentages round-trip exactly.

Thread / process safety
-----------------------
Writes go to a uniquely named temp file in the same directory and are
committed with ``os.replace`` (atomic on POSIX and Windows), so a reader
sees either the previous file or the new one, never a torn mix.  Writers in
one process are serialised by a lock keyed on the resolved path, so separate
store instances for the same file share it; across processes the last
``os.replace`` wins.  Readers take no lock.
"""

from __future__ import annotations

import json
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

from advisor.config import STORE_PATH, STORE_SCHEMA_VERSION
from advisor.exceptions import NotFoundError, StorageError
from advisor.models import AllocationResult

# One writer lock per resolved file path, shared by every store instance in
# the process.  Writers in other processes still race; last os.replace wins.
_PATH_LOCKS: dict = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _PATH_LOCKS_GUARD:
        lock = _PATH_LOCKS.get(key)
        if lock is None:
            lock = _PATH_LOCKS[key] = threading.Lock()
        return lock


class AllocationResultStore:
    """
    Persist and serve back the latest allocation.

    Usage::

        store = AllocationResultStore("data/last_allocation.json")
        store.save(result)
        store.load() == result     # → True
    """

    def __init__(self, path: Union[str, Path] = STORE_PATH):
        self._path = Path(path)
        self._write_lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------ #
    #  Public API
    # ------------------------------------------------------------------ #

    def save(self, result: AllocationResult) -> None:
        """
        Atomically replace the stored allocation with *result*.

        Raises
        ------
        StorageError
            If the payload cannot be serialised or the file cannot be
            written.  The previously stored allocation is left untouched.
        """
        if not isinstance(result, AllocationResult):
            raise StorageError(
                f"Only AllocationResult can be stored, got {type(result).__name__}.",
                path=str(self._path),
            )

        payload = {
            "schema_version": STORE_SCHEMA_VERSION,
            "saved_at":       datetime.now(timezone.utc).isoformat(),
            "allocation":     result.to_dict(),
        }

        with self._write_lock:
            tmp_name = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self._path.parent,
                    prefix=f".{self._path.name}.",
                    suffix=".tmp",
                )
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(payload, fh, allow_nan=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self._path)
                tmp_name = None
            except (OSError, TypeError, ValueError) as exc:
                raise StorageError(
                    f"Could not write allocation to {self._path}: {exc}",
                    path=str(self._path),
                ) from exc
            finally:
                if tmp_name is not None and os.path.exists(tmp_name):
                    os.unlink(tmp_name)

    def load(self) -> AllocationResult:
        """
        Return the last saved allocation.

        Raises
        ------
        NotFoundError
            If nothing has been saved yet.
        StorageError
            If the file cannot be read, is not valid JSON, carries another
            schema version, does not describe an allocation, or describes
            one that breaks the sum / sub-asset / range invariants.
        """
        payload = self._read_payload()
        try:
            result = AllocationResult.from_dict(payload.get("allocation"))
        except (TypeError, ValueError) as exc:
            raise StorageError(
                f"Stored allocation in {self._path} is malformed: {exc}",
                path=str(self._path),
            ) from exc

        try:
            result.validate()
        except AssertionError as exc:
            raise StorageError(
                f"Stored allocation in {self._path} is inconsistent: {exc}",
                path=str(self._path),
            ) from exc
        return result

    def saved_at(self) -> Optional[datetime]:
        """
        Timestamp of the stored allocation.

        Returns ``None`` when nothing is stored or the ``saved_at`` field is
        missing or not ISO-8601.

        Raises
        ------
        StorageError
            If the file itself cannot be read or parsed (see :meth:`load`).
        """
        try:
            payload = self._read_payload()
        except NotFoundError:
            return None
        try:
            return datetime.fromisoformat(payload.get("saved_at", ""))
        except (TypeError, ValueError):
            return None

    def exists(self) -> bool:
        """Return True if an allocation file is present."""
        return self._path.is_file()

    def clear(self) -> None:
        """Delete the stored allocation (no-op when the store is empty)."""
        with self._write_lock:
            try:
                self._path.unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(
                    f"Could not remove {self._path}: {exc}", path=str(self._path)
                ) from exc

    # ------------------------------------------------------------------ #
    #  Private helpers
    # ------------------------------------------------------------------ #

    def _read_payload(self) -> dict:
        try:
            with open(self._path, encoding="utf-8") as fh:
                payload = json.load(fh)
        except FileNotFoundError as exc:
            raise NotFoundError(
                f"No allocation has been saved yet ({self._path}).",
                path=str(self._path),
            ) from exc
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise StorageError(
                f"Could not read allocation from {self._path}: {exc}",
                path=str(self._path),
            ) from exc

        if not isinstance(payload, dict):
            raise StorageError(
                f"Unexpected payload type in {self._path}: {type(payload).__name__}",
                path=str(self._path),
            )
        version = payload.get("schema_version")
        if version != STORE_SCHEMA_VERSION:
            raise StorageError(
                f"Unsupported schema version {version!r} in {self._path} "
                f"(expected {STORE_SCHEMA_VERSION}).",
                path=str(self._path),
            )
        return payload
