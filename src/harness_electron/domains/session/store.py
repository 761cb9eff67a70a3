"""File-backed session store.

One pretty-printed JSON file per session under an injected base directory.
Writes go through a temp file and ``os.replace`` so readers never observe a
half-written record, and every read-modify-write runs under a per-session
lock file so concurrent invocations cannot lose each other's updates.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from harness_electron.domains.session.models import (
    ElementReference,
    SessionRecord,
    now_iso,
)
from harness_electron.domains.shared import SessionId, next_element_id
from harness_electron.domains.timeout import Deadline, Milliseconds
from harness_electron.errors import ErrorCode, HarnessError

logger = logging.getLogger(__name__)

LOCK_POLL_SECONDS = 0.05
DEFAULT_LOCK_STALE_SECONDS = 30.0


def connect_hint(session_id: str) -> str:
    if SessionId(session_id).is_default:
        return "harness-electron connect --port 9222"
    return f"harness-electron connect --port 9222 --session {session_id}"


def query_hint(session_id: str) -> str:
    if SessionId(session_id).is_default:
        return 'harness-electron query --text "..."'
    return f'harness-electron query --session {session_id} --text "..."'


class SessionStore:
    """Persistent session and element-reference store.

    Args:
        base_dir: Directory holding ``<id>.json`` records.
        lock_timeout_ms: How long to wait for a session lock.
        lock_stale_seconds: Age after which a lock file is treated as abandoned.
    """

    def __init__(
        self,
        base_dir: Union[str, Path],
        lock_timeout_ms: int = 5000,
        lock_stale_seconds: float = DEFAULT_LOCK_STALE_SECONDS,
    ) -> None:
        self.base_dir = Path(base_dir)
        self.lock_timeout = Milliseconds(lock_timeout_ms)
        self.lock_stale_seconds = lock_stale_seconds

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def ensure_dir(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def session_path(self, session_id: str) -> Path:
        return self.base_dir / f"{self._checked_id(session_id)}.json"

    def _lock_path(self, session_id: str) -> Path:
        return self.base_dir / f"{self._checked_id(session_id)}.lock"

    @staticmethod
    def _checked_id(session_id: str) -> str:
        try:
            return SessionId(session_id).value
        except ValueError as exc:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                str(exc),
                details={"session": session_id},
            ) from exc

    # ------------------------------------------------------------------
    # Locking and atomic writes
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def locked(self, session_id: str) -> Iterator[None]:
        """Hold the cross-process lock for one session.

        Raises:
            HarnessError: TIMEOUT (retryable) if the lock cannot be acquired.
        """
        self.ensure_dir()
        lock_path = self._lock_path(session_id)
        deadline = Deadline.after(self.lock_timeout)
        while True:
            try:
                fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_RDWR)
                break
            except FileExistsError:
                try:
                    age = time.time() - lock_path.stat().st_mtime
                except FileNotFoundError:
                    continue
                if age > self.lock_stale_seconds:
                    logger.warning("Removing stale session lock %s (%.1fs old)", lock_path, age)
                    lock_path.unlink(missing_ok=True)
                    continue
                if deadline.expired():
                    raise HarnessError(
                        ErrorCode.TIMEOUT,
                        f'Timed out waiting for lock on session "{session_id}"',
                        suggested_next=["Retry command", "harness-electron sessions list"],
                        details={"lock": str(lock_path), "timeoutMs": self.lock_timeout.value},
                    )
                # Blocking wait; each process runs a single command.
                time.sleep(LOCK_POLL_SECONDS)
        try:
            os.write(fd, str(os.getpid()).encode("ascii"))
            yield
        finally:
            # A lock reclaimed as stale by another process is no longer ours.
            try:
                still_ours = os.fstat(fd).st_ino == os.stat(lock_path).st_ino
            except FileNotFoundError:
                still_ours = False
            os.close(fd)
            if still_ours:
                lock_path.unlink(missing_ok=True)
            else:
                logger.warning("Session lock %s was taken over before release", lock_path)

    def _write_atomic(self, path: Path, payload: Dict[str, Any]) -> None:
        self.ensure_dir()
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=str(self.base_dir))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, ensure_ascii=False)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, session_id: str, path: Path) -> SessionRecord:
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return SessionRecord.model_validate(raw)
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                f'Session "{session_id}" is corrupt: {exc}',
                suggested_next=[
                    f"harness-electron sessions prune --session {session_id}",
                    connect_hint(session_id),
                ],
                details={"reason": "SESSION_CORRUPT", "path": str(path)},
            ) from exc

    def load_optional(self, session_id: str) -> Optional[SessionRecord]:
        path = self.session_path(session_id)
        if not path.is_file():
            return None
        return self._read(session_id, path)

    def load(self, session_id: str) -> SessionRecord:
        """Load a session record.

        Raises:
            HarnessError: INVALID_INPUT with ``details.reason`` set to
                ``SESSION_NOT_FOUND`` or ``SESSION_CORRUPT``.
        """
        record = self.load_optional(session_id)
        if record is None:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                f'Session "{session_id}" not found',
                suggested_next=[connect_hint(session_id)],
                details={"reason": "SESSION_NOT_FOUND", "session": session_id},
            )
        return record

    def list(self) -> List[SessionRecord]:
        self.ensure_dir()
        records = [
            self._read(path.stem, path)
            for path in self.base_dir.iterdir()
            if path.suffix == ".json" and path.is_file()
        ]
        return sorted(records, key=lambda record: record.id)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save(self, session_id: str, partial: Mapping[str, Any]) -> SessionRecord:
        """Merge ``partial`` over the stored record and persist it.

        ``createdAt`` is write-once and the element map survives unless
        ``partial`` carries one. ``updatedAt`` is always refreshed.
        """
        with self.locked(session_id):
            return self._save_unlocked(session_id, partial)

    def _save_unlocked(self, session_id: str, partial: Mapping[str, Any]) -> SessionRecord:
        existing = self.load_optional(session_id)
        merged: Dict[str, Any] = existing.to_wire() if existing else {}
        merged.update({key: value for key, value in partial.items() if value is not None})
        merged["id"] = session_id
        merged["createdAt"] = (
            (existing.created_at if existing else None)
            or partial.get("createdAt")
            or now_iso()
        )
        merged["updatedAt"] = now_iso()
        if "elementMap" not in partial or partial.get("elementMap") is None:
            merged["elementMap"] = existing.to_wire()["elementMap"] if existing else {}
        try:
            record = SessionRecord.model_validate(merged)
        except ValidationError as exc:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                f'Invalid session record for "{session_id}"',
                suggested_next=["harness-electron schema"],
                details={"errors": json.loads(exc.json())},
            ) from exc
        self._write_atomic(self.session_path(session_id), record.to_wire())
        logger.debug("Saved session %s (%d elements)", session_id, len(record.element_map))
        return record

    def delete(self, session_id: str) -> bool:
        """Remove one record under its lock; False if it did not exist."""
        path = self.session_path(session_id)
        with self.locked(session_id):
            if not path.is_file():
                return False
            path.unlink()
            return True

    def prune(self, session_id: Optional[str] = None) -> int:
        """Delete one session, or every session when no id is given.

        An empty id is rejected rather than treated as "all".
        """
        if session_id is not None:
            return 1 if self.delete(session_id) else 0
        self.ensure_dir()
        removed = 0
        for path in sorted(self.base_dir.glob("*.json")):
            if not path.is_file():
                continue
            try:
                SessionId(path.stem)
            except ValueError:
                # Not written by this store, so no lock guards it.
                path.unlink(missing_ok=True)
                removed += 1
                continue
            if self.delete(path.stem):
                removed += 1
        return removed

    # ------------------------------------------------------------------
    # Element references
    # ------------------------------------------------------------------

    def save_element(
        self, session_id: str, element_id: str, reference: ElementReference
    ) -> None:
        with self.locked(session_id):
            session = self.load(session_id)
            element_map = session.to_wire()["elementMap"]
            element_map[element_id] = reference.to_wire()
            self._save_unlocked(session_id, {"elementMap": element_map})

    def register_elements(
        self, session_id: str, references: Sequence[ElementReference]
    ) -> List[str]:
        """Mint consecutive ids for ``references`` and store them atomically.

        Returns:
            The allocated element ids, in the order of ``references``.
        """
        with self.locked(session_id):
            session = self.load(session_id)
            element_map = session.to_wire()["elementMap"]
            element_ids: List[str] = []
            next_id = next_element_id(element_map.keys())
            for reference in references:
                element_map[next_id.value] = reference.to_wire()
                element_ids.append(next_id.value)
                next_id = next_id.next()
            if element_ids:
                self._save_unlocked(session_id, {"elementMap": element_map})
            return element_ids

    def load_element(self, session_id: str, element_id: str) -> ElementReference:
        session = self.load(session_id)
        reference = session.element_map.get(element_id)
        if reference is None:
            raise HarnessError(
                ErrorCode.INVALID_INPUT,
                f'Element "{element_id}" not found in session "{session_id}"',
                suggested_next=[query_hint(session_id), "harness-electron schema"],
                details={
                    "reason": "ELEMENT_NOT_FOUND",
                    "session": session_id,
                    "elementId": element_id,
                },
            )
        return reference

    def next_element_id(self, session_id: str) -> str:
        session = self.load(session_id)
        return next_element_id(session.element_map.keys()).value
