"""
JSON File Storage Implementation

DESIGN DECISION: Each user's payments live in a single pretty-printed JSON file
(<data_dir>/<user_id>.json) because:
1. The user can open and read their own data
2. No database setup required
3. Easy to back up, export or migrate later

TRADEOFFS:
- Every read loads the whole file, every write rewrites it
- No locking: concurrent writers for the same user can lose an update
- Not suitable for large collections (we're fine for personal use)

Writes go to a temp file in the same directory which then replaces the
target, so a crash mid-write leaves the previous collection intact.
"""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from finance_tracker.config import StorageSettings, get_settings
from finance_tracker.models.audit import AuditEvent
from finance_tracker.services.storage.interface import (
    AuditStorageInterface,
    PaymentStorageInterface,
    StorageError,
    StorageUnavailableError,
)


# User ids come from the auth provider but still end up in a file name
_SAFE_USER_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@-]{0,127}$")

logger = structlog.get_logger(__name__)


class JsonFilePaymentStorage(PaymentStorageInterface):
    """
    Per-user JSON file implementation of payment storage.

    The data directory is created lazily on first write.
    """

    def __init__(
        self,
        data_dir: Path,
        indent: int = 2,
        write_retries: int = 3,
    ):
        self._data_dir = Path(data_dir)
        self._indent = indent
        self._write_retries = write_retries

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def user_file(self, user_id: str) -> Path:
        """Path of a user's collection file."""
        if not user_id or not _SAFE_USER_ID.match(user_id) or ".." in user_id:
            raise StorageError(f"Invalid user id for file storage: {user_id!r}")
        return self._data_dir / f"{user_id}.json"

    async def load(self, user_id: str) -> list[dict[str, Any]]:
        """Read a user's collection; a missing file is an empty collection."""
        path = self.user_file(user_id)
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as e:
            raise StorageUnavailableError(f"Corrupt collection file {path.name}: {e}")
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read {path.name}: {e}")

        if not isinstance(data, list):
            raise StorageUnavailableError(
                f"Collection file {path.name} does not contain a list"
            )
        return data

    async def save(self, user_id: str, records: list[dict[str, Any]]) -> None:
        """Replace a user's collection, retrying transient I/O failures."""
        path = self.user_file(user_id)
        payload = json.dumps(records, indent=self._indent, ensure_ascii=False)

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._write_retries),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=2),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomic(path, payload)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to write {path.name}: {e}")

        logger.debug("collection_saved", file=path.name, record_count=len(records))

    def _write_atomic(self, path: Path, payload: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only JSON-lines implementation of audit storage.

    One event per line, oldest first.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(event.to_json_line() + "\n")
            return True
        except OSError as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning("audit_append_failed", error=str(e))
            return False

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events, newest first."""
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                lines = fh.readlines()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageUnavailableError(f"Failed to read audit log: {e}")

        events = []
        for line in reversed(lines):
            if len(events) >= limit:
                break
            line = line.strip()
            if not line:
                continue
            try:
                events.append(AuditEvent.model_validate_json(line))
            except ValueError:
                continue  # Skip malformed lines
        return events


def build_payment_storage(
    settings: Optional[StorageSettings] = None,
) -> JsonFilePaymentStorage:
    """Create the file-backed payment storage from StorageSettings."""
    settings = settings or get_settings().storage
    return JsonFilePaymentStorage(
        data_dir=settings.data_dir,
        indent=settings.json_indent,
        write_retries=settings.write_retries,
    )
