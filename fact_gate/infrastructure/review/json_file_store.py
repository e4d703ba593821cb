"""JSON-file persistence for the human-review queue."""

import asyncio
import fcntl
import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Tuple, TypeVar

from pydantic import ValidationError

from ...domain.errors import FactGateError
from ...domain.models.review_case import ReviewCase
from ...domain.ports.review_store import ReviewQueueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_WRITE_ATTEMPTS = 5


class ReviewStoreConflictError(FactGateError):
    """Another writer kept changing the queue file underneath us."""


class JsonFileReviewStore(ReviewQueueStore):
    """Review cases in a single JSON document.

    Layout: ``{"version": int, "lastUpdated": iso8601, "cases": [...]}``.
    Updates are optimistic: the file is read, mutated in memory and only
    written back (atomically, via a temp file and ``os.replace``) if its
    version has not moved in the meantime. The version check and the write
    happen under an exclusive ``flock`` on a sidecar ``.lock`` file, so
    writers in other processes are serialized too (POSIX only).
    """

    def __init__(self, path: str = "data/human-review-queue.json"):
        """Initialize the store.

        Args:
            path: Queue file location; parent directories are created on write
        """
        self.path = Path(path)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self._lock = asyncio.Lock()

    def _read(self) -> Tuple[int, List[ReviewCase]]:
        if not self.path.exists():
            return 0, []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"⚠️ Could not read review queue {self.path}: {e}, starting empty")
            return 0, []
        if not isinstance(raw, dict):
            logger.warning(f"⚠️ Review queue {self.path} is not an object, starting empty")
            return 0, []

        cases: List[ReviewCase] = []
        for item in raw.get("cases") or []:
            try:
                cases.append(ReviewCase.model_validate(item))
            except ValidationError as e:
                logger.warning(f"⚠️ Skipping malformed review case {item.get('id', '?')}: {e}")
        return int(raw.get("version") or 0), cases

    def _read_version(self) -> int:
        return self._read()[0]

    def _commit(self, expected_version: int, cases: List[ReviewCase]) -> bool:
        """Write ``cases`` if the file is still at ``expected_version``."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                if self._read_version() != expected_version:
                    return False
                self._write(expected_version + 1, cases)
                return True
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _write(self, version: int, cases: List[ReviewCase]) -> None:
        document: Dict[str, Any] = {
            "version": version,
            "lastUpdated": datetime.utcnow().isoformat() + "Z",
            "cases": [c.model_dump(mode="json", by_alias=True) for c in cases],
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    async def load(self) -> List[ReviewCase]:
        _, cases = await asyncio.to_thread(self._read)
        return cases

    async def update(self, mutator: Callable[[List[ReviewCase]], T]) -> T:
        """Apply ``mutator`` and persist the result.

        Exceptions raised by ``mutator`` propagate and nothing is written.

        Raises:
            ReviewStoreConflictError: If the file kept changing between
                read and write
        """
        for attempt in range(MAX_WRITE_ATTEMPTS):
            version, cases = await asyncio.to_thread(self._read)
            result = mutator(cases)
            async with self._lock:
                if await asyncio.to_thread(self._commit, version, cases):
                    return result
            logger.debug(
                f"🔁 Review queue changed during update (attempt {attempt + 1}), retrying"
            )
        raise ReviewStoreConflictError(
            f"Could not update {self.path} after {MAX_WRITE_ATTEMPTS} attempts"
        )
