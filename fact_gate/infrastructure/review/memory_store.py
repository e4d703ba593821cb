"""In-memory review store."""

import asyncio
from typing import Callable, List, Optional, TypeVar

from ...domain.models.review_case import ReviewCase
from ...domain.ports.review_store import ReviewQueueStore

T = TypeVar("T")


class InMemoryReviewStore(ReviewQueueStore):
    """Process-local review store for tests and the API without a data dir."""

    def __init__(self, cases: Optional[List[ReviewCase]] = None):
        self._cases: List[ReviewCase] = list(cases or [])
        self._lock = asyncio.Lock()

    async def load(self) -> List[ReviewCase]:
        async with self._lock:
            return list(self._cases)

    async def update(self, mutator: Callable[[List[ReviewCase]], T]) -> T:
        async with self._lock:
            working = list(self._cases)
            result = mutator(working)
            self._cases = working
            return result
