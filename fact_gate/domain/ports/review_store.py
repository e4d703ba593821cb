"""Persistence interface for the human-review queue."""

from typing import Callable, List, Protocol, TypeVar

from ..models.review_case import ReviewCase

T = TypeVar("T")


class ReviewQueueStore(Protocol):
    """Storage for review cases.

    Implementations must not lose writes when several documents are
    processed concurrently.
    """

    async def load(self) -> List[ReviewCase]:
        """Return a snapshot of all cases."""
        ...

    async def update(self, mutator: Callable[[List[ReviewCase]], T]) -> T:
        """Apply ``mutator`` to the case list atomically and persist it.

        The mutator may be invoked more than once if a concurrent writer
        wins the race; it must be free of side effects outside the list.
        """
        ...
