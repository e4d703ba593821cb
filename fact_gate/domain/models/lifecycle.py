"""Fact-check lifecycle of a single document."""

from enum import Enum
from typing import Dict, FrozenSet, List

from ..errors import InvalidTransitionError


class DocumentState(str, Enum):
    """States a document passes through on its way to a publish decision."""

    PENDING = "pending"
    EXTRACTING = "extracting"  # external claim extraction
    VERIFYING = "verifying"
    AGGREGATING = "aggregating"
    DECIDING = "deciding"
    PUBLISHED = "published"
    QUEUED_FOR_REVIEW = "queued_for_review"
    BLOCKED = "blocked"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentState.PUBLISHED, DocumentState.BLOCKED)


_TRANSITIONS: Dict[DocumentState, FrozenSet[DocumentState]] = {
    DocumentState.PENDING: frozenset({DocumentState.EXTRACTING}),
    DocumentState.EXTRACTING: frozenset({DocumentState.VERIFYING}),
    DocumentState.VERIFYING: frozenset({DocumentState.AGGREGATING}),
    DocumentState.AGGREGATING: frozenset({DocumentState.DECIDING}),
    DocumentState.DECIDING: frozenset({
        DocumentState.PUBLISHED,
        DocumentState.QUEUED_FOR_REVIEW,
        DocumentState.BLOCKED,
    }),
    # A reviewer approves (published) or rejects (blocked).
    DocumentState.QUEUED_FOR_REVIEW: frozenset({
        DocumentState.PUBLISHED,
        DocumentState.BLOCKED,
    }),
    DocumentState.PUBLISHED: frozenset(),
    DocumentState.BLOCKED: frozenset(),
}


class DocumentLifecycle:
    """Tracks and validates state transitions for one document."""

    def __init__(self, file_path: str, state: DocumentState = DocumentState.PENDING):
        self.file_path = file_path
        self._state = state
        self._history: List[DocumentState] = [state]

    @property
    def state(self) -> DocumentState:
        return self._state

    @property
    def history(self) -> List[DocumentState]:
        return list(self._history)

    def can_transition(self, target: DocumentState) -> bool:
        return target in _TRANSITIONS[self._state]

    def transition(self, target: DocumentState) -> DocumentState:
        """Move to ``target``.

        Raises:
            InvalidTransitionError: If the edge is not part of the lifecycle
        """
        if not self.can_transition(target):
            raise InvalidTransitionError(
                f"{self.file_path}: cannot move from {self._state.value} to {target.value}"
            )
        self._state = target
        self._history.append(target)
        return target
