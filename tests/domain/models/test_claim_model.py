"""Tests for claim, verification and lifecycle models."""

import pytest
from pydantic import ValidationError

from fact_gate.domain.errors import InvalidTransitionError
from fact_gate.domain.models.claim import Claim, ClaimSeverity, ClaimType
from fact_gate.domain.models.lifecycle import DocumentLifecycle, DocumentState
from fact_gate.domain.models.review_case import ReviewAction, ReviewCase, ReviewTrigger
from fact_gate.domain.models.verification import (
    VerificationResult,
    VerificationSource,
    VerificationStatus,
)


def test_claim_from_extractor_json():
    claim = Claim.model_validate({
        "id": "claim-1",
        "type": "HOURS",
        "value": "24시간 운영",
        "text": "이곳은 24시간 운영합니다.",
        "severity": "critical",
        "lineNumber": 12,
    })

    assert claim.type == ClaimType.HOURS
    assert claim.severity == ClaimSeverity.CRITICAL
    assert claim.line_number == 12
    assert claim.cache_key == "hours:24시간 운영"
    assert claim.source_text == "이곳은 24시간 운영합니다."


def test_unrecognized_claim_type_becomes_unknown():
    claim = Claim(id="c", type="weather", value="맑음", severity="minor")

    assert claim.type == ClaimType.UNKNOWN
    assert claim.source_text == "맑음"


def test_claims_are_immutable():
    claim = Claim(id="c", type="price", value="무료", severity="minor")

    with pytest.raises(ValidationError):
        claim.value = "유료"


def test_severity_priority_order():
    assert sorted(ClaimSeverity, key=lambda s: s.priority) == [
        ClaimSeverity.CRITICAL, ClaimSeverity.MAJOR, ClaimSeverity.MINOR,
    ]


def test_correct_value_requires_false_status():
    with pytest.raises(ValidationError):
        VerificationResult(
            claim_id="c",
            status=VerificationStatus.VERIFIED,
            confidence=90,
            source=VerificationSource.WEB_SEARCH,
            correct_value="09:00",
        )


def test_unknown_result_has_no_effective_confidence():
    result = VerificationResult(
        claim_id="c", status="unknown", confidence=70, source="web_search"
    )

    assert result.effective_confidence == 0
    assert result.is_determined is False


def test_lifecycle_happy_path():
    lifecycle = DocumentLifecycle("post.md")
    for state in (DocumentState.EXTRACTING, DocumentState.VERIFYING,
                  DocumentState.AGGREGATING, DocumentState.DECIDING,
                  DocumentState.QUEUED_FOR_REVIEW, DocumentState.PUBLISHED):
        lifecycle.transition(state)

    assert lifecycle.state.is_terminal
    assert lifecycle.history[0] == DocumentState.PENDING
    assert len(lifecycle.history) == 7


def test_lifecycle_rejects_skipped_steps():
    lifecycle = DocumentLifecycle("post.md")

    with pytest.raises(InvalidTransitionError):
        lifecycle.transition(DocumentState.DECIDING)


def test_terminal_states_have_no_exits():
    lifecycle = DocumentLifecycle("post.md", DocumentState.BLOCKED)

    assert not lifecycle.can_transition(DocumentState.PUBLISHED)


@pytest.mark.parametrize("trigger,action", [
    (ReviewTrigger.CRITICAL_FALSE, ReviewAction.BLOCK),
    (ReviewTrigger.SCORE_50_70, ReviewAction.QUEUE),
    (ReviewTrigger.HIGH_UNKNOWN, ReviewAction.QUEUE),
    (ReviewTrigger.SENSITIVE_TOPIC, ReviewAction.FLAG),
    (ReviewTrigger.NEW_VENUE, ReviewAction.FLAG),
])
def test_trigger_actions(trigger, action):
    assert trigger.action == action


def test_review_case_reads_utc_timestamps():
    case = ReviewCase.model_validate({
        "id": "review-1700000000000-abc123",
        "filePath": "a.md",
        "trigger": "score_50_70",
        "action": "queue",
        "score": 62,
        "createdAt": "2026-01-05T09:00:00.000Z",
    })

    assert case.created_at.tzinfo is None
    assert case.created_at.hour == 9
    assert case.title == "Untitled"
