"""Prompt construction and reply parsing for grounded verification."""

import logging
import re
from typing import Optional

from ..models.claim import Claim, ClaimType
from ..models.verification import (
    VerificationResult,
    VerificationSource,
    VerificationStatus,
)
from ..ports.search_provider import GroundedSearchResponse
from .report_builder import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 50

_TYPE_QUESTIONS = {
    ClaimType.VENUE_EXISTS: "이 장소가 실제로 존재하는지",
    ClaimType.LOCATION: "이 주소가 정확한지",
    ClaimType.HOURS: "이 운영시간이 정확한지",
    ClaimType.EVENT_PERIOD: "이 전시/이벤트 기간이 정확한지",
    ClaimType.PRICE: "이 가격 정보가 정확한지",
    ClaimType.FACILITIES: "이 시설 정보가 정확한지",
    ClaimType.CONTACT: "이 연락처가 정확한지",
    ClaimType.TRANSPORT: "이 교통 정보가 정확한지",
}
_DEFAULT_QUESTION = "이 정보가 정확한지"

_STATUS_RE = re.compile(r"VERIFICATION_STATUS:\s*(VERIFIED|FALSE|UNKNOWN)", re.IGNORECASE)
_CONFIDENCE_RE = re.compile(r"CONFIDENCE:\s*(\d+)", re.IGNORECASE)
_CORRECT_VALUE_RE = re.compile(r"CORRECT_VALUE:[ \t]*([^\n]*)", re.IGNORECASE)
_DETAILS_RE = re.compile(r"DETAILS:[ \t]*([^\n]*)", re.IGNORECASE)

# Placeholders models echo back instead of leaving the field empty
_EMPTY_VALUES = {"", "-", "n/a", "none", "없음", "빈 칸", "[]"}


def build_verification_prompt(claim: Claim) -> str:
    """Build the Korean verification prompt for ``claim``."""
    question = _TYPE_QUESTIONS.get(claim.type, _DEFAULT_QUESTION)
    lines = [
        "다음 정보를 검증해주세요:",
        "",
        f"정보 유형: {claim.type.value}",
        f'검증 대상: "{claim.value}"',
    ]
    if claim.context:
        lines.append(f'문맥: "{claim.context}"')
    lines.extend([
        "",
        f"{question} 확인하고, 다음 형식으로 정확히 응답해주세요:",
        "",
        "VERIFICATION_STATUS: [VERIFIED/FALSE/UNKNOWN]",
        "CONFIDENCE: [0-100 사이 숫자]",
        "CORRECT_VALUE: [틀린 경우 정확한 값, 맞으면 빈 칸]",
        "DETAILS: [추가 설명]",
        "",
        "참고:",
        "- VERIFIED: 정보가 정확함",
        "- FALSE: 정보가 틀림 (정확한 값 제시 필수)",
        "- UNKNOWN: 확인 불가능 (정보 부족 또는 검색 결과 없음)",
    ])
    return "\n".join(lines)


def _clamp(value: int) -> int:
    return max(0, min(100, value))


def _optional_text(match: Optional[re.Match]) -> Optional[str]:
    if not match:
        return None
    text = match.group(1).strip()
    if text.strip("[]").strip().lower() in _EMPTY_VALUES:
        return None
    return text


def parse_verification_response(
    claim: Claim,
    response: Optional[GroundedSearchResponse],
) -> VerificationResult:
    """Parse a grounded reply into a result for ``claim``.

    Never raises: any missing or malformed field falls back to
    ``unknown`` / confidence 50. Evidence confidence scores, when present
    and positive, replace the self-reported confidence.
    """
    text = (response.text if response else "") or ""

    status_match = _STATUS_RE.search(text)
    status = (
        VerificationStatus(status_match.group(1).lower())
        if status_match
        else VerificationStatus.UNKNOWN
    )

    confidence_match = _CONFIDENCE_RE.search(text)
    confidence = int(confidence_match.group(1)) if confidence_match else DEFAULT_CONFIDENCE

    scores = [s for s in (response.confidence_scores if response else []) if s is not None]
    if scores:
        mean = sum(scores) / len(scores)
        if mean > 0:
            confidence = round_half_up(mean * 100)

    correct_value = _optional_text(_CORRECT_VALUE_RE.search(text))
    details = _optional_text(_DETAILS_RE.search(text))

    if status_match is None:
        logger.debug(f"⚠️ No verification status in reply for claim {claim.id}")

    return VerificationResult(
        claim_id=claim.id,
        status=status,
        confidence=_clamp(confidence),
        source=VerificationSource.WEB_SEARCH,
        source_url=response.first_evidence_url if response else None,
        correct_value=correct_value if status == VerificationStatus.FALSE else None,
        details=details,
    )
