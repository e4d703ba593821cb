"""Tests for prompt construction and reply parsing."""

from fact_gate.domain.models.verification import VerificationSource, VerificationStatus
from fact_gate.domain.ports.search_provider import GroundedSearchResponse
from fact_gate.domain.services.verification_prompt import (
    build_verification_prompt,
    parse_verification_response,
)


def test_prompt_names_type_value_and_context(make_claim):
    claim = make_claim("09:00-18:00", type="hours", context="평일 기준")

    prompt = build_verification_prompt(claim)

    assert "정보 유형: hours" in prompt
    assert '검증 대상: "09:00-18:00"' in prompt
    assert '문맥: "평일 기준"' in prompt
    assert "이 운영시간이 정확한지" in prompt
    assert "VERIFICATION_STATUS: [VERIFIED/FALSE/UNKNOWN]" in prompt


def test_prompt_without_context(make_claim):
    prompt = build_verification_prompt(make_claim("주차 가능", type="general"))

    assert "문맥" not in prompt
    assert "이 정보가 정확한지" in prompt


def test_parse_false_with_correction(make_claim, make_reply):
    claim = make_claim("24시간", type="hours")
    reply = make_reply("FALSE", 85, correct="09:00-18:00", details="공식 홈페이지 기준",
                       urls=["https://visitkorea.or.kr/x"])

    result = parse_verification_response(claim, reply)

    assert result.status == VerificationStatus.FALSE
    assert result.confidence == 85
    assert result.correct_value == "09:00-18:00"
    assert result.details == "공식 홈페이지 기준"
    assert result.source == VerificationSource.WEB_SEARCH
    assert result.source_url == "https://visitkorea.or.kr/x"


def test_correct_value_dropped_unless_false(make_claim, make_reply):
    result = parse_verification_response(make_claim(), make_reply("VERIFIED", 90, correct="무언가"))

    assert result.status == VerificationStatus.VERIFIED
    assert result.correct_value is None


def test_empty_correct_value_is_not_captured_from_next_line(make_claim, make_reply):
    result = parse_verification_response(make_claim(), make_reply("FALSE", 70, correct=""))

    assert result.correct_value is None
    assert result.details == "확인됨"


def test_placeholder_correct_value_is_ignored(make_claim, make_reply):
    result = parse_verification_response(make_claim(), make_reply("FALSE", 70, correct="[없음]"))

    assert result.correct_value is None


def test_grounding_scores_override_confidence(make_claim, make_reply):
    reply = make_reply("VERIFIED", 40, scores=[0.9, 0.7])

    result = parse_verification_response(make_claim(), reply)

    assert result.confidence == 80


def test_grounding_confidence_rounds_half_up(make_claim, make_reply):
    result = parse_verification_response(make_claim(), make_reply("VERIFIED", 40, scores=[0.125]))

    assert result.confidence == 13


def test_zero_grounding_scores_keep_reported_confidence(make_claim, make_reply):
    result = parse_verification_response(make_claim(), make_reply("VERIFIED", 40, scores=[0.0]))

    assert result.confidence == 40


def test_lowercase_tags_are_accepted(make_claim):
    reply = GroundedSearchResponse(text="verification_status: verified\nconfidence: 77")

    result = parse_verification_response(make_claim(), reply)

    assert result.status == VerificationStatus.VERIFIED
    assert result.confidence == 77


def test_garbage_reply_is_unknown(make_claim):
    result = parse_verification_response(make_claim(), GroundedSearchResponse(text="잘 모르겠습니다"))

    assert result.status == VerificationStatus.UNKNOWN
    assert result.confidence == 50
    assert result.details is None


def test_missing_reply_is_unknown(make_claim):
    result = parse_verification_response(make_claim(), None)

    assert result.status == VerificationStatus.UNKNOWN
    assert result.source_url is None


def test_confidence_is_clamped(make_claim, make_reply):
    result = parse_verification_response(make_claim(), make_reply("VERIFIED", 250))

    assert result.confidence == 100
