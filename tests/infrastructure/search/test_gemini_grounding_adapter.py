"""Tests for the Gemini grounding adapter."""

import json

import httpx
import pytest

from fact_gate.domain.errors import (
    AuthenticationError,
    ConfigurationError,
    QuotaExceededError,
    TransientSourceError,
)
from fact_gate.infrastructure.search.gemini_grounding_adapter import (
    GeminiConfig,
    GeminiGroundingAdapter,
    parse_generate_content,
)

GROUNDED_PAYLOAD = {
    "candidates": [{
        "content": {"parts": [
            {"text": "VERIFICATION_STATUS: FALSE\n"},
            {"text": "CONFIDENCE: 90\nCORRECT_VALUE: 09:00-18:00\nDETAILS: 공식 홈페이지"},
        ]},
        "groundingMetadata": {
            "webSearchQueries": ["국립중앙박물관 운영시간"],
            "groundingChunks": [
                {"web": {"uri": "https://www.museum.go.kr", "title": "museum.go.kr"}},
                {"web": {"uri": "https://ko.wikipedia.org/wiki/x", "title": "wikipedia"}},
            ],
            "groundingSupports": [
                {"segment": {"text": "..."}, "confidenceScores": [0.9, 0.8]},
                {"segment": {"text": "..."}, "confidenceScores": [0.7]},
            ],
        },
    }]
}


def make_adapter(handler) -> GeminiGroundingAdapter:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiGroundingAdapter(GeminiConfig(api_key="test-key"), client=client)


def test_parse_grounded_payload():
    result = parse_generate_content(GROUNDED_PAYLOAD)

    assert result.text.startswith("VERIFICATION_STATUS: FALSE\nCONFIDENCE: 90")
    assert result.first_evidence_url == "https://www.museum.go.kr"
    assert len(result.evidence) == 2
    assert result.confidence_scores == [0.9, 0.8, 0.7]
    assert result.search_queries == ["국립중앙박물관 운영시간"]


def test_parse_tolerates_missing_metadata():
    assert parse_generate_content({}).text == ""

    result = parse_generate_content({"candidates": [{"content": {"parts": [{"text": "hi"}]}}]})

    assert result.text == "hi"
    assert result.evidence == []
    assert result.confidence_scores == []


@pytest.mark.asyncio
async def test_ask_sends_grounded_request():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=GROUNDED_PAYLOAD)

    adapter = make_adapter(handler)
    await adapter.initialize()

    result = await adapter.ask("검증해주세요")

    request = seen[0]
    body = json.loads(request.content)
    assert request.method == "POST"
    assert request.url.path == "/v1beta/models/gemini-2.0-flash:generateContent"
    assert request.headers["x-goog-api-key"] == "test-key"
    assert body["tools"] == [{"google_search": {}}]
    assert body["contents"][0]["parts"][0]["text"] == "검증해주세요"
    assert result.first_evidence_url == "https://www.museum.go.kr"


@pytest.mark.asyncio
@pytest.mark.parametrize("status,text,error", [
    (400, '{"error": {"status": "INVALID_ARGUMENT", "details": [{"reason": "API_KEY_INVALID"}]}}',
     AuthenticationError),
    (403, "forbidden", AuthenticationError),
    (429, "Quota exceeded for metric GenerateRequestsPerDayPerProjectPerModel", QuotaExceededError),
    (429, "Resource has been exhausted (e.g. check quota).", TransientSourceError),
    (500, "internal", TransientSourceError),
])
async def test_error_mapping(status, text, error):
    adapter = make_adapter(lambda request: httpx.Response(status, text=text))
    await adapter.initialize()

    with pytest.raises(error):
        await adapter.ask("prompt")


@pytest.mark.asyncio
async def test_malformed_json_is_transient():
    adapter = make_adapter(lambda request: httpx.Response(200, text="<html>"))
    await adapter.initialize()

    with pytest.raises(TransientSourceError):
        await adapter.ask("prompt")


@pytest.mark.asyncio
async def test_timeout_is_transient():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    adapter = make_adapter(handler)
    await adapter.initialize()

    with pytest.raises(TransientSourceError, match="timeout"):
        await adapter.ask("prompt")


@pytest.mark.asyncio
async def test_initialize_requires_key():
    adapter = GeminiGroundingAdapter(GeminiConfig(api_key=""))

    with pytest.raises(ConfigurationError):
        await adapter.initialize()
    assert adapter.is_available is False


@pytest.mark.asyncio
async def test_provider_properties():
    adapter = make_adapter(lambda request: httpx.Response(200, json={}))
    await adapter.initialize()

    assert adapter.provider_name == "gemini_grounding"
    assert adapter.is_available is True
    assert adapter.capabilities["web_search"] is True

    await adapter.shutdown()
    assert adapter.is_available is False
