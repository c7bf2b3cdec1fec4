"""Tests for the Gemini and Nominatim adapters against a mocked HTTP transport."""

# Standard library imports
from datetime import UTC, datetime
import json

# Third-party imports
import httpx
import pytest

# Local application imports
from civiclink.core.exceptions import EnrichmentUnavailable
from civiclink.schemas.issues import IssueCategory, IssuePriority, IssueSummary
from civiclink.services.enrichment import DisabledEnrichment, DisabledGeocoder
from civiclink.services.enrichment.gemini_enrichment import (
    OFF_LIST_CONFIDENCE,
    GeminiEnrichment,
    categorization_from_answer,
    parse_data_uri,
)
from civiclink.services.enrichment.nominatim_geocoding import NominatimGeocoder

API_BASE = "https://gemini.test/v1beta/models"


def gemini_reply(answer: object, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        json={"candidates": [{"content": {"parts": [{"text": json.dumps(answer)}]}}]},
    )


def make_gemini(handler) -> tuple[GeminiEnrichment, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
    return GeminiEnrichment(api_key="test-key", model="gemini-test", api_base=API_BASE, client=client), requests


def make_summaries(count: int) -> list[IssueSummary]:
    return [
        IssueSummary(
            id=f"issue-{i}",
            title=f"Garbage pile {i}",
            category=IssueCategory.GARBAGE_DUMP.value,
            address="Kothrud",
            description="Bins overflowing again.",
            created_at=datetime(2024, 2, 1, tzinfo=UTC),
        )
        for i in range(count)
    ]


class TestDataUri:
    def test_splits_mime_type_and_payload(self):
        assert parse_data_uri("data:image/jpeg;base64,/9j/4AAQ") == ("image/jpeg", "/9j/4AAQ")

    @pytest.mark.parametrize("image_ref", ["https://example.com/a.png", "data:image/png,notbase64", ""])
    def test_rejects_other_references(self, image_ref):
        with pytest.raises(EnrichmentUnavailable):
            parse_data_uri(image_ref)


class TestCategorizationAnswer:
    def test_known_category(self):
        result = categorization_from_answer(
            {"category": "Blocked Drains", "confidence": 0.82, "reasoning": "Water pooling over a grate."}
        )

        assert result.category is IssueCategory.BLOCKED_DRAINS
        assert result.confidence == 0.82

    def test_off_list_category_becomes_other(self):
        result = categorization_from_answer({"category": "Alien landing", "confidence": 0.99})

        assert result.category is IssueCategory.OTHER
        assert result.confidence == OFF_LIST_CONFIDENCE
        assert "Alien landing" in result.reasoning

    def test_confidence_is_clamped(self):
        assert categorization_from_answer({"category": "Other", "confidence": 7}).confidence == 1.0
        assert categorization_from_answer({"category": "Other", "confidence": -2}).confidence == 0.0


class TestGeminiEnrichment:
    @pytest.mark.asyncio
    async def test_categorize_image_sends_inline_data(self):
        gemini, requests = make_gemini(
            lambda request: gemini_reply({"category": "Sewerage Overflow", "confidence": 0.7, "reasoning": "Sewage."})
        )

        result = await gemini.categorize_image("data:image/png;base64,iVBORw0KGgo=")

        assert result.category is IssueCategory.SEWERAGE_OVERFLOW
        request = requests[0]
        assert request.url.path == "/v1beta/models/gemini-test:generateContent"
        assert request.url.params["key"] == "test-key"
        body = json.loads(request.content)
        assert body["generationConfig"]["responseMimeType"] == "application/json"
        assert body["contents"][0]["parts"][1] == {"inline_data": {"mime_type": "image/png", "data": "iVBORw0KGgo="}}
        await gemini.close()

    @pytest.mark.asyncio
    async def test_predict_priority(self):
        gemini, requests = make_gemini(
            lambda request: gemini_reply({"priority": "Low", "justification": "Cosmetic damage only."})
        )

        prediction = await gemini.predict_priority(IssueCategory.ILLEGAL_BANNERS, "Old banner", "Torn banner on a pole")

        assert prediction.priority is IssuePriority.LOW
        prompt = json.loads(requests[0].content)["contents"][0]["parts"][0]["text"]
        assert "Illegal Banners or Hoardings" in prompt
        assert "Torn banner on a pole" in prompt

    @pytest.mark.asyncio
    async def test_invalid_priority_answer(self):
        gemini, _ = make_gemini(lambda request: gemini_reply({"priority": "Urgent", "justification": "?"}))

        with pytest.raises(EnrichmentUnavailable):
            await gemini.predict_priority(IssueCategory.OTHER, "Title", "Some description")

    @pytest.mark.asyncio
    async def test_http_error_is_unavailable(self):
        gemini, _ = make_gemini(lambda request: httpx.Response(503, json={"error": "overloaded"}))

        with pytest.raises(EnrichmentUnavailable):
            await gemini.predict_priority(IssueCategory.OTHER, "Title", "Some description")

    @pytest.mark.asyncio
    async def test_transport_error_is_unavailable(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        gemini, _ = make_gemini(refuse)

        with pytest.raises(EnrichmentUnavailable):
            await gemini.predict_priority(IssueCategory.OTHER, "Title", "Some description")

    @pytest.mark.asyncio
    async def test_unparseable_answer_is_unavailable(self):
        gemini, _ = make_gemini(
            lambda request: httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "not json"}]}}]})
        )

        with pytest.raises(EnrichmentUnavailable):
            await gemini.predict_priority(IssueCategory.OTHER, "Title", "Some description")

    @pytest.mark.asyncio
    async def test_gap_analysis_skips_small_sets(self):
        gemini, requests = make_gemini(lambda request: gemini_reply({"gap_analysis": []}))

        assert await gemini.analyze_gaps(make_summaries(4)) == []
        assert requests == []

    @pytest.mark.asyncio
    async def test_gap_analysis_is_capped(self):
        report = {
            "problem_area": "Kothrud",
            "problem_type": "Garbage",
            "suggestion": "Add more bins",
            "supporting_issue_ids": ["issue-0", "issue-1"],
            "reasoning": "Repeated overflow.",
        }
        gemini, requests = make_gemini(lambda request: gemini_reply({"gap_analysis": [report] * 5}))

        reports = await gemini.analyze_gaps(make_summaries(6))

        assert len(reports) == 3
        assert reports[0].suggestion == "Add more bins"
        assert "issue-5" in json.loads(requests[0].content)["contents"][0]["parts"][0]["text"]

    @pytest.mark.asyncio
    async def test_gap_reports_need_two_to_three_supporting_issues(self):
        def report(*supporting_ids: str) -> dict:
            return {
                "problem_area": "Kothrud",
                "problem_type": "Garbage",
                "suggestion": "Add more bins",
                "supporting_issue_ids": list(supporting_ids),
                "reasoning": "Repeated overflow.",
            }

        answer = {
            "gap_analysis": [
                report("issue-0"),
                report("issue-0", "issue-1", "issue-1", "issue-2", "issue-3"),
                report("issue-4", "issue-4"),
            ]
        }
        gemini, _ = make_gemini(lambda request: gemini_reply(answer))

        reports = await gemini.analyze_gaps(make_summaries(6))

        assert [r.supporting_issue_ids for r in reports] == [["issue-0", "issue-1", "issue-2"]]


class TestNominatimGeocoder:
    @pytest.mark.asyncio
    async def test_resolves_first_match(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[{"lat": "18.5204", "lon": "73.8567"}])

        geocoder = NominatimGeocoder(
            url="https://nominatim.test/search",
            user_agent="civiclink-tests",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        )

        coordinates = await geocoder.resolve("Shaniwar Wada, Pune")

        assert (coordinates.lat, coordinates.lng) == (18.5204, 73.8567)
        assert seen[0].url.params["q"] == "Shaniwar Wada, Pune"
        assert seen[0].url.params["limit"] == "1"
        await geocoder.close()

    @pytest.mark.asyncio
    async def test_no_match_is_unavailable(self):
        geocoder = NominatimGeocoder(
            url="https://nominatim.test/search",
            user_agent="civiclink-tests",
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[]))),
        )

        with pytest.raises(EnrichmentUnavailable):
            await geocoder.resolve("Nowhere")


class TestDisabledPorts:
    @pytest.mark.asyncio
    async def test_every_call_is_unavailable(self):
        with pytest.raises(EnrichmentUnavailable):
            await DisabledEnrichment().predict_priority(IssueCategory.OTHER, "Title", "Description")
        with pytest.raises(EnrichmentUnavailable):
            await DisabledGeocoder().resolve("Anywhere")
