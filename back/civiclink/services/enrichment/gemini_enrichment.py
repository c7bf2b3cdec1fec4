"""
Gemini-backed enrichment through the Generative Language REST API.

Each call asks for a JSON answer (``responseMimeType=application/json``) and
validates it with pydantic. Transport errors, non-2xx replies and answers
that do not parse are all reported as ``EnrichmentUnavailable``.
"""

# Standard library imports
from collections.abc import Sequence
import json
import re
from typing import Any

# Third-party imports
import httpx
from pydantic import ValidationError as PydanticValidationError

# Local application imports
from civiclink.core.exceptions import EnrichmentUnavailable
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.schemas.issues.enrichment_schemas import (
    MAX_SUPPORTING_ISSUES,
    GapReport,
    ImageCategorization,
    IssueSummary,
    PriorityPrediction,
)
from civiclink.schemas.issues.issue_schemas import IssueCategory
from civiclink.services.enrichment.ports import MIN_ISSUES_FOR_GAP_ANALYSIS, EnrichmentPort

logger = get_contextual_logger(__name__, provider="gemini")

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)

# Confidence reported when the model names a category outside the closed list
OFF_LIST_CONFIDENCE = 0.5
MAX_GAP_REPORTS = 3

CATEGORY_LIST = "\n".join(f"- {category.value}" for category in IssueCategory)

CATEGORIZE_PROMPT = f"""You analyse photos of civic and municipal problems for a city authority.
Pick exactly one category for the photo from this list:
{CATEGORY_LIST}

If the photo shows several problems, pick the most prominent or severe one.
If it does not clearly show a civic problem, answer "Other".
Answer as JSON: {{"category": <one of the categories above>, "confidence": <number 0..1>, "reasoning": <one sentence>}}"""

PRIORITY_PROMPT = """You are a senior municipal operations manager triaging a new civic issue report.

Category: {category}
Title: {title}
Description: {description}

Priority levels:
- High: immediate threat to public safety, major health hazard, critical infrastructure failure or serious disruption of traffic or essential services.
- Medium: significant inconvenience or potential hazard affecting many citizens, but not an emergency.
- Low: minor inconvenience, cosmetic problem or non-urgent maintenance.

Answer as JSON: {{"priority": "High" | "Medium" | "Low", "justification": <one sentence>}}"""

GAP_PROMPT = """You are an urban planning analyst. Below is a list of civic issue reports.
Find clusters of similar problems in the same area that point to a missing or failing piece of city infrastructure
(for example repeated garbage dumps in one neighbourhood suggesting too few bins, or several potholes on one road
suggesting it needs resurfacing rather than patching).

Report at most {max_reports} gaps. For each give the area, the kind of problem, a concrete suggestion for the city,
2 to 3 ids of issues that support it and a one-sentence reasoning.

Answer as JSON: {{"gap_analysis": [{{"problem_area": str, "problem_type": str, "suggestion": str,
"supporting_issue_ids": [str], "reasoning": str}}]}}

Issues:
{issues}"""


def parse_data_uri(image_ref: str) -> tuple[str, str]:
    """Split a ``data:<mime>;base64,<payload>`` reference into (mime type, payload)."""
    match = DATA_URI_PATTERN.match(image_ref.strip())
    if not match:
        raise EnrichmentUnavailable("Image reference is not a base64 data URI")
    return match.group("mime"), match.group("data")


def categorization_from_answer(answer: dict[str, Any]) -> ImageCategorization:
    """Validate a categorization answer, mapping off-list categories to ``Other``."""
    raw_category = answer.get("category")
    try:
        category = IssueCategory(raw_category)
    except ValueError:
        logger.warning(f"Model returned unknown category '{raw_category}', using Other")
        return ImageCategorization(
            category=IssueCategory.OTHER,
            confidence=OFF_LIST_CONFIDENCE,
            reasoning=f"Original category '{raw_category}' was not in the category list",
        )
    confidence = min(max(float(answer.get("confidence", 0.0)), 0.0), 1.0)
    return ImageCategorization(category=category, confidence=confidence, reasoning=answer.get("reasoning"))


class GeminiEnrichment(EnrichmentPort):
    def __init__(
        self,
        api_key: str,
        model: str,
        api_base: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._api_base = api_base.rstrip("/")
        self._timeout = timeout
        self._client = client

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _generate_json(self, parts: list[dict[str, Any]]) -> dict[str, Any]:
        client = self._ensure_client()
        url = f"{self._api_base}/{self._model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        try:
            response = await client.post(
                url,
                json=payload,
                params={"key": self._api_key},
                headers={"Content-Type": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(f"Gemini returned HTTP {exc.response.status_code}")
            raise EnrichmentUnavailable(f"Gemini returned HTTP {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.warning(f"Gemini request failed: {exc}")
            raise EnrichmentUnavailable(f"Gemini request failed: {exc}")

        try:
            candidates = response.json().get("candidates", [])
            text = "".join(part.get("text", "") for part in candidates[0]["content"]["parts"])
            answer = json.loads(text)
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise EnrichmentUnavailable(f"Gemini answer could not be parsed: {exc}")
        if not isinstance(answer, dict):
            raise EnrichmentUnavailable("Gemini answer is not a JSON object")
        return answer

    async def categorize_image(self, image_ref: str) -> ImageCategorization:
        mime_type, data = parse_data_uri(image_ref)
        answer = await self._generate_json(
            [
                {"text": CATEGORIZE_PROMPT},
                {"inline_data": {"mime_type": mime_type, "data": data}},
            ]
        )
        try:
            return categorization_from_answer(answer)
        except (TypeError, ValueError) as exc:
            raise EnrichmentUnavailable(f"Invalid categorization answer: {exc}")

    async def predict_priority(self, category: IssueCategory, title: str, description: str) -> PriorityPrediction:
        prompt = PRIORITY_PROMPT.format(category=IssueCategory(category).value, title=title, description=description)
        answer = await self._generate_json([{"text": prompt}])
        try:
            return PriorityPrediction.model_validate(answer)
        except PydanticValidationError as exc:
            raise EnrichmentUnavailable(f"Invalid priority answer: {exc}")

    async def analyze_gaps(self, issues: Sequence[IssueSummary]) -> list[GapReport]:
        if len(issues) < MIN_ISSUES_FOR_GAP_ANALYSIS:
            return []

        listing = "\n".join(
            f'- Issue ID: {issue.id}\n  Title: "{issue.title}"\n  Category: {issue.category}\n'
            f'  Location: {issue.address}\n  Description: "{issue.description}"'
            for issue in issues
        )
        answer = await self._generate_json([{"text": GAP_PROMPT.format(max_reports=MAX_GAP_REPORTS, issues=listing)}])
        items = answer.get("gap_analysis", [])
        if not isinstance(items, list):
            raise EnrichmentUnavailable("Invalid gap analysis answer: 'gap_analysis' is not a list")

        reports = []
        for item in items:
            if isinstance(item, dict) and isinstance(item.get("supporting_issue_ids"), list):
                supporting = list(dict.fromkeys(str(issue_id) for issue_id in item["supporting_issue_ids"]))
                item = {**item, "supporting_issue_ids": supporting[:MAX_SUPPORTING_ISSUES]}
            try:
                reports.append(GapReport.model_validate(item))
            except PydanticValidationError as exc:
                logger.warning(f"Skipping malformed gap report: {exc.error_count()} validation errors")
        return reports[:MAX_GAP_REPORTS]
