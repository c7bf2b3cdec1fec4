"""
Cross-issue gap analysis for the admin view.

Reports are advisory and recomputed from the current issue set. Results are
cached in Redis under a fingerprint of the analysed issues, so any new or
edited report produces a fresh analysis.
"""

# Standard library imports
import asyncio
from collections.abc import Sequence

# Local application imports
from civiclink.core.exceptions import EnrichmentUnavailable
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.schemas.issues.enrichment_schemas import (
    MAX_SUPPORTING_ISSUES,
    MIN_SUPPORTING_ISSUES,
    GapAnalysis,
    GapReport,
    IssueSummary,
)
from civiclink.schemas.issues.issue_schemas import Issue
from civiclink.services.enrichment.ports import MIN_ISSUES_FOR_GAP_ANALYSIS, EnrichmentPort
from civiclink.utils.cache_utils import fingerprint, get_cached_data, set_cached_data

logger = get_contextual_logger(__name__)

GAP_ANALYSIS_CACHE_PREFIX = "civiclink:gap-analysis"


def summarize(issue: Issue) -> IssueSummary:
    return IssueSummary(
        id=issue.id,
        title=issue.title,
        category=issue.category.value,
        address=issue.location.address,
        description=issue.description,
        created_at=issue.created_at,
    )


def sanitize_reports(reports: Sequence[GapReport], known_ids: set[str]) -> list[GapReport]:
    """Drop supporting ids that do not name a real issue, and reports left with fewer than two."""
    cleaned = []
    for report in reports:
        supporting = list(dict.fromkeys(issue_id for issue_id in report.supporting_issue_ids if issue_id in known_ids))
        if len(supporting) < MIN_SUPPORTING_ISSUES:
            logger.info(f"Dropped gap report '{report.problem_area}' with {len(supporting)} known supporting issues")
            continue
        if len(supporting) != len(report.supporting_issue_ids):
            logger.info(f"Dropped unknown supporting issue ids from gap report '{report.problem_area}'")
        cleaned.append(report.model_copy(update={"supporting_issue_ids": supporting[:MAX_SUPPORTING_ISSUES]}))
    return cleaned


async def analyze_gaps(
    issues: Sequence[Issue],
    enrichment: EnrichmentPort,
    *,
    timeout: float,
    cache_seconds: int = 0,
) -> GapAnalysis:
    summaries = sorted((summarize(issue) for issue in issues), key=lambda summary: summary.id)
    if len(summaries) < MIN_ISSUES_FOR_GAP_ANALYSIS:
        return GapAnalysis(assessed=True, gap_reports=[])

    cache_key: str | None = None
    if cache_seconds > 0:
        cache_key = f"{GAP_ANALYSIS_CACHE_PREFIX}:{fingerprint([s.model_dump(mode='json') for s in summaries])}"
        cached = await get_cached_data(cache_key)
        if cached is not None:
            return GapAnalysis.model_validate(cached)

    try:
        reports = await asyncio.wait_for(enrichment.analyze_gaps(summaries), timeout=timeout)
    except (EnrichmentUnavailable, TimeoutError) as exc:
        logger.warning(f"Gap analysis unavailable: {exc!r}")
        return GapAnalysis(assessed=False)

    result = GapAnalysis(assessed=True, gap_reports=sanitize_reports(reports, {s.id for s in summaries}))
    if cache_key is not None:
        await set_cached_data(cache_key, result.model_dump(mode="json"), cache_seconds)
    return result
