# Standard library imports
from collections.abc import Sequence

# Local application imports
from civiclink.core.exceptions import EnrichmentUnavailable
from civiclink.schemas.issues.enrichment_schemas import (
    Coordinates,
    GapReport,
    ImageCategorization,
    IssueSummary,
    PriorityPrediction,
)
from civiclink.schemas.issues.issue_schemas import IssueCategory
from civiclink.services.enrichment.ports import EnrichmentPort, GeocodingPort


class DisabledEnrichment(EnrichmentPort):
    """Used when no AI provider is configured. Every call reports itself unavailable."""

    async def categorize_image(self, image_ref: str) -> ImageCategorization:
        raise EnrichmentUnavailable("Image categorization is not configured")

    async def predict_priority(self, category: IssueCategory, title: str, description: str) -> PriorityPrediction:
        raise EnrichmentUnavailable("Priority prediction is not configured")

    async def analyze_gaps(self, issues: Sequence[IssueSummary]) -> list[GapReport]:
        raise EnrichmentUnavailable("Gap analysis is not configured")


class DisabledGeocoder(GeocodingPort):
    async def resolve(self, address: str) -> Coordinates:
        raise EnrichmentUnavailable("Geocoding is not configured")
