"""
Interfaces for the external collaborators the issue lifecycle consults.

Every call is advisory and may fail independently; adapters raise
``EnrichmentUnavailable`` and callers downgrade to "unassessed".
"""

# Standard library imports
from abc import ABC, abstractmethod
from collections.abc import Sequence

# Local application imports
from civiclink.schemas.issues.enrichment_schemas import (
    Coordinates,
    GapReport,
    ImageCategorization,
    IssueSummary,
    PriorityPrediction,
)
from civiclink.schemas.issues.issue_schemas import IssueCategory

# Below this many issues there is nothing worth clustering
MIN_ISSUES_FOR_GAP_ANALYSIS = 5


class EnrichmentPort(ABC):
    @abstractmethod
    async def categorize_image(self, image_ref: str) -> ImageCategorization:
        """Suggest a category for a photo given as a data URI."""

    @abstractmethod
    async def predict_priority(self, category: IssueCategory, title: str, description: str) -> PriorityPrediction:
        """Estimate how urgent a new report is."""

    @abstractmethod
    async def analyze_gaps(self, issues: Sequence[IssueSummary]) -> list[GapReport]:
        """
        Look for recurring problems across the issue set.

        Implementations return an empty list without calling out when fewer
        than ``MIN_ISSUES_FOR_GAP_ANALYSIS`` issues are given.
        """

    async def close(self) -> None:
        return None


class GeocodingPort(ABC):
    @abstractmethod
    async def resolve(self, address: str) -> Coordinates:
        """Turn a free-text address into coordinates."""

    async def close(self) -> None:
        return None
