"""Pytest configuration: test settings, in-memory repository, fake enrichment ports and a FastAPI TestClient."""

# Standard library imports
import asyncio
from collections.abc import Iterator, Sequence
from datetime import UTC, datetime, timedelta
import os

# Override env BEFORE importing application modules so settings pick up test values
os.environ["ENVIRONMENT"] = "test"

# Third-party imports
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

# Local application imports
from civiclink.core.exceptions import EnrichmentUnavailable  # noqa: E402
from civiclink.dependancies.common import get_enrichment, get_geocoding, get_issue_repository  # noqa: E402
from civiclink.repositories.memory_issue_repository import InMemoryIssueRepository  # noqa: E402
from civiclink.schemas.issues import (  # noqa: E402
    Coordinates,
    GapReport,
    ImageCategorization,
    IssueCategory,
    IssueCreate,
    IssuePriority,
    IssueSummary,
    PriorityPrediction,
)
from civiclink.schemas.users import UserRef, Viewer  # noqa: E402
from civiclink.services.auth import create_access_token  # noqa: E402
from civiclink.services.enrichment.ports import MIN_ISSUES_FOR_GAP_ANALYSIS, EnrichmentPort, GeocodingPort  # noqa: E402
from civiclink.services.issues.issue_services import IssueService  # noqa: E402


class FakeEnrichment(EnrichmentPort):
    """Scriptable enrichment port that records every call."""

    def __init__(
        self,
        priority: PriorityPrediction | None = None,
        categorization: ImageCategorization | None = None,
        gap_reports: list[GapReport] | None = None,
        fail: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.priority = priority or PriorityPrediction(priority=IssuePriority.HIGH, justification="Blocks traffic.")
        self.categorization = categorization or ImageCategorization(
            category=IssueCategory.POTHOLES, confidence=0.9, reasoning="Broken asphalt."
        )
        self.gap_reports = gap_reports or []
        self.fail = fail
        self.delay = delay
        self.calls: list[str] = []

    async def _maybe_fail(self, name: str) -> None:
        self.calls.append(name)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise EnrichmentUnavailable(f"{name} is down")

    async def categorize_image(self, image_ref: str) -> ImageCategorization:
        await self._maybe_fail("categorize_image")
        return self.categorization

    async def predict_priority(self, category: IssueCategory, title: str, description: str) -> PriorityPrediction:
        await self._maybe_fail("predict_priority")
        return self.priority

    async def analyze_gaps(self, issues: Sequence[IssueSummary]) -> list[GapReport]:
        if len(issues) < MIN_ISSUES_FOR_GAP_ANALYSIS:
            return []
        await self._maybe_fail("analyze_gaps")
        return self.gap_reports


class FakeGeocoder(GeocodingPort):
    def __init__(self, coordinates: Coordinates | None = None, fail: bool = False) -> None:
        self.coordinates = coordinates or Coordinates(lat=18.52, lng=73.85)
        self.fail = fail
        self.addresses: list[str] = []

    async def resolve(self, address: str) -> Coordinates:
        self.addresses.append(address)
        if self.fail:
            raise EnrichmentUnavailable("geocoder is down")
        return self.coordinates


class StepClock:
    """Deterministic clock; every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 5, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


def make_issue_create(**overrides: object) -> IssueCreate:
    values: dict[str, object] = {
        "title": "Deep pothole near the market",
        "description": "A large pothole has opened up in the left lane and cars swerve around it.",
        "category": IssueCategory.POTHOLES.value,
        "location": "Karve Road, Pune",
        "image_ref": "data:image/png;base64,iVBORw0KGgo=",
    }
    values.update(overrides)
    return IssueCreate(**values)


@pytest.fixture
def reporter() -> UserRef:
    return UserRef(id="user-reporter", name="Asha Patil", avatar_ref="https://img.example/asha.png")


@pytest.fixture
def admin() -> Viewer:
    return Viewer(id="user-admin", name="Ward Officer", is_admin=True)


@pytest.fixture
def citizen() -> Viewer:
    return Viewer(id="user-citizen", name="Ravi Kulkarni")


@pytest.fixture
def repository() -> InMemoryIssueRepository:
    return InMemoryIssueRepository()


@pytest.fixture
def enrichment() -> FakeEnrichment:
    return FakeEnrichment()


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder()


@pytest.fixture
def service(repository: InMemoryIssueRepository, enrichment: FakeEnrichment, geocoder: FakeGeocoder) -> IssueService:
    return IssueService(
        repository,
        enrichment,
        geocoder,
        enrichment_timeout=0.5,
        geocoding_timeout=0.5,
        clock=StepClock(),
    )


def auth_headers(viewer: Viewer) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(viewer)}"}


@pytest.fixture
def client(
    repository: InMemoryIssueRepository,
    enrichment: FakeEnrichment,
    geocoder: FakeGeocoder,
) -> Iterator[TestClient]:
    """FastAPI TestClient wired to the in-memory repository and fake ports."""
    # Local application imports
    from main import create_app

    app = create_app()
    app.dependency_overrides[get_issue_repository] = lambda: repository
    app.dependency_overrides[get_enrichment] = lambda: enrichment
    app.dependency_overrides[get_geocoding] = lambda: geocoder

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
