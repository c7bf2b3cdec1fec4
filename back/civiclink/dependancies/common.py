# Standard library imports
from functools import lru_cache

# Third-party imports
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

# Local application imports
from civiclink.core.db import AsyncSessionLocal
from civiclink.core.exceptions import ForbiddenError, UnauthorizedError
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.repositories.issue_repository import IssueRepository
from civiclink.repositories.memory_issue_repository import InMemoryIssueRepository
from civiclink.repositories.sql_issue_repository import SqlIssueRepository
from civiclink.schemas.users.user_schemas import Viewer
from civiclink.services.auth import decode_access_token
from civiclink.services.enrichment import EnrichmentPort, GeocodingPort, get_enrichment_port, get_geocoder
from civiclink.services.issues.issue_services import IssueService
from civiclink.settings import settings

logger = get_contextual_logger(__name__)

# Tokens are issued by the identity service; we only verify them
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_issue_repository() -> IssueRepository:
    if settings.STORAGE_BACKEND == "memory":
        return InMemoryIssueRepository()
    return SqlIssueRepository(AsyncSessionLocal)


@lru_cache
def get_enrichment() -> EnrichmentPort:
    return get_enrichment_port()


@lru_cache
def get_geocoding() -> GeocodingPort:
    return get_geocoder()


def schedule_enrichment_task(issue_id: str) -> None:
    # Local application imports
    from civiclink.tasks.enrichment_tasks import enrich_issue_task

    enrich_issue_task.delay(issue_id)
    logger.debug(f"Queued enrichment for issue {issue_id}")


def build_issue_service(
    repository: IssueRepository,
    enrichment: EnrichmentPort,
    geocoder: GeocodingPort,
    dispatch: str | None = None,
) -> IssueService:
    """Wire an ``IssueService`` from settings. ``dispatch`` overrides ``ENRICHMENT_DISPATCH``."""
    dispatch = dispatch or settings.ENRICHMENT_DISPATCH
    return IssueService(
        repository,
        enrichment,
        geocoder,
        enrichment_timeout=settings.ENRICHMENT_TIMEOUT_SECONDS,
        geocoding_timeout=settings.GEOCODING_TIMEOUT_SECONDS,
        max_conflict_retries=settings.MAX_CONFLICT_RETRIES,
        self_upvote=settings.SELF_UPVOTE_ON_CREATE,
        schedule_enrichment=schedule_enrichment_task if dispatch == "celery" else None,
    )


def get_issue_service(
    repository: IssueRepository = Depends(get_issue_repository),
    enrichment: EnrichmentPort = Depends(get_enrichment),
    geocoder: GeocodingPort = Depends(get_geocoding),
) -> IssueService:
    return build_issue_service(repository, enrichment, geocoder)


async def get_viewer_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Viewer | None:
    """Get the viewer if a valid token is provided, otherwise return None"""
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except UnauthorizedError:
        return None


async def get_viewer(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Viewer:
    """Get the viewer from the bearer token"""
    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    return decode_access_token(credentials.credentials)


async def get_admin_user(viewer: Viewer = Depends(get_viewer)) -> Viewer:
    if not viewer.is_admin:
        raise ForbiddenError("Admin access required")
    return viewer
