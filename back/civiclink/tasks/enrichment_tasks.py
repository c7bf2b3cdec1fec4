"""
Background enrichment.

Used when ``ENRICHMENT_DISPATCH=celery``: the request commits the base issue
and returns, and a worker patches the predicted priority in afterwards.
"""

# Standard library imports
from typing import Any

# Third-party imports
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

# Local application imports
from civiclink.core.celery.celery import celery_app
from civiclink.core.db import build_async_engine
from civiclink.core.exceptions import ConflictError, NotFoundError
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.dependancies.common import build_issue_service
from civiclink.repositories.sql_issue_repository import SqlIssueRepository
from civiclink.services.enrichment import get_enrichment_port, get_geocoder
from civiclink.settings import settings
from civiclink.utils.celery_utils import run_async_in_celery


async def enrich_issue(issue_id: str) -> bool:
    """Run one enrichment on a fresh engine; every task gets its own event loop."""
    engine = build_async_engine(settings.SQLALCHEMY_ASYNC_DATABASE_URI)
    session_factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    enrichment = get_enrichment_port()
    geocoder = get_geocoder()
    try:
        service = build_issue_service(SqlIssueRepository(session_factory), enrichment, geocoder, dispatch="inline")
        return await service.enrich_issue(issue_id) is not None
    finally:
        await enrichment.close()
        await geocoder.close()
        await engine.dispose()


@celery_app.task(bind=True, name="civiclink.tasks.enrichment_tasks.enrich_issue_task", max_retries=3)
def enrich_issue_task(self: Any, issue_id: str) -> dict[str, Any]:
    logger = get_contextual_logger(__name__, task_id=self.request.id, issue_id=issue_id)
    try:
        assessed = run_async_in_celery(enrich_issue(issue_id))
    except ConflictError as exc:
        # The issue kept changing under us; try again later
        raise self.retry(exc=exc, countdown=5 * (2**self.request.retries))
    except NotFoundError:
        logger.warning("Issue disappeared before it could be enriched")
        return {"issue_id": issue_id, "assessed": False}

    return {"issue_id": issue_id, "assessed": assessed}
