"""
Issue use cases.

``IssueService`` is the transactional boundary of the issue lifecycle. Every
mutation is a read-modify-write of one issue, written back with a
compare-and-swap on the issue version and retried on conflict. Calls to the
enrichment and geocoding ports happen outside those cycles and are never
allowed to fail the primary operation.
"""

# Standard library imports
import asyncio
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TypeVar
import uuid

# Local application imports
from civiclink.core.exceptions import (
    CivicLinkError,
    ConflictError,
    EnrichmentUnavailable,
    ForbiddenError,
    UnauthorizedError,
    ValidationError,
)
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.repositories.issue_repository import IssueRepository
from civiclink.schemas.issues.enrichment_schemas import CategorySuggestion, Coordinates
from civiclink.schemas.issues.issue_schemas import (
    Comment,
    Issue,
    IssueCategory,
    IssueCreate,
    IssueFilter,
    IssueLocation,
    IssueStatus,
)
from civiclink.schemas.issues.vote_schemas import VoteDirection, VoteOutcome
from civiclink.schemas.users.user_schemas import UserRef, Viewer
from civiclink.services.enrichment.disabled import DisabledEnrichment, DisabledGeocoder
from civiclink.services.enrichment.ports import EnrichmentPort, GeocodingPort
from civiclink.services.issues.issue_aggregate import IssueAggregate
from civiclink.services.issues.vote_ledger import parse_direction

logger = get_contextual_logger(__name__)

T = TypeVar("T")

MIN_TITLE_LENGTH = 5
MIN_DESCRIPTION_LENGTH = 10


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_id() -> str:
    return str(uuid.uuid4())


def validate_issue_create(cmd: IssueCreate) -> IssueCategory:
    """
    Check a submission field by field.

    Returns:
        The parsed category.

    Raises:
        ValidationError: with one message per offending field.
    """
    errors: dict[str, str] = {}
    if len(cmd.title.strip()) < MIN_TITLE_LENGTH:
        errors["title"] = f"Title must be at least {MIN_TITLE_LENGTH} characters."
    if len(cmd.description.strip()) < MIN_DESCRIPTION_LENGTH:
        errors["description"] = f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters."
    category: IssueCategory | None = None
    try:
        category = IssueCategory(cmd.category)
    except ValueError:
        errors["category"] = "Please select a valid category."
    if not cmd.location.strip():
        errors["location"] = "Location is required."
    if (cmd.latitude is None) != (cmd.longitude is None):
        errors["latitude"] = "Latitude and longitude must be given together."
    if errors or category is None:
        raise ValidationError(errors)
    return category


def matches_filter(issue: Issue, issue_filter: IssueFilter) -> bool:
    """Conjunction of every predicate set on the filter."""
    if issue_filter.status is not None and issue.status is not issue_filter.status:
        return False
    if issue_filter.category is not None and issue.category is not issue_filter.category:
        return False
    if issue_filter.priority is not None and issue.priority is not issue_filter.priority:
        return False
    if issue_filter.reporter_id and issue.reporter.id != issue_filter.reporter_id:
        return False
    search = (issue_filter.search_text or "").strip().lower()
    if search and search not in issue.title.lower():
        return False
    return True


class IssueService:
    def __init__(
        self,
        repository: IssueRepository,
        enrichment: EnrichmentPort | None = None,
        geocoder: GeocodingPort | None = None,
        *,
        enrichment_timeout: float = 5.0,
        geocoding_timeout: float = 5.0,
        max_conflict_retries: int = 3,
        self_upvote: bool = False,
        schedule_enrichment: Callable[[str], None] | None = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self.repository = repository
        self.enrichment = enrichment or DisabledEnrichment()
        self.geocoder = geocoder or DisabledGeocoder()
        self.enrichment_timeout = enrichment_timeout
        self.geocoding_timeout = geocoding_timeout
        self.max_attempts = max(1, max_conflict_retries)
        self.self_upvote = self_upvote
        self.schedule_enrichment = schedule_enrichment
        self.clock = clock
        self.id_factory = id_factory

    async def _mutate(self, issue_id: str, mutation: Callable[[IssueAggregate], T]) -> tuple[Issue, T]:
        """
        Load, apply ``mutation`` and compare-and-swap the result back.

        The mutation is re-applied to a fresh copy after every conflict, up to
        ``max_attempts`` times in total. Errors raised by the mutation itself
        propagate before anything is written.
        """
        for attempt in range(1, self.max_attempts + 1):
            aggregate = await self.repository.get(issue_id)
            expected_version = aggregate.version
            result = mutation(aggregate)
            try:
                issue = await self.repository.upsert(aggregate, expected_version=expected_version)
                return issue, result
            except ConflictError:
                if attempt == self.max_attempts:
                    logger.warning(f"Giving up on issue {issue_id} after {attempt} conflicting writes")
                    raise
                logger.info(f"Write conflict on issue {issue_id}, retrying (attempt {attempt + 1})")
        raise ConflictError(f"Issue {issue_id} could not be written")

    async def _geocode(self, cmd: IssueCreate) -> Coordinates:
        if cmd.latitude is not None and cmd.longitude is not None:
            return Coordinates(lat=cmd.latitude, lng=cmd.longitude)
        try:
            return await asyncio.wait_for(self.geocoder.resolve(cmd.location.strip()), timeout=self.geocoding_timeout)
        except (EnrichmentUnavailable, TimeoutError) as exc:
            logger.warning(f"Geocoding failed for address '{cmd.location}', storing 0,0: {exc!r}")
        except Exception:
            logger.exception(f"Unexpected geocoding error for address '{cmd.location}', storing 0,0")
        return Coordinates(lat=0.0, lng=0.0)

    async def create_issue(self, cmd: IssueCreate, reporter: UserRef | None) -> Issue:
        """
        Validate and persist a citizen report.

        The base record is committed before any enrichment runs. Priority
        prediction then either runs inline as a separate patch or is handed
        to ``schedule_enrichment``; its failure never fails the creation.

        Raises:
            UnauthorizedError: no reporter.
            ValidationError: field-level problems with the submission.
        """
        if reporter is None:
            raise UnauthorizedError("Reporting an issue requires a signed-in user")
        category = validate_issue_create(cmd)
        coordinates = await self._geocode(cmd)

        aggregate = IssueAggregate.create(
            issue_id=self.id_factory(),
            title=cmd.title.strip(),
            description=cmd.description.strip(),
            category=category,
            location=IssueLocation(address=cmd.location.strip(), lat=coordinates.lat, lng=coordinates.lng),
            image_ref=cmd.image_ref,
            reporter=UserRef(id=reporter.id, name=reporter.name, avatar_ref=reporter.avatar_ref),
            created_at=self.clock(),
            self_upvote=self.self_upvote,
        )
        issue = await self.repository.add(aggregate)
        logger.info(f"Issue {issue.id} created by {reporter.id} in category '{category.value}'")

        if self.schedule_enrichment is not None:
            try:
                self.schedule_enrichment(issue.id)
            except Exception:
                logger.exception(f"Could not schedule enrichment for issue {issue.id}")
            return issue

        # The issue is already committed; a failed priority patch must not fail the report
        try:
            enriched = await self.enrich_issue(issue.id)
        except CivicLinkError as exc:
            logger.warning(f"Priority patch for issue {issue.id} was not written: {exc!r}")
            return issue
        except Exception:
            logger.exception(f"Unexpected error while writing the priority patch for issue {issue.id}")
            return issue
        return enriched or issue

    async def enrich_issue(self, issue_id: str) -> Issue | None:
        """
        Predict and attach a priority to an existing issue.

        Returns the patched issue, or None when the prediction was unavailable
        and the issue stays unassessed.
        """
        ctx_logger = logger.bind(issue_id=issue_id)
        issue = (await self.repository.get(issue_id)).snapshot()
        try:
            prediction = await asyncio.wait_for(
                self.enrichment.predict_priority(issue.category, issue.title, issue.description),
                timeout=self.enrichment_timeout,
            )
        except (EnrichmentUnavailable, TimeoutError) as exc:
            ctx_logger.warning(f"Priority prediction unavailable: {exc!r}")
            return None
        except Exception:
            ctx_logger.exception("Unexpected error while predicting priority")
            return None

        patched, _ = await self._mutate(
            issue_id,
            lambda aggregate: aggregate.set_priority(prediction.priority, prediction.justification),
        )
        ctx_logger.info(f"Priority set to {prediction.priority.value}")
        return patched

    async def record_vote(
        self,
        issue_id: str,
        voter_id: str | None,
        direction: VoteDirection | str,
    ) -> tuple[Issue, VoteOutcome]:
        """Cast a vote and also return the ledger outcome (deltas and the voter's direction)."""
        if not voter_id:
            raise UnauthorizedError("Voting requires a signed-in user")
        wanted = parse_direction(direction)

        def apply(aggregate: IssueAggregate) -> tuple[VoteOutcome, IssueStatus]:
            previous_status = aggregate.status
            return aggregate.cast_vote(voter_id, wanted), previous_status

        issue, (outcome, previous_status) = await self._mutate(issue_id, apply)
        if issue.status is not previous_status:
            logger.info(
                f"Issue {issue_id} moved from {previous_status.value} to {issue.status.value} "
                f"at net score {issue.net_score}"
            )
        return issue, outcome

    async def cast_vote(self, issue_id: str, voter_id: str | None, direction: VoteDirection | str) -> Issue:
        """
        Record, flip or withdraw a vote, re-evaluating the status threshold.

        Raises:
            UnauthorizedError: no voter.
            NotFoundError: unknown issue.
            ConflictError: still conflicting after the retry budget.
        """
        issue, _ = await self.record_vote(issue_id, voter_id, direction)
        return issue

    async def change_status(self, issue_id: str, new_status: IssueStatus | str, actor: Viewer | None) -> Issue:
        """
        Authoritative admin transition.

        Raises:
            UnauthorizedError: no actor.
            ForbiddenError: the actor is not an admin.
            ValidationError: unknown status.
        """
        if actor is None:
            raise UnauthorizedError("Changing an issue status requires a signed-in admin")
        if not actor.is_admin:
            raise ForbiddenError("Only admins can change an issue status")

        issue, previous_status = await self._mutate(issue_id, lambda aggregate: aggregate.change_status(new_status))
        logger.info(f"Admin {actor.id} moved issue {issue_id} from {previous_status.value} to {issue.status.value}")
        return issue

    async def add_comment(self, issue_id: str, text: str, author: UserRef | None) -> Issue:
        if author is None:
            raise UnauthorizedError("Commenting requires a signed-in user")
        body = (text or "").strip()
        if not body:
            raise ValidationError({"text": "Comment cannot be empty."})

        comment = Comment(
            id=self.id_factory(),
            text=body,
            author=UserRef(id=author.id, name=author.name, avatar_ref=author.avatar_ref),
            created_at=self.clock(),
        )
        issue, _ = await self._mutate(issue_id, lambda aggregate: aggregate.add_comment(comment))
        return issue

    async def list_issues(self, issue_filter: IssueFilter | None = None) -> list[Issue]:
        issues = await self.repository.list_all()
        if issue_filter is None:
            return issues
        return [issue for issue in issues if matches_filter(issue, issue_filter)]

    async def get_issue(self, issue_id: str) -> Issue:
        return (await self.repository.get(issue_id)).snapshot()

    async def get_issue_with_vote(self, issue_id: str, viewer_id: str | None) -> tuple[Issue, VoteDirection | None]:
        """The issue plus the viewer's own active vote, for highlighting in the UI."""
        aggregate = await self.repository.get(issue_id)
        direction = aggregate.ledger.direction_of(issue_id, viewer_id) if viewer_id else None
        return aggregate.snapshot(), direction

    async def suggest_category(self, image_ref: str) -> CategorySuggestion:
        """
        Ask the enrichment port for a category suggestion for a photo.

        Raises:
            ValidationError: the reference is not an image data URI.
        """
        if not image_ref.startswith("data:image/"):
            raise ValidationError({"image_ref": "Image must be a data URI (data:image/...;base64,...)."})
        try:
            result = await asyncio.wait_for(self.enrichment.categorize_image(image_ref), timeout=self.enrichment_timeout)
        except (EnrichmentUnavailable, TimeoutError) as exc:
            logger.warning(f"Image categorization unavailable: {exc!r}")
            return CategorySuggestion(assessed=False)
        except Exception:
            logger.exception("Unexpected error while categorizing image")
            return CategorySuggestion(assessed=False)
        return CategorySuggestion(
            assessed=True,
            category=result.category,
            confidence=result.confidence,
            reasoning=result.reasoning,
        )
