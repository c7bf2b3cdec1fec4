# Standard library imports
from datetime import UTC, datetime

# Third-party imports
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

# Local application imports
from civiclink.core.exceptions import ConflictError, NotFoundError
from civiclink.core.monitoring.logging import get_contextual_logger
from civiclink.models.issues import CommentModel, IssueModel, VoteModel
from civiclink.repositories.issue_repository import IssueRepository
from civiclink.schemas.issues.issue_schemas import Comment, Issue, IssueLocation
from civiclink.schemas.issues.vote_schemas import VoteTally
from civiclink.schemas.users.user_schemas import UserRef
from civiclink.services.issues.issue_aggregate import IssueAggregate

logger = get_contextual_logger(__name__)


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive timestamps
    return value if value.tzinfo else value.replace(tzinfo=UTC)


def _comment_from_row(row: CommentModel) -> Comment:
    return Comment(
        id=row.id,
        text=row.text,
        author=UserRef(id=row.author_id, name=row.author_name, avatar_ref=row.author_avatar_ref),
        created_at=_aware(row.created_at),
    )


def _issue_from_row(row: IssueModel) -> Issue:
    return Issue(
        id=row.id,
        title=row.title,
        description=row.description,
        category=row.category,
        status=row.status,
        rejection_reason=row.rejection_reason,
        priority=row.priority,
        priority_justification=row.priority_justification,
        image_ref=row.image_ref,
        location=IssueLocation(address=row.address, lat=row.latitude, lng=row.longitude),
        created_at=_aware(row.created_at),
        reporter=UserRef(id=row.reporter_id, name=row.reporter_name, avatar_ref=row.reporter_avatar_ref),
        comments=[_comment_from_row(c) for c in row.comments],
        votes=VoteTally(up=row.up_count, down=row.down_count),
        version=row.version,
    )


def _issue_columns(issue: Issue) -> dict:
    return {
        "title": issue.title,
        "description": issue.description,
        "category": issue.category,
        "status": issue.status,
        "rejection_reason": issue.rejection_reason,
        "priority": issue.priority,
        "priority_justification": issue.priority_justification,
        "image_ref": issue.image_ref,
        "address": issue.location.address,
        "latitude": issue.location.lat,
        "longitude": issue.location.lng,
        "reporter_id": issue.reporter.id,
        "reporter_name": issue.reporter.name,
        "reporter_avatar_ref": issue.reporter.avatar_ref,
        "up_count": issue.votes.up,
        "down_count": issue.votes.down,
        "created_at": issue.created_at,
    }


class SqlIssueRepository(IssueRepository):
    """
    SQLAlchemy-backed repository.

    ``upsert`` runs one transaction: a conditional ``UPDATE ... WHERE version = :expected``
    on the issue row, then the vote rows are replaced and new comments appended.
    A concurrent writer that already bumped the version makes the update match
    no row, which is reported as ``ConflictError``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, issue_id: str) -> IssueAggregate:
        async with self._session_factory() as session:
            result = await session.execute(
                select(IssueModel)
                .where(IssueModel.id == issue_id)
                .options(selectinload(IssueModel.votes), selectinload(IssueModel.comments))
            )
            row = result.scalar_one_or_none()
            if row is None:
                raise NotFoundError(f"Issue {issue_id} not found")
            votes = {vote.voter_id: vote.direction for vote in row.votes}
            return IssueAggregate(_issue_from_row(row), votes)

    async def list_all(self) -> list[Issue]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(IssueModel).options(selectinload(IssueModel.comments)).order_by(IssueModel.created_at.desc())
            )
            return [_issue_from_row(row) for row in result.scalars().all()]

    async def add(self, aggregate: IssueAggregate) -> Issue:
        issue = aggregate.snapshot()
        async with self._session_factory() as session:
            try:
                async with session.begin():
                    session.add(IssueModel(id=issue.id, version=1, **_issue_columns(issue)))
                    await session.flush()
                    self._add_votes(session, issue.id, aggregate)
                    self._add_comments(session, issue, start=0)
            except IntegrityError:
                raise ConflictError(f"Issue {issue.id} already exists")
        issue.version = 1
        return issue

    async def upsert(self, aggregate: IssueAggregate, expected_version: int | None = None) -> Issue:
        issue = aggregate.snapshot()
        async with self._session_factory() as session:
            async with session.begin():
                if expected_version is None:
                    stored_version = await session.scalar(select(IssueModel.version).where(IssueModel.id == issue.id))
                    if stored_version is None:
                        session.add(IssueModel(id=issue.id, version=1, **_issue_columns(issue)))
                        await session.flush()
                        new_version = 1
                    else:
                        new_version = stored_version + 1
                        await session.execute(
                            update(IssueModel)
                            .where(IssueModel.id == issue.id)
                            .values(version=new_version, **_issue_columns(issue))
                        )
                else:
                    new_version = expected_version + 1
                    result = await session.execute(
                        update(IssueModel)
                        .where(IssueModel.id == issue.id, IssueModel.version == expected_version)
                        .values(version=new_version, **_issue_columns(issue))
                    )
                    if result.rowcount != 1:
                        exists = await session.scalar(select(IssueModel.id).where(IssueModel.id == issue.id))
                        if exists is None:
                            raise NotFoundError(f"Issue {issue.id} not found")
                        logger.info(f"Version conflict writing issue {issue.id} at version {expected_version}")
                        raise ConflictError(f"Issue {issue.id} was modified concurrently")

                await session.execute(delete(VoteModel).where(VoteModel.issue_id == issue.id))
                self._add_votes(session, issue.id, aggregate)

                stored_comments = await session.scalar(
                    select(func.count()).select_from(CommentModel).where(CommentModel.issue_id == issue.id)
                )
                self._add_comments(session, issue, start=stored_comments or 0)

        issue.version = new_version
        return issue

    @staticmethod
    def _add_votes(session: AsyncSession, issue_id: str, aggregate: IssueAggregate) -> None:
        session.add_all(
            VoteModel(issue_id=issue_id, voter_id=voter_id, direction=direction)
            for voter_id, direction in aggregate.votes.items()
        )

    @staticmethod
    def _add_comments(session: AsyncSession, issue: Issue, start: int) -> None:
        # Comments are append-only: rows already stored are never rewritten
        session.add_all(
            CommentModel(
                id=comment.id,
                issue_id=issue.id,
                position=position,
                text=comment.text,
                author_id=comment.author.id,
                author_name=comment.author.name,
                author_avatar_ref=comment.author.avatar_ref,
                created_at=comment.created_at,
            )
            for position, comment in enumerate(issue.comments[start:], start=start)
        )
