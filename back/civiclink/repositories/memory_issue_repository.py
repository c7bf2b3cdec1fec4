# Standard library imports
import asyncio

# Local application imports
from civiclink.core.exceptions import ConflictError, NotFoundError
from civiclink.repositories.issue_repository import IssueRepository
from civiclink.schemas.issues.issue_schemas import Issue
from civiclink.schemas.issues.vote_schemas import VoteDirection
from civiclink.services.issues.issue_aggregate import IssueAggregate


class InMemoryIssueRepository(IssueRepository):
    """Process-local store. Used by the test-suite and ``STORAGE_BACKEND=memory``."""

    def __init__(self) -> None:
        self._records: dict[str, tuple[Issue, dict[str, VoteDirection]]] = {}
        self._lock = asyncio.Lock()

    async def get(self, issue_id: str) -> IssueAggregate:
        try:
            issue, votes = self._records[issue_id]
        except KeyError:
            raise NotFoundError(f"Issue {issue_id} not found")
        return IssueAggregate(issue, votes)

    async def list_all(self) -> list[Issue]:
        issues = [issue.model_copy(deep=True) for issue, _ in self._records.values()]
        return sorted(issues, key=lambda issue: issue.created_at, reverse=True)

    async def add(self, aggregate: IssueAggregate) -> Issue:
        async with self._lock:
            if aggregate.id in self._records:
                raise ConflictError(f"Issue {aggregate.id} already exists")
            return self._store(aggregate, version=1)

    async def upsert(self, aggregate: IssueAggregate, expected_version: int | None = None) -> Issue:
        async with self._lock:
            stored = self._records.get(aggregate.id)
            if expected_version is None:
                current_version = stored[0].version if stored else 0
                return self._store(aggregate, version=current_version + 1)

            if stored is None:
                raise NotFoundError(f"Issue {aggregate.id} not found")
            if stored[0].version != expected_version:
                raise ConflictError(
                    f"Issue {aggregate.id} is at version {stored[0].version}, expected {expected_version}"
                )
            return self._store(aggregate, version=expected_version + 1)

    def _store(self, aggregate: IssueAggregate, version: int) -> Issue:
        issue = aggregate.snapshot()
        issue.version = version
        self._records[issue.id] = (issue, aggregate.votes)
        return issue.model_copy(deep=True)
