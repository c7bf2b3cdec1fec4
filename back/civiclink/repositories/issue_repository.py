"""
Issue repository interface.

Defines the persistence contract the issue lifecycle depends on. Writes are
compare-and-swap on the issue ``version`` so that two concurrent
read-modify-write cycles on the same issue cannot overwrite each other.
"""

# Standard library imports
from abc import ABC, abstractmethod

# Local application imports
from civiclink.schemas.issues.issue_schemas import Issue
from civiclink.services.issues.issue_aggregate import IssueAggregate


class IssueRepository(ABC):
    """Abstract interface for issue persistence."""

    @abstractmethod
    async def get(self, issue_id: str) -> IssueAggregate:
        """
        Load an issue with its votes.

        Raises:
            NotFoundError: no issue has this id.
        """

    @abstractmethod
    async def list_all(self) -> list[Issue]:
        """Snapshots of every issue, newest first."""

    @abstractmethod
    async def add(self, aggregate: IssueAggregate) -> Issue:
        """
        Insert a new issue at version 1.

        Raises:
            ConflictError: an issue with the same id already exists.
        """

    @abstractmethod
    async def upsert(self, aggregate: IssueAggregate, expected_version: int | None = None) -> Issue:
        """
        Atomically write the issue, its votes and any new comments.

        With ``expected_version`` the write only happens if the stored version
        still equals it; the stored version is then incremented.
        Without it the record is written unconditionally.

        Raises:
            ConflictError: the stored version moved on since the aggregate was loaded.
            NotFoundError: ``expected_version`` was given but the issue does not exist.
        """
