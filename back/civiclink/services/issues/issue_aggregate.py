# Standard library imports
from collections.abc import Mapping
from datetime import datetime

# Local application imports
from civiclink.core.exceptions import ValidationError
from civiclink.schemas.issues.issue_schemas import (
    Comment,
    Issue,
    IssueCategory,
    IssueLocation,
    IssuePriority,
    IssueStatus,
    RejectionReason,
)
from civiclink.schemas.issues.vote_schemas import VoteDirection, VoteOutcome
from civiclink.schemas.users.user_schemas import UserRef
from civiclink.services.issues.vote_ledger import VoteLedger

# Net score at or below which the community rejects an issue
AUTO_REJECT_NET_SCORE = -10


def status_after_vote(
    status: IssueStatus,
    reason: RejectionReason | None,
    net_score: int,
) -> tuple[IssueStatus, RejectionReason | None]:
    """
    Vote-driven transition, evaluated after every ledger mutation.

    An admin rejection is never touched by votes. Any other status is
    auto-rejected once the net score reaches the threshold, including an
    issue an admin reopened while it was still under water. A threshold
    rejection reverts to Open as soon as the net score climbs back above it.
    """
    if status is IssueStatus.REJECTED and reason is not RejectionReason.THRESHOLD_AUTO:
        return status, reason
    if net_score <= AUTO_REJECT_NET_SCORE:
        return IssueStatus.REJECTED, RejectionReason.THRESHOLD_AUTO
    if status is IssueStatus.REJECTED:
        return IssueStatus.OPEN, None
    return status, reason


def status_after_admin_change(new_status: IssueStatus) -> tuple[IssueStatus, RejectionReason | None]:
    if new_status is IssueStatus.REJECTED:
        return new_status, RejectionReason.ADMIN_OVERRIDE
    return new_status, None


class IssueAggregate:
    """
    An issue together with its vote ledger.

    All state changes go through this class so that the tally on the issue
    snapshot always comes from the ledger and the status always follows
    ``status_after_vote`` / ``status_after_admin_change``.
    """

    def __init__(self, issue: Issue, votes: Mapping[str, VoteDirection | str] | None = None) -> None:
        self._issue = issue.model_copy(deep=True)
        self.ledger = VoteLedger.for_issue(issue.id, votes)
        self._issue.votes = self.ledger.tally_for(issue.id)

    @classmethod
    def create(
        cls,
        *,
        issue_id: str,
        title: str,
        description: str,
        category: IssueCategory,
        location: IssueLocation,
        image_ref: str,
        reporter: UserRef,
        created_at: datetime,
        self_upvote: bool = False,
    ) -> "IssueAggregate":
        issue = Issue(
            id=issue_id,
            title=title,
            description=description,
            category=category,
            status=IssueStatus.OPEN,
            image_ref=image_ref,
            location=location,
            created_at=created_at,
            reporter=reporter,
        )
        aggregate = cls(issue)
        if self_upvote:
            aggregate.cast_vote(reporter.id, VoteDirection.UP)
        return aggregate

    @property
    def id(self) -> str:
        return self._issue.id

    @property
    def status(self) -> IssueStatus:
        return self._issue.status

    @property
    def rejection_reason(self) -> RejectionReason | None:
        return self._issue.rejection_reason

    @property
    def version(self) -> int:
        return self._issue.version

    @property
    def votes(self) -> dict[str, VoteDirection]:
        return self.ledger.votes_for(self.id)

    def snapshot(self) -> Issue:
        return self._issue.model_copy(deep=True)

    def cast_vote(self, voter_id: str | None, direction: VoteDirection | str) -> VoteOutcome:
        outcome = self.ledger.cast_vote(self.id, voter_id, direction)
        self._issue.votes = outcome.tally
        self._issue.status, self._issue.rejection_reason = status_after_vote(
            self._issue.status,
            self._issue.rejection_reason,
            outcome.tally.net,
        )
        return outcome

    def change_status(self, new_status: IssueStatus | str) -> IssueStatus:
        """Authoritative admin transition. Returns the previous status."""
        try:
            target = IssueStatus(new_status)
        except ValueError:
            raise ValidationError({"status": f"Unknown status '{new_status}'"})
        previous = self._issue.status
        self._issue.status, self._issue.rejection_reason = status_after_admin_change(target)
        return previous

    def add_comment(self, comment: Comment) -> None:
        self._issue.comments.append(comment)

    def set_priority(self, priority: IssuePriority, justification: str | None) -> None:
        self._issue.priority = priority
        self._issue.priority_justification = justification
