"""
Reporter reputation.

Karma and civic score are read-only views recomputed from the current issue
set on every call; nothing here is ever stored.
"""

# Standard library imports
from collections.abc import Iterable

# Local application imports
from civiclink.schemas.issues.issue_schemas import Issue
from civiclink.schemas.users.user_schemas import UserRef, UserStats

ISSUE_AUTHORED_POINTS = 10


def civic_score(issues_authored: int, karma: int) -> int:
    return ISSUE_AUTHORED_POINTS * issues_authored + karma


def compute_user_stats(issues: Iterable[Issue], user_id: str) -> UserStats:
    """Stats for one user. A user with no reports gets zeroes rather than an error."""
    authored = [issue for issue in issues if issue.reporter.id == user_id]
    if authored:
        # Most recent snapshot of the reporter's display details
        user = max(authored, key=lambda issue: issue.created_at).reporter
    else:
        user = UserRef(id=user_id)
    karma = sum(issue.votes.up - issue.votes.down for issue in authored)
    return UserStats(
        user=user,
        issues_authored=len(authored),
        karma=karma,
        civic_score=civic_score(len(authored), karma),
    )


def build_leaderboard(issues: Iterable[Issue]) -> list[UserStats]:
    """Every reporter, best civic score first."""
    issues = list(issues)
    reporter_ids = {issue.reporter.id for issue in issues}
    stats = [compute_user_stats(issues, reporter_id) for reporter_id in reporter_ids]
    return sorted(stats, key=lambda s: (-s.civic_score, -s.issues_authored, s.user.id))
