# Standard library imports
from collections import Counter
from collections.abc import Iterable

# Local application imports
from civiclink.schemas.issues.issue_schemas import DashboardStats, Issue, IssueStatus


def compute_dashboard_stats(issues: Iterable[Issue]) -> DashboardStats:
    """Issue counts per status for the admin dashboard."""
    counts = Counter(issue.status for issue in issues)
    return DashboardStats(
        total=sum(counts.values()),
        open=counts[IssueStatus.OPEN],
        in_progress=counts[IssueStatus.IN_PROGRESS],
        resolved=counts[IssueStatus.RESOLVED],
        rejected=counts[IssueStatus.REJECTED],
    )
