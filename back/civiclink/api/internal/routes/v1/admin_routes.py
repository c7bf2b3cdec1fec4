# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from civiclink.dependancies.common import get_admin_user, get_issue_service, get_viewer
from civiclink.schemas.common import BaseResponse
from civiclink.schemas.issues import DashboardStats, GapAnalysis, Issue, IssueStatusUpdate
from civiclink.schemas.users import UserStats, Viewer
from civiclink.services.issues.gap_analysis_services import analyze_gaps
from civiclink.services.issues.issue_services import IssueService
from civiclink.services.issues.stats_services import compute_dashboard_stats
from civiclink.services.users import build_leaderboard
from civiclink.settings import settings

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.patch("/issues/{issue_id}/status", response_model=BaseResponse[Issue])
async def change_issue_status(
    issue_id: str,
    update: IssueStatusUpdate,
    viewer: Viewer = Depends(get_viewer),
    service: IssueService = Depends(get_issue_service),
):
    """Set an issue's status. Admin only; always takes effect regardless of votes."""
    issue = await service.change_status(issue_id, update.status, viewer)
    return BaseResponse.success(issue)


@router.get("/stats", response_model=BaseResponse[DashboardStats])
async def get_dashboard_stats(
    admin: Viewer = Depends(get_admin_user),  # noqa: ARG001
    service: IssueService = Depends(get_issue_service),
):
    issues = await service.list_issues()
    return BaseResponse.success(compute_dashboard_stats(issues))


@router.get("/gap-analysis", response_model=BaseResponse[GapAnalysis])
async def get_gap_analysis(
    admin: Viewer = Depends(get_admin_user),  # noqa: ARG001
    service: IssueService = Depends(get_issue_service),
):
    """Recurring problems across all reports that point to infrastructure gaps"""
    issues = await service.list_issues()
    analysis = await analyze_gaps(
        issues,
        service.enrichment,
        timeout=settings.GAP_ANALYSIS_TIMEOUT_SECONDS,
        cache_seconds=settings.GAP_ANALYSIS_CACHE_SECONDS,
    )
    return BaseResponse.success(analysis)


@router.get("/users", response_model=BaseResponse[list[UserStats]])
async def list_users(
    admin: Viewer = Depends(get_admin_user),  # noqa: ARG001
    service: IssueService = Depends(get_issue_service),
):
    """Reporters ranked by civic score"""
    issues = await service.list_issues()
    return BaseResponse.success(build_leaderboard(issues))
