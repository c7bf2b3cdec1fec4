# Third-party imports
from fastapi import APIRouter, Depends, Query

# Local application imports
from civiclink.dependancies.common import get_issue_service, get_viewer, get_viewer_optional
from civiclink.schemas.common import BaseResponse
from civiclink.schemas.issues import (
    CategorizeImageRequest,
    CategorySuggestion,
    Issue,
    IssueCategory,
    IssueCreate,
    IssueDetailResponse,
    IssueFilter,
    IssuePriority,
    IssueStatus,
)
from civiclink.schemas.users import Viewer
from civiclink.services.issues.issue_services import IssueService
from civiclink.settings import settings

router = APIRouter(prefix="/issues", tags=["Issues"])

pagination = settings.PAGINATION_CONFIGS["issues"]


@router.post("/", response_model=BaseResponse[Issue], status_code=201)
async def create_issue(
    issue_data: IssueCreate,
    viewer: Viewer = Depends(get_viewer),
    service: IssueService = Depends(get_issue_service),
):
    """Report a new civic issue"""
    issue = await service.create_issue(issue_data, viewer.as_ref())
    return BaseResponse.success(issue)


@router.post("/categorize-image", response_model=BaseResponse[CategorySuggestion])
async def categorize_image(
    request: CategorizeImageRequest,
    viewer: Viewer = Depends(get_viewer),  # noqa: ARG001
    service: IssueService = Depends(get_issue_service),
):
    """Suggest a category for a photo before the report is submitted"""
    suggestion = await service.suggest_category(request.image_ref)
    return BaseResponse.success(suggestion)


@router.get("/", response_model=BaseResponse[list[Issue]])
async def list_issues(
    status: IssueStatus | None = None,
    category: IssueCategory | None = None,
    priority: IssuePriority | None = None,
    search: str | None = None,
    reporter_id: str | None = None,
    limit: int = Query(pagination["default_limit"], ge=pagination["min_limit"], le=pagination["max_limit"]),
    offset: int = Query(pagination["default_offset"], ge=0),
    service: IssueService = Depends(get_issue_service),
):
    """List issues, newest first, filtered by every given predicate"""
    issue_filter = IssueFilter(
        status=status,
        category=category,
        priority=priority,
        search_text=search,
        reporter_id=reporter_id,
    )
    issues = await service.list_issues(issue_filter)
    return BaseResponse.paginated(issues, limit=limit, offset=offset)


@router.get("/{issue_id}", response_model=BaseResponse[IssueDetailResponse])
async def get_issue(
    issue_id: str,
    viewer: Viewer | None = Depends(get_viewer_optional),
    service: IssueService = Depends(get_issue_service),
):
    """Get issue details, including the viewer's own vote when signed in"""
    issue, my_vote = await service.get_issue_with_vote(issue_id, viewer.id if viewer else None)
    return BaseResponse.success(IssueDetailResponse(issue=issue, my_vote=my_vote))
