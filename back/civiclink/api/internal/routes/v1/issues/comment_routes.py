# Third-party imports
from fastapi import APIRouter, Depends, status

# Local application imports
from civiclink.dependancies.common import get_issue_service, get_viewer
from civiclink.schemas.common import BaseResponse
from civiclink.schemas.issues import CommentCreate, Issue
from civiclink.schemas.users import Viewer
from civiclink.services.issues.issue_services import IssueService

router = APIRouter(prefix="/issues", tags=["Comments"])


@router.post("/{issue_id}/comments", response_model=BaseResponse[Issue], status_code=status.HTTP_201_CREATED)
async def add_comment(
    issue_id: str,
    comment_data: CommentCreate,
    viewer: Viewer = Depends(get_viewer),
    service: IssueService = Depends(get_issue_service),
):
    """Append a comment to an issue"""
    issue = await service.add_comment(issue_id, comment_data.text, viewer.as_ref())
    return BaseResponse.success(issue)
