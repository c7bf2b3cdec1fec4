# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from civiclink.dependancies.common import get_issue_service, get_viewer
from civiclink.schemas.common import BaseResponse
from civiclink.schemas.issues import IssueDetailResponse, VoteCreate
from civiclink.schemas.users import Viewer
from civiclink.services.issues.issue_services import IssueService

router = APIRouter(prefix="/issues", tags=["Votes"])


@router.post("/{issue_id}/votes", response_model=BaseResponse[IssueDetailResponse])
async def cast_vote(
    issue_id: str,
    vote_data: VoteCreate,
    viewer: Viewer = Depends(get_viewer),
    service: IssueService = Depends(get_issue_service),
):
    """
    Vote on an issue.

    Repeating your current direction withdraws the vote; the opposite
    direction replaces it. The response carries your resulting vote.
    """
    issue, outcome = await service.record_vote(issue_id, viewer.id, vote_data.direction)
    return BaseResponse.success(IssueDetailResponse(issue=issue, my_vote=outcome.direction))
