# Third-party imports
from fastapi import APIRouter, Depends

# Local application imports
from civiclink.dependancies.common import get_issue_service
from civiclink.schemas.common import BaseResponse
from civiclink.schemas.issues import IssueFilter
from civiclink.schemas.users.profile_schemas import UserProfile
from civiclink.services.issues.issue_services import IssueService
from civiclink.services.users import compute_user_stats

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}/profile", response_model=BaseResponse[UserProfile])
async def get_user_profile(
    user_id: str,
    service: IssueService = Depends(get_issue_service),
):
    """Public civic profile: karma, civic score and the user's reports"""
    authored = await service.list_issues(IssueFilter(reporter_id=user_id))
    return BaseResponse.success(UserProfile(stats=compute_user_stats(authored, user_id), issues=authored))
