# Third-party imports
from pydantic import BaseModel, Field

# Local application imports
from civiclink.schemas.issues.issue_schemas import Issue
from civiclink.schemas.users.user_schemas import UserStats


class UserProfile(BaseModel):
    stats: UserStats
    issues: list[Issue] = Field(default_factory=list)
