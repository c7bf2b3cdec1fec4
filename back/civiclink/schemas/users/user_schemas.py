# Third-party imports
from pydantic import BaseModel, ConfigDict, Field


class UserRef(BaseModel):
    """Opaque reference to a user owned by the identity subsystem."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str = ""
    avatar_ref: str | None = None


class Viewer(UserRef):
    """The authenticated actor invoking an operation."""

    is_admin: bool = False

    def as_ref(self) -> UserRef:
        return UserRef(id=self.id, name=self.name, avatar_ref=self.avatar_ref)


class UserStats(BaseModel):
    user: UserRef
    issues_authored: int
    karma: int
    civic_score: int
