# Standard library imports
from datetime import datetime
from enum import Enum

# Third-party imports
from pydantic import BaseModel, ConfigDict, Field, computed_field

# Local application imports
from civiclink.schemas.issues.vote_schemas import VoteDirection, VoteTally
from civiclink.schemas.users.user_schemas import UserRef


class IssueStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    RESOLVED = "Resolved"
    REJECTED = "Rejected"


class RejectionReason(str, Enum):
    THRESHOLD_AUTO = "ThresholdAuto"
    ADMIN_OVERRIDE = "AdminOverride"


class IssuePriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class IssueCategory(str, Enum):
    GARBAGE_DUMP = "Garbage Dump / Overflowing Bins"
    GARBAGE_VEHICLE_NOT_ARRIVED = "Garbage Vehicle Not Arrived"
    SWEEPING_NOT_DONE = "Sweeping Not Done"
    ILLEGAL_DUMPING = "Illegal Dumping / Debris"
    DEAD_ANIMAL_REMOVAL = "Dead Animal Removal"
    BURNING_OF_GARBAGE = "Burning of Garbage"
    POTHOLES = "Potholes / Damaged Road Surface"
    BROKEN_STREETLIGHTS = "Malfunctioning or Broken Streetlights"
    DAMAGED_FOOTPATH = "Damaged Footpath or Paving Slabs"
    FALLEN_TREES = "Fallen Trees or Branches Obstructing Road"
    OPEN_MANHOLE = "Open Manhole or Drain Cover"
    SEWERAGE_OVERFLOW = "Sewerage Overflow"
    BLOCKED_DRAINS = "Blocked Drains"
    STAGNANT_WATER = "Stagnant Water on Roads"
    WATER_PIPE_LEAKAGE = "Water Pipe Leakage"
    TOILET_NOT_CLEANED = "Public Toilet Not Cleaned"
    TOILET_NO_WATER = "No Water Supply in Public Toilet"
    TOILET_NO_ELECTRICITY = "No Electricity in Public Toilet"
    TOILET_BLOCKED = "Blocked Public Toilet"
    PARKS_MAINTENANCE = "Maintenance of Public Parks / Gardens"
    PUBLIC_URINATION = "Public Urination"
    ILLEGAL_BANNERS = "Illegal Banners or Hoardings"
    STRAY_ANIMALS = "Stray Animal Nuisance"
    OTHER = "Other"


class IssueLocation(BaseModel):
    address: str
    lat: float = 0.0
    lng: float = 0.0


class Comment(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    text: str
    author: UserRef
    created_at: datetime


class Issue(BaseModel):
    """
    Snapshot of an issue as stored and as returned to callers.

    ``votes`` is written only by ``IssueAggregate`` from its vote ledger;
    ``version`` increases by one on every committed write.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    category: IssueCategory
    status: IssueStatus = IssueStatus.OPEN
    rejection_reason: RejectionReason | None = None
    priority: IssuePriority | None = None
    priority_justification: str | None = None
    image_ref: str = ""
    location: IssueLocation
    created_at: datetime
    reporter: UserRef
    comments: list[Comment] = Field(default_factory=list)
    votes: VoteTally = Field(default_factory=VoteTally)
    version: int = 0

    @computed_field  # type: ignore[prop-decorator, misc]
    @property
    def net_score(self) -> int:
        return self.votes.up - self.votes.down


class IssueCreate(BaseModel):
    """
    Citizen submission. Field rules (lengths, category membership) are checked
    by ``IssueService.create_issue`` so every caller gets the same field-level errors.
    """

    title: str = ""
    description: str = ""
    category: str = ""
    location: str = ""
    image_ref: str = ""
    latitude: float | None = None
    longitude: float | None = None


class IssueFilter(BaseModel):
    status: IssueStatus | None = None
    category: IssueCategory | None = None
    priority: IssuePriority | None = None
    search_text: str | None = None
    reporter_id: str | None = None


class CommentCreate(BaseModel):
    text: str = ""


class IssueStatusUpdate(BaseModel):
    status: IssueStatus


class IssueDetailResponse(BaseModel):
    issue: Issue
    my_vote: VoteDirection | None = None


class DashboardStats(BaseModel):
    total: int
    open: int
    in_progress: int
    resolved: int
    rejected: int
