# Standard library imports
from datetime import datetime

# Third-party imports
from pydantic import BaseModel, Field

# Local application imports
from civiclink.schemas.issues.issue_schemas import IssueCategory, IssuePriority

MIN_SUPPORTING_ISSUES = 2
MAX_SUPPORTING_ISSUES = 3


class Coordinates(BaseModel):
    lat: float
    lng: float


class ImageCategorization(BaseModel):
    category: IssueCategory
    confidence: float = Field(..., ge=0, le=1)
    reasoning: str | None = None


class PriorityPrediction(BaseModel):
    priority: IssuePriority
    justification: str


class IssueSummary(BaseModel):
    """The slice of an issue sent to the gap analyser."""

    id: str
    title: str
    category: str
    address: str
    description: str
    created_at: datetime


class GapReport(BaseModel):
    problem_area: str
    problem_type: str
    suggestion: str
    supporting_issue_ids: list[str] = Field(..., min_length=MIN_SUPPORTING_ISSUES, max_length=MAX_SUPPORTING_ISSUES)
    reasoning: str


class GapAnalysis(BaseModel):
    assessed: bool
    gap_reports: list[GapReport] = Field(default_factory=list)


class CategorizeImageRequest(BaseModel):
    image_ref: str


class CategorySuggestion(BaseModel):
    assessed: bool
    category: IssueCategory | None = None
    confidence: float | None = None
    reasoning: str | None = None
