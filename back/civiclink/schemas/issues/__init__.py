from .enrichment_schemas import (
    CategorizeImageRequest,
    CategorySuggestion,
    Coordinates,
    GapAnalysis,
    GapReport,
    ImageCategorization,
    IssueSummary,
    PriorityPrediction,
)
from .issue_schemas import (
    Comment,
    CommentCreate,
    DashboardStats,
    Issue,
    IssueCategory,
    IssueCreate,
    IssueDetailResponse,
    IssueFilter,
    IssueLocation,
    IssuePriority,
    IssueStatus,
    IssueStatusUpdate,
    RejectionReason,
)
from .vote_schemas import VoteCreate, VoteDirection, VoteOutcome, VoteTally

__all__ = [
    "CategorizeImageRequest",
    "CategorySuggestion",
    "Comment",
    "CommentCreate",
    "Coordinates",
    "DashboardStats",
    "GapAnalysis",
    "GapReport",
    "ImageCategorization",
    "Issue",
    "IssueCategory",
    "IssueCreate",
    "IssueDetailResponse",
    "IssueFilter",
    "IssueLocation",
    "IssuePriority",
    "IssueStatus",
    "IssueStatusUpdate",
    "IssueSummary",
    "PriorityPrediction",
    "RejectionReason",
    "VoteCreate",
    "VoteDirection",
    "VoteOutcome",
    "VoteTally",
]
