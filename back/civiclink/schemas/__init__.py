"""
Pydantic schemas package.

This package contains all Pydantic schemas for request/response
validation and serialization.
"""

# Local application imports
from civiclink.schemas.common.response_schemas import BaseResponse, ErrorDetails, PaginationMeta
from civiclink.schemas.issues import Issue, IssueCreate, IssueFilter, VoteDirection, VoteTally
from civiclink.schemas.users import UserRef, UserStats, Viewer

__all__ = [
    # Common envelope
    "BaseResponse",
    "ErrorDetails",
    "PaginationMeta",
    # Issue schemas
    "Issue",
    "IssueCreate",
    "IssueFilter",
    "VoteDirection",
    "VoteTally",
    # User schemas
    "UserRef",
    "UserStats",
    "Viewer",
]
