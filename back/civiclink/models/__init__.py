"""
Database models package.

This package contains all SQLAlchemy models for the application.
"""

# Local application imports
from civiclink.models.base import Base
from civiclink.models.issues import CommentModel, IssueModel, VoteModel

__all__ = [
    "Base",
    # Issue lifecycle models
    "IssueModel",
    "VoteModel",
    "CommentModel",
]
