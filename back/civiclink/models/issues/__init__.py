from .comment import CommentModel
from .issue import IssueModel
from .vote import VoteModel

__all__ = ["CommentModel", "IssueModel", "VoteModel"]
