# Third-party imports
from sqlalchemy import Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

# Local application imports
from civiclink.models.base import Base
from civiclink.models.mixins.uuid_timestamp import UUIDTimeStampMixin


class CommentModel(Base, UUIDTimeStampMixin):
    __tablename__ = "comments"
    __table_args__ = (UniqueConstraint("issue_id", "position", name="unique_comment_position"),)

    issue_id = Column(String(64), ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    # Insertion order within the issue, starting at 0
    position = Column(Integer, nullable=False)
    text = Column(Text, nullable=False)

    author_id = Column(String(64), nullable=False, index=True)
    author_name = Column(String(200), nullable=False, default="")
    author_avatar_ref = Column(Text, nullable=True)

    issue = relationship("IssueModel", back_populates="comments")
