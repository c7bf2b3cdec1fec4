# Third-party imports
from sqlalchemy import Column, Enum as SQLEnum, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import relationship

# Local application imports
from civiclink.models.base import Base
from civiclink.models.mixins.uuid_timestamp import UUIDTimeStampMixin
from civiclink.schemas.issues.vote_schemas import VoteDirection


class VoteModel(Base, UUIDTimeStampMixin):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("issue_id", "voter_id", name="unique_voter_issue"),)

    issue_id = Column(String(64), ForeignKey("issues.id", ondelete="CASCADE"), nullable=False, index=True)
    voter_id = Column(String(64), nullable=False, index=True)
    direction = Column(SQLEnum(VoteDirection, name="vote_direction"), nullable=False)

    issue = relationship("IssueModel", back_populates="votes")
