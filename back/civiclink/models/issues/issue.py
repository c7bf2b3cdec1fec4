# Third-party imports
from sqlalchemy import Column, Enum as SQLEnum, Float, Integer, String, Text
from sqlalchemy.orm import relationship

# Local application imports
from civiclink.models.base import Base
from civiclink.models.mixins.uuid_timestamp import UUIDTimeStampMixin
from civiclink.schemas.issues.issue_schemas import IssueCategory, IssuePriority, IssueStatus, RejectionReason


class IssueModel(Base, UUIDTimeStampMixin):
    __tablename__ = "issues"

    # Issue details
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(IssueCategory, name="issue_category"), nullable=False, index=True)
    status = Column(SQLEnum(IssueStatus, name="issue_status"), nullable=False, default=IssueStatus.OPEN, index=True)
    rejection_reason = Column(SQLEnum(RejectionReason, name="rejection_reason"), nullable=True)
    priority = Column(SQLEnum(IssuePriority, name="issue_priority"), nullable=True, index=True)
    priority_justification = Column(Text, nullable=True)

    # Media
    image_ref = Column(Text, nullable=False, default="")

    # Location information
    address = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False, default=0.0)
    longitude = Column(Float, nullable=False, default=0.0)

    # Reporter snapshot; users live in the identity service
    reporter_id = Column(String(64), nullable=False, index=True)
    reporter_name = Column(String(200), nullable=False, default="")
    reporter_avatar_ref = Column(Text, nullable=True)

    # Tally mirrored from the votes table on every write, for sorting and listing
    up_count = Column(Integer, nullable=False, default=0)
    down_count = Column(Integer, nullable=False, default=0)

    # Optimistic concurrency counter
    version = Column(Integer, nullable=False, default=1)

    votes = relationship("VoteModel", back_populates="issue", cascade="all, delete-orphan")
    comments = relationship(
        "CommentModel",
        back_populates="issue",
        cascade="all, delete-orphan",
        order_by="CommentModel.position",
    )
