# Standard library imports
from datetime import UTC, datetime
import uuid

# Third-party imports
from sqlalchemy import TIMESTAMP, Column, String, text


class UUIDTimeStampMixin:
    """A reusable mixin that:
    - Provides a string primary key named 'id' defaulting to a random UUID
    - Includes created_at and updated_at timestamps maintained by the database (and SQLAlchemy)

    Ids are stored as text so callers can treat them as opaque strings on
    every backend, Postgres and SQLite alike.
    """

    __abstract__ = True

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)

    created_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=lambda: datetime.now(UTC),
    )
