"""Contribution request models."""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
    text,
)
from sqlalchemy.orm import relationship

from app.core.database import Base
from app.core.db_defaults import json_type, timestamp_default


class ContributionStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    # Readable in history listings; no workflow operation writes it.
    WITHDRAWN = "withdrawn"


# Statuses that block a new request/invite for the same (idea, user) pair.
BLOCKING_STATUSES = (ContributionStatus.PENDING, ContributionStatus.ACCEPTED)


class ContributionRequest(Base):
    """A candidate's request to join an idea, or the owner's invitation to one."""

    __tablename__ = "contribution_requests"

    id = Column(Integer, primary_key=True, index=True)
    idea_id = Column(
        Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    message = Column(Text, nullable=False)
    skills = Column(json_type(), nullable=False, default=list)
    status = Column(
        Enum(
            ContributionStatus,
            name="contribution_status",
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=ContributionStatus.PENDING,
    )
    initiated_by_owner = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())
    responded_at = Column(DateTime(timezone=True), nullable=True)

    idea = relationship("Idea", lazy="joined")
    user = relationship("User", lazy="joined")

    __table_args__ = (
        Index(
            "uq_contribution_requests_pending",
            "idea_id",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("idx_contribution_requests_idea_status", "idea_id", "status"),
    )


__all__ = ["BLOCKING_STATUSES", "ContributionRequest", "ContributionStatus"]
