"""Activity timeline models."""

from __future__ import annotations

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from app.core.database import Base
from app.core.db_defaults import json_type, timestamp_default


class ActivityType(str, enum.Enum):
    IDEA_CREATED = "IDEA_CREATED"
    CONTRIBUTION_REQUESTED = "CONTRIBUTION_REQUESTED"
    CONTRIBUTION_INVITED = "CONTRIBUTION_INVITED"
    CONTRIBUTION_ACCEPTED = "CONTRIBUTION_ACCEPTED"
    CONTRIBUTION_DECLINED = "CONTRIBUTION_DECLINED"
    CONTRIBUTION_WITHDRAWN = "CONTRIBUTION_WITHDRAWN"
    CONTRIBUTION_INVITATION_CANCELLED = "CONTRIBUTION_INVITATION_CANCELLED"


class Activity(Base):
    """Append-only timeline entry describing something an actor did."""

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, index=True)
    activity_type = Column("type", String, nullable=False)
    description = Column(Text, nullable=False)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Plain column: the timeline outlives the idea it mentions.
    idea_id = Column(Integer, nullable=True)
    activity_metadata = Column("metadata", json_type(), default=dict)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())

    __table_args__ = (
        Index("idx_activities_user_created", "user_id", "created_at"),
        Index("idx_activities_idea_created", "idea_id", "created_at"),
    )


__all__ = ["Activity", "ActivityType"]
