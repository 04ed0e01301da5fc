"""SQLAlchemy models and enums for the notifications domain."""

from __future__ import annotations

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from app.core.database import Base
from app.core.db_defaults import json_type, timestamp_default


class NotificationType(str, enum.Enum):
    CONTRIBUTION_REQUEST = "CONTRIBUTION_REQUEST"
    CONTRIBUTION_ACCEPTED = "CONTRIBUTION_ACCEPTED"
    CONTRIBUTION_DECLINED = "CONTRIBUTION_DECLINED"
    CONTRIBUTION_INVITATION_CANCELLED = "CONTRIBUTION_INVITATION_CANCELLED"


class Notification(Base):
    """Recipient-targeted message. Rows are only ever appended."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    notification_type = Column("type", String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    notification_metadata = Column("metadata", json_type(), default=dict)
    created_at = Column(DateTime(timezone=True), server_default=timestamp_default())

    __table_args__ = (
        Index("idx_notifications_user_created", "user_id", "created_at"),
        Index("idx_notifications_type", "type"),
    )


__all__ = ["Notification", "NotificationType"]
