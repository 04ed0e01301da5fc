"""Data-access helpers for notifications domain."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.database import RecordStore
from app.modules.notifications import models as notification_models


class NotificationRepository:
    """Encapsulate notification-specific database operations."""

    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    # --------------------------------------------------------------- mutations
    def append(
        self,
        *,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> notification_models.Notification:
        notification = notification_models.Notification(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            notification_metadata=metadata or {},
        )
        return self.store.insert(notification)

    # ----------------------------------------------------------------- queries
    def list_for_user(
        self,
        user_id: int,
        *,
        notification_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> List[notification_models.Notification]:
        query = self.db.query(notification_models.Notification).filter(
            notification_models.Notification.user_id == user_id
        )
        if notification_type:
            query = query.filter(
                notification_models.Notification.notification_type == notification_type
            )
        return (
            query.order_by(
                notification_models.Notification.created_at.desc(),
                notification_models.Notification.id.desc(),
            )
            .offset(skip)
            .limit(limit)
            .all()
        )


__all__ = ["NotificationRepository"]
