"""Data-access helpers for the activity timeline."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.database import RecordStore
from app.modules.activity.models import Activity


class ActivityRepository:
    """Append and read timeline entries."""

    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    def append(
        self,
        *,
        user_id: int,
        activity_type: str,
        description: str,
        idea_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Activity:
        activity = Activity(
            user_id=user_id,
            activity_type=activity_type,
            description=description,
            idea_id=idea_id,
            activity_metadata=metadata or {},
        )
        return self.store.insert(activity)

    def list_for_user(
        self, user_id: int, *, skip: int = 0, limit: int = 50
    ) -> List[Activity]:
        return (
            self.db.query(Activity)
            .filter(Activity.user_id == user_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_for_idea(
        self, idea_id: int, *, skip: int = 0, limit: int = 50
    ) -> List[Activity]:
        return (
            self.db.query(Activity)
            .filter(Activity.idea_id == idea_id)
            .order_by(Activity.created_at.desc(), Activity.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )


__all__ = ["ActivityRepository"]
