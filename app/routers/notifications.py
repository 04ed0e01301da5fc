"""Notifications router: the caller's own notifications."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.notifications.repository import NotificationRepository
from app.modules.notifications.schemas import NotificationOut
from app.modules.users.models import User
from app.oauth2 import get_current_user

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    notification_type: Optional[str] = Query(None, alias="type"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return NotificationRepository(db).list_for_user(
        current_user.id, notification_type=notification_type, skip=skip, limit=limit
    )
