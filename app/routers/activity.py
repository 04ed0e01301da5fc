"""Activity router: the caller's own timeline."""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.activity.repository import ActivityRepository
from app.modules.activity.schemas import ActivityOut
from app.modules.users.models import User
from app.oauth2 import get_current_user

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=List[ActivityOut])
def list_activities(
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return ActivityRepository(db).list_for_user(current_user.id, skip=skip, limit=limit)
