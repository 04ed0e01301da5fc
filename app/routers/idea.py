"""Idea router: the minimal create/read surface plus the idea timeline."""

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.activity.schemas import ActivityOut
from app.modules.ideas.schemas import IdeaCreate, IdeaOut
from app.modules.users.models import User
from app.oauth2 import get_current_user
from app.services.ideas import IdeaService

router = APIRouter(prefix="/ideas", tags=["Ideas"])


def get_idea_service(db: Session = Depends(get_db)) -> IdeaService:
    """Provide an IdeaService instance via FastAPI DI."""
    return IdeaService(db)


@router.post("", response_model=IdeaOut, status_code=status.HTTP_201_CREATED)
def create_idea(
    payload: IdeaCreate,
    service: IdeaService = Depends(get_idea_service),
    current_user: User = Depends(get_current_user),
):
    return service.create_idea(current_user, payload)


@router.get("/{idea_id}", response_model=IdeaOut)
def get_idea(
    idea_id: int = Path(..., gt=0),
    service: IdeaService = Depends(get_idea_service),
    current_user: User = Depends(get_current_user),
):
    return service.get_idea(idea_id, current_user)


@router.get("/{idea_id}/activities", response_model=List[ActivityOut])
def list_idea_activities(
    idea_id: int = Path(..., gt=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    service: IdeaService = Depends(get_idea_service),
    current_user: User = Depends(get_current_user),
):
    """Timeline of an idea, visible to its owner and accepted contributors."""
    return service.list_activities(idea_id, current_user, skip=skip, limit=limit)
