"""Skill matching router."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.matching.schemas import CandidateMatchOut, IdeaMatchOut
from app.modules.users.models import User
from app.oauth2 import get_current_user
from app.services.matching import MatchingService

router = APIRouter(tags=["Matching"])


def get_matching_service(db: Session = Depends(get_db)) -> MatchingService:
    """Provide a MatchingService instance via FastAPI DI."""
    return MatchingService(db)


@router.get("/ideas/{idea_id}/matches", response_model=List[CandidateMatchOut])
def idea_matches(
    idea_id: int = Path(..., gt=0),
    limit: Optional[int] = Query(None),
    service: MatchingService = Depends(get_matching_service),
    current_user: User = Depends(get_current_user),
):
    """Candidates ranked against the idea's required skills (owner only)."""
    return service.candidates_for_idea(idea_id, current_user, limit=limit)


@router.get("/users/{user_id}/matches", response_model=List[IdeaMatchOut])
def user_matches(
    user_id: int = Path(..., gt=0),
    limit: Optional[int] = Query(None),
    service: MatchingService = Depends(get_matching_service),
    current_user: User = Depends(get_current_user),
):
    """Published public ideas ranked against the caller's own skills."""
    return service.ideas_for_user(user_id, current_user, limit=limit)
