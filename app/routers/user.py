"""User router: contribution history and the invitation inbox."""

from typing import List

from fastapi import APIRouter, Depends, Path

from app.modules.contributions.schemas import (
    ContributionRequestDetail,
    GroupedContributions,
)
from app.modules.users.models import User
from app.modules.users.schemas import UserWithSkills
from app.oauth2 import get_current_user
from app.routers.contribution import get_contribution_service
from app.services.contributions import ContributionService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserWithSkills)
def read_me(current_user: User = Depends(get_current_user)):
    return {
        "id": current_user.id,
        "name": current_user.name,
        "email": current_user.email,
        "created_at": current_user.created_at,
        "skills": [
            {"name": link.skill.name, "level": link.level} for link in current_user.skills
        ],
    }


@router.get("/me/invitations", response_model=List[ContributionRequestDetail])
def list_my_invitations(
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return service.list_pending_invites(current_user)


@router.get("/{user_id}/contributions", response_model=GroupedContributions)
def list_user_contributions(
    user_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    """A user's requests and invitations grouped by status; only for themselves."""
    return service.list_contributions_for_user(current_user, user_id)
