"""Invitation router: owner-initiated contribution requests and their answers."""

from typing import List

from fastapi import APIRouter, Depends, Path, Response, status

from app.modules.contributions.schemas import (
    ContributionRequestDetail,
    ContributionRequestOut,
    InvitationCreate,
    InvitationResponse,
)
from app.modules.users.models import User
from app.oauth2 import get_current_user
from app.routers.contribution import get_contribution_service
from app.services.contributions import ContributionService

router = APIRouter(prefix="/ideas", tags=["Invitations"])


@router.post(
    "/{idea_id}/invite",
    response_model=ContributionRequestOut,
    status_code=status.HTTP_201_CREATED,
)
def invite_contributor(
    payload: InvitationCreate,
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return service.invite_contribution(
        idea_id,
        current_user,
        payload.user_id,
        payload.message,
        payload.required_skills,
    )


@router.get("/{idea_id}/invite", response_model=List[ContributionRequestDetail])
def list_invitations(
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    """Owner view of invitations, pending ones first."""
    return service.list_invites_for_idea(idea_id, current_user)


@router.delete(
    "/{idea_id}/invite/{request_id}", status_code=status.HTTP_204_NO_CONTENT
)
def cancel_invitation(
    idea_id: int = Path(..., gt=0),
    request_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    service.cancel_invite(request_id, current_user, idea_id=idea_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{idea_id}/invite/response", response_model=ContributionRequestOut)
def respond_to_invitation(
    payload: InvitationResponse,
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return service.respond_to_invite(
        payload.request_id, current_user, payload.status, idea_id=idea_id
    )
