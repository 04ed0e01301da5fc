"""Contribution router: candidate requests, owner views and the contributor roster."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.modules.contributions.schemas import (
    ContributionRequestCreate,
    ContributionRequestDetail,
    ContributionRequestOut,
    ContributorCheck,
    RequestCheck,
    RequestSummary,
)
from app.modules.users.models import User
from app.modules.users.schemas import UserBrief
from app.oauth2 import get_current_user
from app.services.contributions import ContributionService

router = APIRouter(prefix="/ideas", tags=["Contributions"])


def get_contribution_service(db: Session = Depends(get_db)) -> ContributionService:
    """Provide a ContributionService instance via FastAPI DI."""
    return ContributionService(db)


@router.post(
    "/{idea_id}/contribute",
    response_model=ContributionRequestOut,
    status_code=status.HTTP_201_CREATED,
)
def request_contribution(
    payload: ContributionRequestCreate,
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    """
    Ask to contribute to an idea.

    Fails with 409 `duplicate_request` while a pending request exists or once the
    caller is already a contributor, and with 403 for the idea's own author.
    """
    return service.request_contribution(idea_id, current_user, payload.message)


@router.delete("/{idea_id}/contribute", status_code=status.HTTP_204_NO_CONTENT)
def withdraw_request(
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    service.withdraw_request(idea_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{idea_id}/contribute/check", response_model=RequestCheck)
def check_request(
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return {"has_requested": service.has_pending_request(idea_id, current_user)}


@router.get("/{idea_id}/requests", response_model=List[ContributionRequestDetail])
def list_requests(
    idea_id: int = Path(..., gt=0),
    status_filter: Optional[str] = Query(None, alias="status"),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return service.list_requests_for_idea(idea_id, current_user, status=status_filter)


@router.get("/{idea_id}/requests/summary", response_model=RequestSummary)
def summarize_requests(
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return service.summarize_idea_requests(idea_id, current_user)


@router.get("/{idea_id}/contributors", response_model=List[UserBrief])
def list_contributors(
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return service.list_contributors(idea_id, current_user)


@router.get("/{idea_id}/contributors/me", response_model=ContributorCheck)
def check_contributor(
    idea_id: int = Path(..., gt=0),
    service: ContributionService = Depends(get_contribution_service),
    current_user: User = Depends(get_current_user),
):
    return {
        "idea_id": idea_id,
        "user_id": current_user.id,
        "is_contributor": service.check_contributor(idea_id, current_user),
    }
