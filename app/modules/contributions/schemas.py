from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from app.modules.users.schemas import UserBrief

from .models import ContributionStatus


class ContributionRequestCreate(BaseModel):
    message: str = ""


class InvitationCreate(BaseModel):
    user_id: int
    message: str = ""
    required_skills: List[str] = []


class InvitationResponse(BaseModel):
    request_id: int
    # Validated by the workflow so bad values surface as the domain validation error.
    status: str


class IdeaBrief(BaseModel):
    id: int
    title: str
    author_id: int

    model_config = ConfigDict(from_attributes=True)


class ContributionRequestOut(BaseModel):
    id: int
    idea_id: int
    user_id: int
    message: str
    skills: List[str] = []
    status: ContributionStatus
    initiated_by_owner: bool
    created_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ContributionRequestDetail(ContributionRequestOut):
    user: Optional[UserBrief] = None
    idea: Optional[IdeaBrief] = None


class GroupedContributions(BaseModel):
    pending: List[ContributionRequestDetail] = []
    accepted: List[ContributionRequestDetail] = []
    rejected: List[ContributionRequestDetail] = []
    withdrawn: List[ContributionRequestDetail] = []


class RequestCheck(BaseModel):
    has_requested: bool


class ContributorCheck(BaseModel):
    idea_id: int
    user_id: int
    is_contributor: bool


class RequestCounts(BaseModel):
    pending: int = 0
    accepted: int = 0
    rejected: int = 0
    withdrawn: int = 0


class RequestSummary(BaseModel):
    idea_id: int
    requests: RequestCounts
    invitations: RequestCounts
    totals: Dict[str, int]
