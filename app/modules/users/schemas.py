from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict

from .models import SkillLevel


class UserSkillOut(BaseModel):
    name: str
    level: SkillLevel


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserBrief(BaseModel):
    """Public subset of a user embedded in contribution and match payloads."""

    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserWithSkills(UserOut):
    skills: List[UserSkillOut] = []
