from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import IdeaStatus, IdeaVisibility


class IdeaCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    status: IdeaStatus = IdeaStatus.PUBLISHED
    visibility: IdeaVisibility = IdeaVisibility.PUBLIC
    required_skills: List[str] = []

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("title must not be blank")
        return value.strip()


class IdeaOut(BaseModel):
    id: int
    author_id: int
    title: str
    description: Optional[str]
    status: IdeaStatus
    visibility: IdeaVisibility
    required_skills: List[str] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
