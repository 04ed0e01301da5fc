from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class MatchedSkill(BaseModel):
    name: str
    level: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CandidateMatchOut(BaseModel):
    user_id: int
    name: str
    score: float
    matched_skills: List[MatchedSkill] = []
    additional_skills: List[MatchedSkill] = []

    model_config = ConfigDict(from_attributes=True)


class IdeaMatchOut(BaseModel):
    idea_id: int
    title: str
    score: float
    required_skills: List[str] = []
    matched_skills: List[str] = []

    model_config = ConfigDict(from_attributes=True)
