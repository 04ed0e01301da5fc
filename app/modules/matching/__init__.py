"""Skill matching package exports."""

from .scoring import (
    CandidateMatch,
    CandidateSnapshot,
    IdeaMatch,
    IdeaSnapshot,
    SkillEntry,
    rank_candidates,
    rank_ideas_for_user,
)

__all__ = [
    "CandidateMatch",
    "CandidateSnapshot",
    "IdeaMatch",
    "IdeaSnapshot",
    "SkillEntry",
    "rank_candidates",
    "rank_ideas_for_user",
]
