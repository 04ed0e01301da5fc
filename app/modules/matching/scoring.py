"""Skill-match scoring.

Pure functions over immutable snapshots; nothing here touches the database.
Scores are in [0, 1]. Ranking sorts by score descending and is stable, so
callers that pass candidates/ideas in id order get deterministic output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple

REQUIRED_SKILL_WEIGHT = 0.7
LEVEL_WEIGHT = 0.2
ADDITIONAL_SKILL_WEIGHT = 0.1
ADDITIONAL_SKILL_CAP = 5

IDEA_RATIO_WEIGHT = 0.7
IDEA_COUNT_WEIGHT = 0.3
IDEA_COUNT_CAP = 5

LEVEL_SCORES = {
    "expert": 1.0,
    "advanced": 0.8,
    "intermediate": 0.6,
    "beginner": 0.4,
}
UNKNOWN_LEVEL_SCORE = 0.2


@dataclass(frozen=True)
class SkillEntry:
    name: str
    level: Optional[str] = None


@dataclass(frozen=True)
class CandidateSnapshot:
    user_id: int
    name: str
    skills: Tuple[SkillEntry, ...] = ()


@dataclass(frozen=True)
class IdeaSnapshot:
    idea_id: int
    title: str
    author_id: int
    required_skills: Tuple[str, ...] = ()
    status: str = "published"
    visibility: str = "public"


@dataclass(frozen=True)
class CandidateMatch:
    user_id: int
    name: str
    score: float
    matched_skills: List[SkillEntry] = field(default_factory=list)
    additional_skills: List[SkillEntry] = field(default_factory=list)


@dataclass(frozen=True)
class IdeaMatch:
    idea_id: int
    title: str
    score: float
    required_skills: List[str] = field(default_factory=list)
    matched_skills: List[str] = field(default_factory=list)


def level_score(level) -> float:
    """Weight of a proficiency level; unknown or missing levels score lowest."""
    if level is None:
        return UNKNOWN_LEVEL_SCORE
    key = str(getattr(level, "value", level)).lower()
    return LEVEL_SCORES.get(key, UNKNOWN_LEVEL_SCORE)


def unique_skill_names(names: Iterable[str]) -> List[str]:
    """De-duplicate skill names, keeping first-seen order."""
    seen = set()
    ordered = []
    for name in names:
        if name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def score_candidate(
    required_skills: Sequence[str], skills: Sequence[SkillEntry]
) -> Tuple[float, List[SkillEntry], List[SkillEntry]]:
    """Score one candidate's skills against the required set.

    Returns `(score, matched, additional)`.
    """
    required = unique_skill_names(required_skills)
    required_set = set(required)
    matched = [entry for entry in skills if entry.name in required_set]
    additional = [entry for entry in skills if entry.name not in required_set]

    coverage = len(matched) / len(required) if required else 0.0
    levels = (
        sum(level_score(entry.level) for entry in matched) / len(matched)
        if matched
        else 0.0
    )
    bonus = min(len(additional) / ADDITIONAL_SKILL_CAP, 1.0)

    score = (
        REQUIRED_SKILL_WEIGHT * coverage
        + LEVEL_WEIGHT * levels
        + ADDITIONAL_SKILL_WEIGHT * bonus
    )
    return score, matched, additional


def score_idea(
    user_skill_names: Sequence[str], required_skills: Sequence[str]
) -> Tuple[float, List[str]]:
    """Score an idea for a user. Returns `(score, matched_skill_names)`."""
    required = unique_skill_names(required_skills)
    required_set = set(required)
    matched = [name for name in unique_skill_names(user_skill_names) if name in required_set]

    ratio = len(matched) / len(required) if required else 0.0
    count_bonus = min(len(matched) / IDEA_COUNT_CAP, 1.0)
    return IDEA_RATIO_WEIGHT * ratio + IDEA_COUNT_WEIGHT * count_bonus, matched


def rank_candidates(
    idea_author_id: int,
    required_skills: Sequence[str],
    candidates: Iterable[CandidateSnapshot],
    excluded_ids: Iterable[int] = (),
    limit: int = 10,
) -> List[CandidateMatch]:
    """Rank users for an idea. Candidates without any required skill are dropped."""
    excluded = set(excluded_ids)
    excluded.add(idea_author_id)

    matches = []
    for candidate in candidates:
        if candidate.user_id in excluded:
            continue
        score, matched, additional = score_candidate(required_skills, candidate.skills)
        if not matched:
            continue
        matches.append(
            CandidateMatch(
                user_id=candidate.user_id,
                name=candidate.name,
                score=score,
                matched_skills=matched,
                additional_skills=additional,
            )
        )

    matches.sort(key=lambda match: match.score, reverse=True)
    return matches[:limit]


def rank_ideas_for_user(
    user_id: int,
    user_skills: Sequence[SkillEntry],
    ideas: Iterable[IdeaSnapshot],
    excluded_idea_ids: Iterable[int] = (),
    limit: int = 10,
) -> List[IdeaMatch]:
    """Rank published public ideas for a user by how many of their skills each needs."""
    excluded = set(excluded_idea_ids)
    skill_names = [entry.name for entry in user_skills]

    matches = []
    for idea in ideas:
        if idea.idea_id in excluded or idea.author_id == user_id:
            continue
        if idea.status != "published" or idea.visibility != "public":
            continue
        score, matched = score_idea(skill_names, idea.required_skills)
        if not matched:
            continue
        matches.append(
            IdeaMatch(
                idea_id=idea.idea_id,
                title=idea.title,
                score=score,
                required_skills=list(idea.required_skills),
                matched_skills=matched,
            )
        )

    matches.sort(key=lambda match: match.score, reverse=True)
    return matches[:limit]


__all__ = [
    "CandidateMatch",
    "CandidateSnapshot",
    "IdeaMatch",
    "IdeaSnapshot",
    "SkillEntry",
    "level_score",
    "rank_candidates",
    "rank_ideas_for_user",
    "score_candidate",
    "score_idea",
    "unique_skill_names",
]
