"""Snapshot loading for skill matching.

Reads users, ideas and their skills into immutable snapshots and hands them to
the pure ranking functions in `app.modules.matching.scoring`. Nothing here writes.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import RecordStore
from app.core.exceptions import ResourceNotFoundException, ValidationException
from app.modules.contributions.policy import (
    AccessPolicy,
    Operation,
    PolicyTarget,
    access_policy,
)
from app.modules.contributions.repository import ContributionRepository
from app.modules.ideas.models import Idea, IdeaSkill, IdeaStatus, IdeaVisibility
from app.modules.matching.scoring import (
    CandidateMatch,
    CandidateSnapshot,
    IdeaMatch,
    IdeaSnapshot,
    SkillEntry,
    rank_candidates,
    rank_ideas_for_user,
    unique_skill_names,
)
from app.modules.users.models import Skill, User, UserSkill


def _skill_entries(user: User) -> tuple:
    return tuple(
        SkillEntry(name=link.skill.name, level=getattr(link.level, "value", link.level))
        for link in sorted(user.skills, key=lambda link: link.id)
    )


class MatchingService:
    """Rank candidates for ideas and ideas for users."""

    def __init__(self, db: Session, *, policy: Optional[AccessPolicy] = None):
        self.db = db
        self.store = RecordStore(db)
        self.requests = ContributionRepository(db)
        self.policy = policy or access_policy

    @staticmethod
    def resolve_limit(limit: Optional[int]) -> int:
        if limit is None:
            return settings.MATCH_DEFAULT_LIMIT
        if limit < 1:
            raise ValidationException("limit must be at least 1", field="limit")
        return min(limit, settings.MATCH_MAX_LIMIT)

    # ---------------------------------------------------------------- loading
    def _get_idea(self, idea_id: int) -> Idea:
        idea = self.store.get(Idea, idea_id)
        if idea is None:
            raise ResourceNotFoundException("Idea", idea_id)
        return idea

    def _load_candidates(self, skill_names: Iterable[str]) -> List[CandidateSnapshot]:
        names = list(skill_names)
        if not names:
            return []
        with self.store.unavailable_as_dependency_failure():
            users = (
                self.db.query(User)
                .join(UserSkill, UserSkill.user_id == User.id)
                .join(Skill, Skill.id == UserSkill.skill_id)
                .filter(Skill.name.in_(names))
                .distinct()
                .order_by(User.id)
                .all()
            )
        return [
            CandidateSnapshot(user_id=user.id, name=user.name, skills=_skill_entries(user))
            for user in users
        ]

    def _load_ideas(self, skill_names: Iterable[str]) -> List[IdeaSnapshot]:
        names = list(skill_names)
        if not names:
            return []
        with self.store.unavailable_as_dependency_failure():
            ideas = (
                self.db.query(Idea)
                .join(IdeaSkill, IdeaSkill.idea_id == Idea.id)
                .join(Skill, Skill.id == IdeaSkill.skill_id)
                .filter(
                    Skill.name.in_(names),
                    Idea.status == IdeaStatus.PUBLISHED,
                    Idea.visibility == IdeaVisibility.PUBLIC,
                )
                .distinct()
                .order_by(Idea.id)
                .all()
            )
        return [
            IdeaSnapshot(
                idea_id=idea.id,
                title=idea.title,
                author_id=idea.author_id,
                required_skills=tuple(idea.required_skills),
                status=IdeaStatus(idea.status).value,
                visibility=IdeaVisibility(idea.visibility).value,
            )
            for idea in ideas
        ]

    # ---------------------------------------------------------------- ranking
    def rank_candidates(
        self,
        idea_id: int,
        required_skills: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
    ) -> List[CandidateMatch]:
        """Users holding at least one required skill, best match first.

        `required_skills` defaults to the idea's own skills.
        """
        size = self.resolve_limit(limit)
        idea = self._get_idea(idea_id)
        required = unique_skill_names(
            idea.required_skills if required_skills is None else required_skills
        )
        return rank_candidates(
            idea_author_id=idea.author_id,
            required_skills=required,
            candidates=self._load_candidates(required),
            excluded_ids=self.requests.blocked_user_ids(idea.id),
            limit=size,
        )

    def rank_ideas_for_user(
        self, user_id: int, limit: Optional[int] = None
    ) -> List[IdeaMatch]:
        """Published public ideas that need the user's skills, best match first."""
        size = self.resolve_limit(limit)
        user = self.store.get(User, user_id)
        if user is None:
            return []
        skills = _skill_entries(user)
        return rank_ideas_for_user(
            user_id=user.id,
            user_skills=skills,
            ideas=self._load_ideas(entry.name for entry in skills),
            excluded_idea_ids=self.requests.blocked_idea_ids(user.id),
            limit=size,
        )

    # ------------------------------------------------------------ guarded views
    def candidates_for_idea(
        self, idea_id: int, actor: User, limit: Optional[int] = None
    ) -> List[CandidateMatch]:
        idea = self._get_idea(idea_id)
        self.policy.enforce(actor.id, Operation.VIEW_IDEA_MATCHES, PolicyTarget(idea=idea))
        return self.rank_candidates(idea.id, limit=limit)

    def ideas_for_user(
        self, user_id: int, actor: User, limit: Optional[int] = None
    ) -> List[IdeaMatch]:
        self.policy.enforce(
            actor.id, Operation.VIEW_USER_MATCHES, PolicyTarget(user_id=user_id)
        )
        return self.rank_ideas_for_user(user_id, limit=limit)


__all__ = ["MatchingService"]
