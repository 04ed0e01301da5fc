"""Minimal idea management: creation, lookup and the idea timeline."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.database import RecordConflictError, RecordStore
from app.core.exceptions import ResourceNotFoundException
from app.modules.activity.models import Activity, ActivityType
from app.modules.activity.repository import ActivityRepository
from app.modules.contributions.policy import (
    AccessPolicy,
    Operation,
    PolicyTarget,
    access_policy,
)
from app.modules.contributions.repository import ContributionRepository
from app.modules.ideas.models import Idea, IdeaSkill, IdeaVisibility
from app.modules.ideas.schemas import IdeaCreate
from app.modules.matching.scoring import unique_skill_names
from app.modules.users.models import Skill, User
from app.services.side_effects.emitter import SideEffectEmitter

logger = logging.getLogger(__name__)


class IdeaService:
    def __init__(
        self,
        db: Session,
        *,
        emitter: Optional[SideEffectEmitter] = None,
        policy: Optional[AccessPolicy] = None,
    ):
        self.db = db
        self.store = RecordStore(db)
        self.requests = ContributionRepository(db)
        self.activities = ActivityRepository(db)
        self.emitter = emitter or SideEffectEmitter(db)
        self.policy = policy or access_policy

    def get_or_create_skill(self, name: str) -> Skill:
        """Return the skill called `name`, creating it on first use."""
        skill = self.db.query(Skill).filter(Skill.name == name).first()
        if skill is not None:
            return skill
        try:
            return self.store.insert(Skill(name=name))
        except RecordConflictError:
            # Created by a concurrent request between the lookup and the insert.
            return self.db.query(Skill).filter(Skill.name == name).one()

    def create_idea(self, actor: User, payload: IdeaCreate) -> Idea:
        skills = [
            self.get_or_create_skill(name)
            for name in unique_skill_names(
                name.strip() for name in payload.required_skills if name.strip()
            )
        ]
        idea = Idea(
            author_id=actor.id,
            title=payload.title,
            description=payload.description,
            status=payload.status,
            visibility=payload.visibility,
        )
        idea.skill_links = [IdeaSkill(skill_id=skill.id) for skill in skills]
        idea = self.store.insert(idea)
        idea_id = idea.id
        idea_title = idea.title
        logger.info("Idea created", extra={"idea_id": idea_id, "user_id": actor.id})

        self.emitter.record_activity(
            user_id=actor.id,
            activity_type=ActivityType.IDEA_CREATED,
            description=f'Created idea "{idea_title}"',
            idea_id=idea_id,
            metadata={"idea_title": idea_title},
        )
        return self.store.get(Idea, idea_id)

    def get_idea(self, idea_id: int, actor: User) -> Idea:
        """Return an idea; private ideas are visible only to the author and contributors."""
        idea = self.store.get(Idea, idea_id)
        if idea is None:
            raise ResourceNotFoundException("Idea", idea_id)
        if idea.visibility == IdeaVisibility.PRIVATE:
            decision = self.policy.evaluate(
                actor.id,
                Operation.VIEW_CONTRIBUTOR_SPACE,
                PolicyTarget(
                    idea=idea, is_contributor=self.requests.has_accepted(idea.id, actor.id)
                ),
            )
            if not decision.allowed:
                raise ResourceNotFoundException("Idea", idea_id)
        return idea

    def list_activities(
        self, idea_id: int, actor: User, *, skip: int = 0, limit: int = 50
    ) -> List[Activity]:
        """Timeline of an idea for its owner and contributors."""
        idea = self.store.get(Idea, idea_id)
        if idea is None:
            raise ResourceNotFoundException("Idea", idea_id)
        self.policy.enforce(
            actor.id,
            Operation.VIEW_CONTRIBUTOR_SPACE,
            PolicyTarget(
                idea=idea, is_contributor=self.requests.has_accepted(idea.id, actor.id)
            ),
        )
        return self.activities.list_for_idea(idea.id, skip=skip, limit=limit)


__all__ = ["IdeaService"]
