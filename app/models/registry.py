"""Aggregate every ORM model so `Base.metadata` is complete.

Imported by Alembic's env.py and the test suite before `create_all`; also backs
the lazy attribute access in `app.models`.
"""

from app.modules.activity.models import Activity, ActivityType
from app.modules.contributions.models import ContributionRequest, ContributionStatus
from app.modules.ideas.models import Idea, IdeaSkill, IdeaStatus, IdeaVisibility
from app.modules.notifications.models import Notification, NotificationType
from app.modules.side_effects.models import (
    SideEffectFailure,
    SideEffectFailureStatus,
    SideEffectKind,
)
from app.modules.users.models import Skill, SkillLevel, User, UserSkill

__all__ = [
    "Activity",
    "ActivityType",
    "ContributionRequest",
    "ContributionStatus",
    "Idea",
    "IdeaSkill",
    "IdeaStatus",
    "IdeaVisibility",
    "Notification",
    "NotificationType",
    "SideEffectFailure",
    "SideEffectFailureStatus",
    "SideEffectKind",
    "Skill",
    "SkillLevel",
    "User",
    "UserSkill",
]
