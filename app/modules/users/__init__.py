"""User domain package exports."""

from .models import Skill, SkillLevel, User, UserSkill

__all__ = ["Skill", "SkillLevel", "User", "UserSkill"]
