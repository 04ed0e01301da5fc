"""Idea domain package exports."""

from .models import Idea, IdeaSkill, IdeaStatus, IdeaVisibility

__all__ = ["Idea", "IdeaSkill", "IdeaStatus", "IdeaVisibility"]
