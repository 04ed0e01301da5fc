"""Idea service exports."""

from .service import IdeaService

__all__ = ["IdeaService"]
