"""Matching service exports."""

from .service import MatchingService

__all__ = ["MatchingService"]
