"""Contribution service exports."""

from .service import ContributionService

__all__ = ["ContributionService"]
