"""Contribution request domain package exports."""

from .models import BLOCKING_STATUSES, ContributionRequest, ContributionStatus

__all__ = ["BLOCKING_STATUSES", "ContributionRequest", "ContributionStatus"]
