"""Activity timeline package exports."""

from .models import Activity, ActivityType
from .repository import ActivityRepository

__all__ = ["Activity", "ActivityType", "ActivityRepository"]
