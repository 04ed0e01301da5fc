"""Centralized API router registration with feature grouping.

Groups:
- Ideas and their timeline: ideas.
- Contribution lifecycle: contributions, invitations.
- Discovery: matching.
- Per-user views: users, notifications, activities.
"""

from fastapi import APIRouter

from app.routers import (
    activity,
    contribution,
    idea,
    invitation,
    matching,
    notifications,
    user,
)

api_router = APIRouter()

# Ideas and contribution lifecycle
api_router.include_router(idea.router)
api_router.include_router(contribution.router)
api_router.include_router(invitation.router)
api_router.include_router(matching.router)

# Per-user views
api_router.include_router(user.router)
api_router.include_router(notifications.router)
api_router.include_router(activity.router)

__all__ = ["api_router"]
