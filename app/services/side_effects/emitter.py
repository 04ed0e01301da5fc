"""Notification and activity emission for committed workflow transitions.

The workflow calls `SideEffectEmitter` only after its own write has committed.
A failed emission is rolled back, logged and handed to a `RetryQueue`; it never
reaches the caller and never undoes the transition.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import RecordStore, SessionLocal
from app.modules.activity.models import Activity
from app.modules.activity.repository import ActivityRepository
from app.modules.notifications.models import Notification
from app.modules.notifications.repository import NotificationRepository
from app.modules.side_effects.models import SideEffectFailure, SideEffectKind
from app.modules.side_effects.tasks import EMISSION_ERRORS

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    return getattr(value, "value", value)


class RetryQueue:
    """Destination for payloads the emitter could not write."""

    def park(self, kind: SideEffectKind, payload: Dict[str, Any], error: Exception) -> None:
        raise NotImplementedError


class InMemoryRetryQueue(RetryQueue):
    """Collect parked payloads in a list. Used by tests and one-off scripts."""

    def __init__(self):
        self.parked: List[Tuple[SideEffectKind, Dict[str, Any], str]] = []

    def park(self, kind: SideEffectKind, payload: Dict[str, Any], error: Exception) -> None:
        self.parked.append((kind, payload, str(error)))


class DurableRetryQueue(RetryQueue):
    """Persist the payload as a `SideEffectFailure` row and schedule a replay."""

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        schedule: Optional[Callable[[int], None]] = None,
    ):
        self.session_factory = session_factory
        self._schedule = schedule

    def park(self, kind: SideEffectKind, payload: Dict[str, Any], error: Exception) -> None:
        db = self.session_factory()
        try:
            failure = RecordStore(db).insert(
                SideEffectFailure(
                    kind=kind,
                    payload=payload,
                    attempts=1,
                    last_error=str(error),
                )
            )
            failure_id = failure.id
        except EMISSION_ERRORS as exc:
            logger.error(
                "Dropping %s side effect; parking failed: %s | payload=%s",
                kind.value,
                exc,
                payload,
            )
            return
        finally:
            db.close()

        logger.info("Parked %s side effect as failure %s", kind.value, failure_id)
        if settings.SIDE_EFFECT_RETRY_ENABLED:
            self.schedule(failure_id)

    def schedule(self, failure_id: int) -> None:
        if self._schedule is not None:
            self._schedule(failure_id)
            return
        from app.celery_worker import replay_side_effect

        try:
            replay_side_effect.apply_async(
                args=[failure_id], countdown=settings.SIDE_EFFECT_RETRY_DELAY_SECONDS
            )
        except Exception as exc:  # broker unavailable; the row stays pending
            logger.error("Could not schedule replay for failure %s: %s", failure_id, exc)


class SideEffectEmitter:
    """Append notifications and activity entries, parking whatever fails."""

    def __init__(self, db: Session, retry_queue: Optional[RetryQueue] = None):
        self.db = db
        self.notifications = NotificationRepository(db)
        self.activities = ActivityRepository(db)
        self.retry_queue = retry_queue or DurableRetryQueue()

    def notify(
        self,
        *,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Notification]:
        payload = {
            "user_id": user_id,
            "notification_type": _plain(notification_type),
            "title": title,
            "message": message,
            "metadata": metadata or {},
        }
        return self._emit(
            SideEffectKind.NOTIFICATION,
            payload,
            lambda: self.notifications.append(**payload),
        )

    def record_activity(
        self,
        *,
        user_id: int,
        activity_type: str,
        description: str,
        idea_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Activity]:
        payload = {
            "user_id": user_id,
            "activity_type": _plain(activity_type),
            "description": description,
            "idea_id": idea_id,
            "metadata": metadata or {},
        }
        return self._emit(
            SideEffectKind.ACTIVITY,
            payload,
            lambda: self.activities.append(**payload),
        )

    def _emit(self, kind: SideEffectKind, payload: Dict[str, Any], write):
        try:
            return write()
        except EMISSION_ERRORS as exc:
            self.db.rollback()
            logger.warning(
                "Failed to emit %s side effect; parking for retry: %s",
                kind.value,
                exc,
                extra={"user_id": payload.get("user_id")},
            )
            self.retry_queue.park(kind, payload, exc)
            return None


__all__ = [
    "DurableRetryQueue",
    "InMemoryRetryQueue",
    "RetryQueue",
    "SideEffectEmitter",
]
