"""Reusable replay helpers for parked side effects."""

from __future__ import annotations

import logging
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.database import RecordStoreError
from app.core.db_defaults import utcnow
from app.core.exceptions import DependencyFailureException
from app.modules.activity.repository import ActivityRepository
from app.modules.notifications.repository import NotificationRepository
from app.modules.side_effects.models import (
    SideEffectFailure,
    SideEffectFailureStatus,
    SideEffectKind,
)

logger = logging.getLogger(__name__)

# Raised by the repositories when the store rejects or cannot take a write.
EMISSION_ERRORS = (SQLAlchemyError, RecordStoreError, DependencyFailureException)


def deliver_payload(db: Session, kind: SideEffectKind, payload: Dict[str, Any]) -> None:
    """Write a parked payload through the repository that owns its table."""
    if SideEffectKind(kind) == SideEffectKind.NOTIFICATION:
        NotificationRepository(db).append(**payload)
    else:
        ActivityRepository(db).append(**payload)


def replay_side_effect_task(
    db: Session, failure_id: int, *, max_attempts: int
) -> SideEffectFailureStatus:
    """Try one parked side effect again and record the outcome.

    Returns the row's status afterwards; `PENDING` means another attempt is due.
    """
    failure = db.get(SideEffectFailure, failure_id)
    if failure is None:
        logger.warning("Side effect failure %s no longer exists", failure_id)
        return SideEffectFailureStatus.ABANDONED
    if failure.status != SideEffectFailureStatus.PENDING:
        return failure.status

    kind = failure.kind
    payload = dict(failure.payload or {})
    try:
        deliver_payload(db, kind, payload)
    except EMISSION_ERRORS as exc:
        db.rollback()
        failure = db.get(SideEffectFailure, failure_id)
        failure.attempts = (failure.attempts or 0) + 1
        failure.last_error = str(exc)
        failure.updated_at = utcnow()
        if failure.attempts >= max_attempts:
            failure.status = SideEffectFailureStatus.ABANDONED
            logger.error(
                "Abandoning %s side effect %s after %s attempts: %s",
                kind.value,
                failure_id,
                failure.attempts,
                exc,
            )
        else:
            logger.warning(
                "Replay of %s side effect %s failed (attempt %s): %s",
                kind.value,
                failure_id,
                failure.attempts,
                exc,
            )
        db.commit()
        return failure.status

    failure.status = SideEffectFailureStatus.DELIVERED
    failure.updated_at = utcnow()
    db.commit()
    logger.info("Replayed %s side effect %s", kind.value, failure_id)
    return SideEffectFailureStatus.DELIVERED
