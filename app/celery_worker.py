"""Celery worker configuration and tasks.

Execution modes:
- Default: uses broker/backend from `settings` (e.g., Redis).
- Test: switches to in-memory broker/backend with eager execution so no external services are needed.

Tasks are thin wrappers around helpers in `app.modules.side_effects.tasks` so the
DB session lifecycle stays explicit here.
"""

import os

from celery import Celery
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import SessionLocal
from app.modules.side_effects.models import SideEffectFailureStatus
from app.modules.side_effects.tasks import replay_side_effect_task

# ------------------------- Celery Setup -------------------------
celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND_URL,
)


def _is_test_env() -> bool:
    return (
        settings.environment.lower() == "test"
        or os.getenv("APP_ENV", "").lower() == "test"
        or os.getenv("PYTEST_CURRENT_TEST") is not None
    )


if _is_test_env():
    # Use in-memory broker/backend and eager mode to avoid external services in tests.
    celery_app.conf.update(
        broker_url="memory://",
        result_backend="cache+memory://",
        task_always_eager=True,
        task_eager_propagates=True,
    )
else:
    celery_app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
    )


# ------------------------- Tasks -------------------------
@celery_app.task(name="side_effects.replay")
def replay_side_effect(failure_id: int):
    """Replay one parked notification/activity and reschedule while attempts remain."""
    db: Session = SessionLocal()
    try:
        status = replay_side_effect_task(
            db, failure_id, max_attempts=settings.SIDE_EFFECT_MAX_ATTEMPTS
        )
    finally:
        db.close()

    if status == SideEffectFailureStatus.PENDING and not celery_app.conf.task_always_eager:
        replay_side_effect.apply_async(
            args=[failure_id], countdown=settings.SIDE_EFFECT_RETRY_DELAY_SECONDS
        )
    return status.value
