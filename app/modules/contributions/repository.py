"""Data-access helpers for contribution requests."""

from __future__ import annotations

from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.database import RecordStore
from app.modules.contributions.models import (
    BLOCKING_STATUSES,
    ContributionRequest,
    ContributionStatus,
)


class ContributionRepository:
    """Encapsulate contribution-request queries on top of the record store."""

    def __init__(self, db: Session):
        self.db = db
        self.store = RecordStore(db)

    def _newest_first(self, query):
        return query.order_by(
            ContributionRequest.created_at.desc(), ContributionRequest.id.desc()
        )

    # ----------------------------------------------------------------- lookups
    def get(self, request_id: int) -> Optional[ContributionRequest]:
        return self.store.get(ContributionRequest, request_id)

    def find_for_pair(
        self,
        idea_id: int,
        user_id: int,
        statuses: Iterable[ContributionStatus] = (ContributionStatus.PENDING,),
    ) -> Optional[ContributionRequest]:
        with self.store.unavailable_as_dependency_failure():
            return self._newest_first(
                self.db.query(ContributionRequest).filter(
                    ContributionRequest.idea_id == idea_id,
                    ContributionRequest.user_id == user_id,
                    ContributionRequest.status.in_(list(statuses)),
                )
            ).first()

    def find_blocking(self, idea_id: int, user_id: int) -> Optional[ContributionRequest]:
        """Pending row first, then an accepted one, for friendly duplicate messages."""
        pending = self.find_for_pair(idea_id, user_id)
        if pending is not None:
            return pending
        return self.find_for_pair(idea_id, user_id, (ContributionStatus.ACCEPTED,))

    def has_accepted(self, idea_id: int, user_id: int) -> bool:
        with self.store.unavailable_as_dependency_failure():
            return (
                self.db.query(ContributionRequest.id)
                .filter(
                    ContributionRequest.idea_id == idea_id,
                    ContributionRequest.user_id == user_id,
                    ContributionRequest.status == ContributionStatus.ACCEPTED,
                )
                .first()
                is not None
            )

    def blocked_user_ids(self, idea_id: int) -> List[int]:
        with self.store.unavailable_as_dependency_failure():
            rows = (
                self.db.query(ContributionRequest.user_id)
                .filter(
                    ContributionRequest.idea_id == idea_id,
                    ContributionRequest.status.in_(BLOCKING_STATUSES),
                )
                .distinct()
                .all()
            )
        return [row[0] for row in rows]

    def blocked_idea_ids(self, user_id: int) -> List[int]:
        with self.store.unavailable_as_dependency_failure():
            rows = (
                self.db.query(ContributionRequest.idea_id)
                .filter(
                    ContributionRequest.user_id == user_id,
                    ContributionRequest.status.in_(BLOCKING_STATUSES),
                )
                .distinct()
                .all()
            )
        return [row[0] for row in rows]

    # ---------------------------------------------------------------- listings
    def list_for_user(self, user_id: int) -> List[ContributionRequest]:
        with self.store.unavailable_as_dependency_failure():
            return self._newest_first(
                self.db.query(ContributionRequest).filter(
                    ContributionRequest.user_id == user_id
                )
            ).all()

    def list_for_idea(
        self,
        idea_id: int,
        *,
        status: Optional[ContributionStatus] = None,
        invites_only: bool = False,
    ) -> List[ContributionRequest]:
        query = self.db.query(ContributionRequest).filter(
            ContributionRequest.idea_id == idea_id
        )
        if status is not None:
            query = query.filter(ContributionRequest.status == status)
        if invites_only:
            query = query.filter(ContributionRequest.initiated_by_owner.is_(True))
        with self.store.unavailable_as_dependency_failure():
            return self._newest_first(query).all()

    def list_pending_invites_for_user(self, user_id: int) -> List[ContributionRequest]:
        with self.store.unavailable_as_dependency_failure():
            return self._newest_first(
                self.db.query(ContributionRequest).filter(
                    ContributionRequest.user_id == user_id,
                    ContributionRequest.initiated_by_owner.is_(True),
                    ContributionRequest.status == ContributionStatus.PENDING,
                )
            ).all()

    def count_by_status(self, idea_id: int):
        """Return `(status, initiated_by_owner, count)` tuples for an idea."""
        with self.store.unavailable_as_dependency_failure():
            return (
                self.db.query(
                    ContributionRequest.status,
                    ContributionRequest.initiated_by_owner,
                    func.count(ContributionRequest.id),
                )
                .filter(ContributionRequest.idea_id == idea_id)
                .group_by(
                    ContributionRequest.status, ContributionRequest.initiated_by_owner
                )
                .all()
            )


__all__ = ["ContributionRepository"]
