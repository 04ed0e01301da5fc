"""Contribution request lifecycle: requests, invitations, responses and withdrawals.

Every mutation runs as guard → conditional write → commit, and only then emits
notifications and activity entries. Emission goes through `SideEffectEmitter`,
which parks failures for replay instead of surfacing them.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import RecordConflictError, RecordNotFoundError, RecordStore
from app.core.db_defaults import utcnow
from app.core.exceptions import (
    DuplicateRequestException,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.modules.activity.models import ActivityType
from app.modules.contributions.locks import KeyedLockRegistry, pair_locks
from app.modules.contributions.models import ContributionRequest, ContributionStatus
from app.modules.contributions.policy import (
    AccessPolicy,
    Operation,
    PolicyTarget,
    access_policy,
)
from app.modules.contributions.repository import ContributionRepository
from app.modules.ideas.models import Idea
from app.modules.notifications.models import NotificationType
from app.modules.users.models import User
from app.services.side_effects.emitter import SideEffectEmitter

logger = logging.getLogger(__name__)

DECISIONS = {
    "accepted": ContributionStatus.ACCEPTED,
    "rejected": ContributionStatus.REJECTED,
}


class ContributionService:
    """Business logic for contribution requests and owner invitations."""

    def __init__(
        self,
        db: Session,
        *,
        emitter: Optional[SideEffectEmitter] = None,
        policy: Optional[AccessPolicy] = None,
        locks: Optional[KeyedLockRegistry] = None,
    ):
        self.db = db
        self.store = RecordStore(db)
        self.requests = ContributionRepository(db)
        self.emitter = emitter or SideEffectEmitter(db)
        self.policy = policy or access_policy
        self.locks = locks or pair_locks

    # ------------------------------------------------------------------ loading
    def _get_idea(self, idea_id: int) -> Idea:
        idea = self.store.get(Idea, idea_id)
        if idea is None:
            raise ResourceNotFoundException("Idea", idea_id)
        return idea

    def _get_user(self, user_id: int) -> User:
        user = self.store.get(User, user_id)
        if user is None:
            raise ResourceNotFoundException("User", user_id)
        return user

    def _get_request(self, request_id: int) -> ContributionRequest:
        request = self.requests.get(request_id)
        if request is None:
            raise ResourceNotFoundException("Contribution request", request_id)
        return request

    # --------------------------------------------------------------- validation
    @staticmethod
    def _clean_message(message: Optional[str]) -> str:
        text = (message or "").strip()
        if not text:
            raise ValidationException("Message is required", field="message")
        if len(text) > settings.CONTRIBUTION_MESSAGE_MAX_LENGTH:
            raise ValidationException(
                f"Message must be at most {settings.CONTRIBUTION_MESSAGE_MAX_LENGTH} characters",
                field="message",
            )
        return text

    @staticmethod
    def _clean_skills(skills: Optional[Iterable[str]]) -> List[str]:
        cleaned: List[str] = []
        for skill in skills or []:
            name = (skill or "").strip()
            if name and name not in cleaned:
                cleaned.append(name)
        if not cleaned:
            raise ValidationException(
                "At least one required skill is required", field="required_skills"
            )
        return cleaned

    @staticmethod
    def _parse_decision(decision: Optional[str]) -> ContributionStatus:
        status = DECISIONS.get(str(getattr(decision, "value", decision) or "").lower())
        if status is None:
            raise ValidationException(
                "Invalid status; expected 'accepted' or 'rejected'", field="status"
            )
        return status

    # -------------------------------------------------------------- persistence
    @contextmanager
    def _serialized(self, idea_id: int, user_id: int) -> Iterator[None]:
        if settings.CONTRIBUTION_SERIALIZE_CREATES:
            with self.locks.hold((idea_id, user_id)):
                yield
        else:
            yield

    def _blocking_status(self, idea_id: int, user_id: int) -> Optional[ContributionStatus]:
        existing = self.requests.find_blocking(idea_id, user_id)
        return existing.status if existing is not None else None

    def _insert_pending(self, request: ContributionRequest) -> ContributionRequest:
        try:
            return self.store.insert(request)
        except RecordConflictError as exc:
            logger.warning(
                "Pending contribution request already exists",
                extra={"idea_id": request.idea_id, "user_id": request.user_id},
            )
            raise DuplicateRequestException(
                "Contribution request already exists",
                details={"idea_id": request.idea_id, "user_id": request.user_id},
            ) from exc

    # ---------------------------------------------------------------- mutations
    def request_contribution(
        self, idea_id: int, actor: User, message: Optional[str]
    ) -> ContributionRequest:
        """File a candidate-initiated request to contribute to an idea."""
        text = self._clean_message(message)
        idea = self._get_idea(idea_id)

        with self._serialized(idea.id, actor.id):
            target = PolicyTarget(
                idea=idea, existing_status=self._blocking_status(idea.id, actor.id)
            )
            self.policy.enforce(actor.id, Operation.CREATE_REQUEST, target)
            request = self._insert_pending(
                ContributionRequest(
                    idea_id=idea.id,
                    user_id=actor.id,
                    message=text,
                    skills=[],
                    status=ContributionStatus.PENDING,
                    initiated_by_owner=False,
                )
            )

        request_id = request.id
        idea_title = idea.title
        author_name = idea.author.name
        logger.info(
            "Contribution requested",
            extra={"idea_id": idea.id, "request_pk": request_id, "user_id": actor.id},
        )

        self.emitter.record_activity(
            user_id=actor.id,
            activity_type=ActivityType.CONTRIBUTION_REQUESTED,
            description=f'Requested to contribute to "{idea_title}"',
            idea_id=idea_id,
            metadata={
                "request_id": request_id,
                "message": text,
                "idea_title": idea_title,
                "author_name": author_name,
            },
        )
        if settings.NOTIFY_OWNER_ON_CONTRIBUTION_REQUEST:
            self.emitter.notify(
                user_id=idea.author_id,
                notification_type=NotificationType.CONTRIBUTION_REQUEST,
                title="New Contribution Request",
                message=f'{actor.name} wants to contribute to "{idea_title}"',
                metadata={
                    "idea_id": idea_id,
                    "idea_title": idea_title,
                    "request_id": request_id,
                    "user_id": actor.id,
                    "user_name": actor.name,
                },
            )
        return request

    def invite_contribution(
        self,
        idea_id: int,
        actor: User,
        candidate_id: int,
        message: Optional[str],
        required_skills: Optional[Iterable[str]],
    ) -> ContributionRequest:
        """Create an owner-initiated invitation for a candidate."""
        text = self._clean_message(message)
        skills = self._clean_skills(required_skills)
        idea = self._get_idea(idea_id)
        # Ownership is settled before the candidate is looked up.
        self.policy.enforce(actor.id, Operation.CREATE_INVITE, PolicyTarget(idea=idea))
        candidate = self._get_user(candidate_id)

        with self._serialized(idea.id, candidate.id):
            target = PolicyTarget(
                idea=idea,
                candidate_id=candidate.id,
                existing_status=self._blocking_status(idea.id, candidate.id),
            )
            self.policy.enforce(actor.id, Operation.CREATE_INVITE, target)
            request = self._insert_pending(
                ContributionRequest(
                    idea_id=idea.id,
                    user_id=candidate.id,
                    message=text,
                    skills=skills,
                    status=ContributionStatus.PENDING,
                    initiated_by_owner=True,
                )
            )

        request_id = request.id
        idea_title = idea.title
        candidate_name = candidate.name
        logger.info(
            "Contribution invitation sent",
            extra={"idea_id": idea_id, "request_pk": request_id, "user_id": actor.id},
        )

        self.emitter.notify(
            user_id=candidate_id,
            notification_type=NotificationType.CONTRIBUTION_REQUEST,
            title="New Contribution Invitation",
            message=f'{actor.name} invited you to contribute to "{idea_title}"',
            metadata={
                "idea_id": idea_id,
                "idea_title": idea_title,
                "request_id": request_id,
                "message": text,
                "required_skills": skills,
                "author_id": actor.id,
            },
        )
        self.emitter.record_activity(
            user_id=actor.id,
            activity_type=ActivityType.CONTRIBUTION_INVITED,
            description=f'Invited {candidate_name} to contribute to "{idea_title}"',
            idea_id=idea_id,
            metadata={
                "request_id": request_id,
                "message": text,
                "required_skills": skills,
                "invited_user_id": candidate_id,
                "invited_user_name": candidate_name,
            },
        )
        return request

    def respond_to_invite(
        self,
        request_id: int,
        actor: User,
        decision: str,
        *,
        idea_id: Optional[int] = None,
    ) -> ContributionRequest:
        """Accept or reject an invitation addressed to `actor`."""
        status = self._parse_decision(decision)
        request = self._get_request(request_id)
        idea = self._get_idea(idea_id) if idea_id is not None else None
        self.policy.enforce(
            actor.id, Operation.RESPOND_TO_INVITE, PolicyTarget(idea=idea, request=request)
        )

        idea_title = request.idea.title
        owner_id = request.idea.author_id
        author_name = request.idea.author.name
        try:
            request = self.store.update_if(
                ContributionRequest,
                request_id,
                {"status": ContributionStatus.PENDING},
                {"status": status, "responded_at": utcnow()},
            )
        except RecordNotFoundError as exc:
            logger.warning(
                "Invitation resolved concurrently", extra={"request_pk": request_id}
            )
            raise ResourceConflictException(
                "Invitation has already been responded to",
                details={"request_id": request_id},
            ) from exc

        accepted = status == ContributionStatus.ACCEPTED
        verb = "Accepted" if accepted else "Declined"
        logger.info(
            f"Contribution invitation {verb.lower()}",
            extra={"idea_id": request.idea_id, "request_pk": request_id, "user_id": actor.id},
        )

        self.emitter.record_activity(
            user_id=actor.id,
            activity_type=(
                ActivityType.CONTRIBUTION_ACCEPTED
                if accepted
                else ActivityType.CONTRIBUTION_DECLINED
            ),
            description=f'{verb} invitation to contribute to "{idea_title}"',
            idea_id=request.idea_id,
            metadata={
                "request_id": request_id,
                "idea_title": idea_title,
                "author_name": author_name,
            },
        )
        self.emitter.notify(
            user_id=owner_id,
            notification_type=(
                NotificationType.CONTRIBUTION_ACCEPTED
                if accepted
                else NotificationType.CONTRIBUTION_DECLINED
            ),
            title=f"Contribution Invitation {verb}",
            message=(
                f'{actor.name} {verb.lower()} your invitation to contribute to "{idea_title}"'
            ),
            metadata={
                "idea_id": request.idea_id,
                "idea_title": idea_title,
                "request_id": request_id,
                "user_id": actor.id,
                "user_name": actor.name,
            },
        )
        return request

    def withdraw_request(self, idea_id: int, actor: User) -> None:
        """Delete the actor's own pending request for an idea."""
        idea = self._get_idea(idea_id)
        request = self.requests.find_for_pair(idea.id, actor.id)
        if request is None:
            raise ResourceNotFoundException("Contribution request")
        self.policy.enforce(
            actor.id, Operation.CANCEL_OWN_REQUEST, PolicyTarget(idea=idea, request=request)
        )

        # Snapshot before the row disappears.
        request_id = request.id
        idea_title = idea.title
        author_name = idea.author.name
        try:
            self.store.delete_if(
                ContributionRequest, request_id, {"status": ContributionStatus.PENDING}
            )
        except RecordNotFoundError as exc:
            raise ResourceNotFoundException("Contribution request", request_id) from exc

        logger.info(
            "Contribution request withdrawn",
            extra={"idea_id": idea_id, "request_pk": request_id, "user_id": actor.id},
        )
        self.emitter.record_activity(
            user_id=actor.id,
            activity_type=ActivityType.CONTRIBUTION_WITHDRAWN,
            description=f'Withdrew contribution request for "{idea_title}"',
            idea_id=idea_id,
            metadata={
                "request_id": request_id,
                "idea_title": idea_title,
                "author_name": author_name,
            },
        )

    def cancel_invite(
        self, request_id: int, actor: User, *, idea_id: Optional[int] = None
    ) -> None:
        """Delete a pending invitation on behalf of the idea owner."""
        request = self._get_request(request_id)
        idea = self._get_idea(idea_id) if idea_id is not None else request.idea
        self.policy.enforce(
            actor.id, Operation.CANCEL_INVITE, PolicyTarget(idea=idea, request=request)
        )

        candidate_id = request.user_id
        candidate_name = request.user.name
        idea_title = idea.title
        try:
            self.store.delete_if(
                ContributionRequest, request_id, {"status": ContributionStatus.PENDING}
            )
        except RecordNotFoundError as exc:
            raise ResourceNotFoundException("Invitation", request_id) from exc

        logger.info(
            "Contribution invitation cancelled",
            extra={"idea_id": idea.id, "request_pk": request_id, "user_id": actor.id},
        )
        self.emitter.record_activity(
            user_id=actor.id,
            activity_type=ActivityType.CONTRIBUTION_INVITATION_CANCELLED,
            description=(
                f'Cancelled contribution invitation for {candidate_name} to "{idea_title}"'
            ),
            idea_id=idea.id,
            metadata={
                "request_id": request_id,
                "idea_title": idea_title,
                "invited_user_id": candidate_id,
                "invited_user_name": candidate_name,
            },
        )
        self.emitter.notify(
            user_id=candidate_id,
            notification_type=NotificationType.CONTRIBUTION_INVITATION_CANCELLED,
            title="Contribution Invitation Cancelled",
            message=f'Your invitation to contribute to "{idea_title}" has been cancelled',
            metadata={
                "idea_id": idea.id,
                "idea_title": idea_title,
                "request_id": request_id,
                "author_id": actor.id,
            },
        )

    # -------------------------------------------------------------------- reads
    def list_contributions_for_user(
        self, actor: User, user_id: int
    ) -> Dict[str, List[ContributionRequest]]:
        """Group a user's requests and invitations by status, newest first."""
        self.policy.enforce(
            actor.id, Operation.VIEW_OWN_CONTRIBUTIONS, PolicyTarget(user_id=user_id)
        )
        grouped: Dict[str, List[ContributionRequest]] = {
            status.value: [] for status in ContributionStatus
        }
        for request in self.requests.list_for_user(user_id):
            grouped[ContributionStatus(request.status).value].append(request)
        return grouped

    def list_invites_for_idea(self, idea_id: int, actor: User) -> List[ContributionRequest]:
        """Owner view of invitations: pending first, then newest first."""
        idea = self._get_idea(idea_id)
        self.policy.enforce(
            actor.id, Operation.VIEW_REQUESTS_FOR_IDEA, PolicyTarget(idea=idea)
        )
        invites = self.requests.list_for_idea(idea.id, invites_only=True)
        return sorted(
            invites, key=lambda request: request.status != ContributionStatus.PENDING
        )

    def list_requests_for_idea(
        self, idea_id: int, actor: User, status: Optional[str] = None
    ) -> List[ContributionRequest]:
        idea = self._get_idea(idea_id)
        self.policy.enforce(
            actor.id, Operation.VIEW_REQUESTS_FOR_IDEA, PolicyTarget(idea=idea)
        )
        status_filter = None
        if status:
            try:
                status_filter = ContributionStatus(status.lower())
            except ValueError:
                raise ValidationException(f"Unknown status '{status}'", field="status")
        return self.requests.list_for_idea(idea.id, status=status_filter)

    def summarize_idea_requests(self, idea_id: int, actor: User) -> dict:
        """Count requests and invitations per status for the idea owner."""
        idea = self._get_idea(idea_id)
        self.policy.enforce(
            actor.id, Operation.VIEW_REQUESTS_FOR_IDEA, PolicyTarget(idea=idea)
        )
        requests = {status.value: 0 for status in ContributionStatus}
        invitations = {status.value: 0 for status in ContributionStatus}
        for status, initiated_by_owner, count in self.requests.count_by_status(idea.id):
            bucket = invitations if initiated_by_owner else requests
            bucket[ContributionStatus(status).value] += count
        totals = {
            status.value: requests[status.value] + invitations[status.value]
            for status in ContributionStatus
        }
        return {
            "idea_id": idea.id,
            "requests": requests,
            "invitations": invitations,
            "totals": totals,
        }

    def has_pending_request(self, idea_id: int, actor: User) -> bool:
        idea = self._get_idea(idea_id)
        return self.requests.find_for_pair(idea.id, actor.id) is not None

    def list_pending_invites(self, actor: User) -> List[ContributionRequest]:
        """The actor's inbox of invitations still waiting for an answer."""
        return self.requests.list_pending_invites_for_user(actor.id)

    def is_contributor(self, idea_id: int, user_id: int) -> bool:
        """True while the user holds an accepted request; recomputed on every call."""
        return self.requests.has_accepted(idea_id, user_id)

    def check_contributor(self, idea_id: int, actor: User) -> bool:
        """`is_contributor` for the acting user on an idea that must exist."""
        idea = self._get_idea(idea_id)
        return self.is_contributor(idea.id, actor.id)

    def list_contributors(self, idea_id: int, actor: User) -> List[User]:
        idea = self._get_idea(idea_id)
        self.policy.enforce(
            actor.id,
            Operation.VIEW_CONTRIBUTOR_SPACE,
            PolicyTarget(idea=idea, is_contributor=self.is_contributor(idea.id, actor.id)),
        )
        accepted = self.requests.list_for_idea(
            idea.id, status=ContributionStatus.ACCEPTED
        )
        contributors: List[User] = []
        seen = set()
        for request in sorted(accepted, key=lambda row: row.id):
            if request.user_id not in seen:
                seen.add(request.user_id)
                contributors.append(request.user)
        return contributors


__all__ = ["ContributionService", "DECISIONS"]
