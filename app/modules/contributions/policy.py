"""Access policy for contribution operations.

`AccessPolicy` is a pure decision table: the caller loads the idea, the request
and any blocking row for the pair, then asks whether `actor_id` may perform an
operation. Denials carry an outcome so the HTTP layer can tell a missing record
from a permission problem or a state clash.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from app.core.exceptions import (
    DuplicateRequestException,
    PermissionDeniedException,
    ResourceConflictException,
    ResourceNotFoundException,
)
from app.modules.contributions.models import ContributionRequest, ContributionStatus
from app.modules.ideas.models import Idea


class Operation(str, enum.Enum):
    CREATE_REQUEST = "create-request"
    CREATE_INVITE = "create-invite"
    RESPOND_TO_INVITE = "respond-to-invite"
    CANCEL_OWN_REQUEST = "cancel-own-request"
    CANCEL_INVITE = "cancel-invite"
    VIEW_REQUESTS_FOR_IDEA = "view-requests-for-idea"
    VIEW_OWN_CONTRIBUTIONS = "view-own-contributions"
    VIEW_CONTRIBUTOR_SPACE = "view-contributor-space"
    VIEW_IDEA_MATCHES = "view-idea-matches"
    VIEW_USER_MATCHES = "view-user-matches"


class DenialOutcome(str, enum.Enum):
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str = ""
    outcome: Optional[DenialOutcome] = None

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, outcome: DenialOutcome, reason: str) -> "AccessDecision":
        return cls(allowed=False, reason=reason, outcome=outcome)


@dataclass(frozen=True)
class PolicyTarget:
    """Everything a decision may look at. Fields irrelevant to an operation stay None."""

    idea: Optional[Idea] = None
    request: Optional[ContributionRequest] = None
    candidate_id: Optional[int] = None
    user_id: Optional[int] = None
    # Status of the pending/accepted row already held by the pair, if any.
    existing_status: Optional[ContributionStatus] = None
    is_contributor: bool = False


def _forbidden(reason: str) -> AccessDecision:
    return AccessDecision.deny(DenialOutcome.FORBIDDEN, reason)


def _existing_row_denial(
    status: Optional[ContributionStatus], *, pending: str, accepted: str
) -> Optional[AccessDecision]:
    if status == ContributionStatus.PENDING:
        return AccessDecision.deny(DenialOutcome.DUPLICATE, pending)
    if status == ContributionStatus.ACCEPTED:
        return AccessDecision.deny(DenialOutcome.DUPLICATE, accepted)
    return None


def _request_on_idea(target: PolicyTarget) -> Optional[AccessDecision]:
    """Deny when the request does not belong to the idea named in the call."""
    if target.idea is not None and target.request.idea_id != target.idea.id:
        return AccessDecision.deny(
            DenialOutcome.NOT_FOUND, "Contribution request not found for this idea"
        )
    return None


class AccessPolicy:
    """Evaluate whether an actor may perform a contribution operation."""

    def __init__(self):
        self._rules: Dict[Operation, Callable[[int, PolicyTarget], AccessDecision]] = {
            Operation.CREATE_REQUEST: self._create_request,
            Operation.CREATE_INVITE: self._create_invite,
            Operation.RESPOND_TO_INVITE: self._respond_to_invite,
            Operation.CANCEL_OWN_REQUEST: self._cancel_own_request,
            Operation.CANCEL_INVITE: self._cancel_invite,
            Operation.VIEW_REQUESTS_FOR_IDEA: self._owner_only,
            Operation.VIEW_OWN_CONTRIBUTIONS: self._self_only,
            Operation.VIEW_CONTRIBUTOR_SPACE: self._contributor_space,
            Operation.VIEW_IDEA_MATCHES: self._owner_only,
            Operation.VIEW_USER_MATCHES: self._self_only,
        }

    def evaluate(
        self, actor_id: int, operation: Operation, target: PolicyTarget
    ) -> AccessDecision:
        rule = self._rules[Operation(operation)]
        return rule(actor_id, target)

    def enforce(
        self, actor_id: int, operation: Operation, target: PolicyTarget
    ) -> AccessDecision:
        """Evaluate and raise the matching application exception on denial."""
        decision = self.evaluate(actor_id, operation, target)
        if decision.allowed:
            return decision
        if decision.outcome == DenialOutcome.NOT_FOUND:
            identifier = target.request.id if target.request is not None else None
            raise ResourceNotFoundException("Contribution request", identifier)
        if decision.outcome == DenialOutcome.DUPLICATE:
            raise DuplicateRequestException(decision.reason)
        if decision.outcome == DenialOutcome.CONFLICT:
            raise ResourceConflictException(
                decision.reason,
                details={"status": _status_value(target.request)},
            )
        raise PermissionDeniedException(decision.reason)

    # ------------------------------------------------------------ mutations
    @staticmethod
    def _create_request(actor_id: int, target: PolicyTarget) -> AccessDecision:
        if actor_id == target.idea.author_id:
            return _forbidden("You cannot request to contribute to your own idea")
        denial = _existing_row_denial(
            target.existing_status,
            pending="Contribution request already exists",
            accepted="You are already a contributor to this idea",
        )
        return denial or AccessDecision.allow()

    @staticmethod
    def _create_invite(actor_id: int, target: PolicyTarget) -> AccessDecision:
        if actor_id != target.idea.author_id:
            return _forbidden("Only the idea owner can invite contributors")
        if target.candidate_id == target.idea.author_id:
            return _forbidden("You cannot invite yourself to your own idea")
        denial = _existing_row_denial(
            target.existing_status,
            pending="User already has a pending request or invitation for this idea",
            accepted="User is already a contributor to this idea",
        )
        return denial or AccessDecision.allow()

    @staticmethod
    def _respond_to_invite(actor_id: int, target: PolicyTarget) -> AccessDecision:
        request = target.request
        if actor_id != request.user_id:
            return _forbidden("Only the invited user can respond to this invitation")
        if not request.initiated_by_owner:
            return _forbidden("Only invitations from the idea owner can be responded to")
        denial = _request_on_idea(target)
        if denial:
            return denial
        if request.status != ContributionStatus.PENDING:
            return AccessDecision.deny(
                DenialOutcome.CONFLICT, "Invitation has already been responded to"
            )
        return AccessDecision.allow()

    @staticmethod
    def _cancel_own_request(actor_id: int, target: PolicyTarget) -> AccessDecision:
        request = target.request
        if actor_id != request.user_id:
            return _forbidden("You can only withdraw your own contribution request")
        if request.initiated_by_owner:
            return _forbidden(
                "This is an invitation from the idea owner; respond to the invitation instead"
            )
        if request.status != ContributionStatus.PENDING:
            return AccessDecision.deny(
                DenialOutcome.CONFLICT, "Only pending requests can be withdrawn"
            )
        return AccessDecision.allow()

    @staticmethod
    def _cancel_invite(actor_id: int, target: PolicyTarget) -> AccessDecision:
        request = target.request
        if actor_id != target.idea.author_id:
            return _forbidden("Only the idea owner can cancel invitations")
        denial = _request_on_idea(target)
        if denial:
            return denial
        if not request.initiated_by_owner:
            return _forbidden(
                "Only invitations can be cancelled; candidates withdraw their own requests"
            )
        if request.status != ContributionStatus.PENDING:
            return AccessDecision.deny(
                DenialOutcome.CONFLICT, "Only pending invitations can be cancelled"
            )
        return AccessDecision.allow()

    # ---------------------------------------------------------------- views
    @staticmethod
    def _owner_only(actor_id: int, target: PolicyTarget) -> AccessDecision:
        if actor_id != target.idea.author_id:
            return _forbidden("Only the idea owner can view this")
        return AccessDecision.allow()

    @staticmethod
    def _self_only(actor_id: int, target: PolicyTarget) -> AccessDecision:
        if actor_id != target.user_id:
            return _forbidden("You can only view your own data")
        return AccessDecision.allow()

    @staticmethod
    def _contributor_space(actor_id: int, target: PolicyTarget) -> AccessDecision:
        if actor_id == target.idea.author_id or target.is_contributor:
            return AccessDecision.allow()
        return _forbidden("Only the idea owner and its contributors can view this")


def _status_value(request: Optional[ContributionRequest]) -> Optional[str]:
    if request is None or request.status is None:
        return None
    return ContributionStatus(request.status).value


access_policy = AccessPolicy()

__all__ = [
    "AccessDecision",
    "AccessPolicy",
    "DenialOutcome",
    "Operation",
    "PolicyTarget",
    "access_policy",
]
