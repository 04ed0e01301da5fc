import pytest

from app.core.config import settings
from app.core.exceptions import (
    DuplicateRequestException,
    PermissionDeniedException,
    ResourceConflictException,
    ResourceNotFoundException,
    ValidationException,
)
from app.modules.activity.models import Activity, ActivityType
from app.modules.contributions.models import ContributionRequest, ContributionStatus
from app.modules.notifications.models import Notification, NotificationType
from app.modules.users.models import SkillLevel


@pytest.fixture
def owner(make_user):
    return make_user("Olivia Owner", skills={"Product": SkillLevel.EXPERT})


@pytest.fixture
def candidate(make_user):
    return make_user("Carl Candidate", skills={"React": SkillLevel.ADVANCED})


@pytest.fixture
def stranger(make_user):
    return make_user("Sam Stranger")


@pytest.fixture
def idea(make_idea, owner):
    return make_idea(owner, "Solar Kiosk", skills=["React", "Node"])


def _activities(session, activity_type):
    """Helper for reading activity rows of one type."""
    return (
        session.query(Activity)
        .filter(Activity.activity_type == activity_type.value)
        .order_by(Activity.id)
        .all()
    )


def _notifications(session, user_id):
    """Helper for reading a user's notifications."""
    return (
        session.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.id)
        .all()
    )


def _pending_rows(session, idea_id, user_id):
    return (
        session.query(ContributionRequest)
        .filter(
            ContributionRequest.idea_id == idea_id,
            ContributionRequest.user_id == user_id,
            ContributionRequest.status == ContributionStatus.PENDING,
        )
        .count()
    )


# ------------------------------------------------------------ candidate requests
def test_request_contribution_creates_pending_row_and_activity(
    session, contribution_service, idea, candidate, owner, retry_queue
):
    request = contribution_service.request_contribution(
        idea.id, candidate, "  I can build the frontend  "
    )

    assert request.status == ContributionStatus.PENDING
    assert request.initiated_by_owner is False
    assert request.message == "I can build the frontend"
    assert request.skills == []

    activities = _activities(session, ActivityType.CONTRIBUTION_REQUESTED)
    assert len(activities) == 1
    assert activities[0].user_id == candidate.id
    assert activities[0].idea_id == idea.id
    assert activities[0].description == 'Requested to contribute to "Solar Kiosk"'
    assert activities[0].activity_metadata["request_id"] == request.id
    assert activities[0].activity_metadata["author_name"] == "Olivia Owner"
    # Owner notification is switched off by default.
    assert _notifications(session, owner.id) == []
    assert retry_queue.parked == []


def test_request_contribution_notifies_owner_when_enabled(
    session, contribution_service, idea, candidate, owner, monkeypatch
):
    monkeypatch.setattr(settings, "NOTIFY_OWNER_ON_CONTRIBUTION_REQUEST", True)

    contribution_service.request_contribution(idea.id, candidate, "Let me help")

    notifications = _notifications(session, owner.id)
    assert len(notifications) == 1
    assert notifications[0].notification_type == NotificationType.CONTRIBUTION_REQUEST.value
    assert notifications[0].notification_metadata["user_id"] == candidate.id


def test_duplicate_pending_request_is_rejected(session, contribution_service, idea, candidate):
    contribution_service.request_contribution(idea.id, candidate, "First")

    with pytest.raises(DuplicateRequestException) as exc_info:
        contribution_service.request_contribution(idea.id, candidate, "Second")

    assert exc_info.value.error_code == "duplicate_request"
    assert exc_info.value.message == "Contribution request already exists"
    assert _pending_rows(session, idea.id, candidate.id) == 1


def test_author_cannot_request_own_idea(contribution_service, idea, owner):
    with pytest.raises(PermissionDeniedException):
        contribution_service.request_contribution(idea.id, owner, "Me too")


@pytest.mark.parametrize("message", ["", "   ", None])
def test_request_requires_message(contribution_service, idea, candidate, message):
    with pytest.raises(ValidationException) as exc_info:
        contribution_service.request_contribution(idea.id, candidate, message)
    assert exc_info.value.details == {"field": "message"}


def test_request_rejects_overlong_message(contribution_service, idea, candidate, monkeypatch):
    monkeypatch.setattr(settings, "CONTRIBUTION_MESSAGE_MAX_LENGTH", 10)
    with pytest.raises(ValidationException):
        contribution_service.request_contribution(idea.id, candidate, "x" * 11)


def test_request_for_missing_idea_is_not_found(contribution_service, candidate):
    with pytest.raises(ResourceNotFoundException):
        contribution_service.request_contribution(9999, candidate, "Hello")


def test_has_pending_request(contribution_service, idea, candidate):
    assert contribution_service.has_pending_request(idea.id, candidate) is False
    contribution_service.request_contribution(idea.id, candidate, "Hello")
    assert contribution_service.has_pending_request(idea.id, candidate) is True


# ------------------------------------------------------------------ withdrawals
def test_withdraw_deletes_request_and_allows_a_new_one(
    session, contribution_service, idea, candidate
):
    first = contribution_service.request_contribution(idea.id, candidate, "Hello")
    first_id = first.id

    contribution_service.withdraw_request(idea.id, candidate)

    assert session.get(ContributionRequest, first_id) is None
    withdrawn = _activities(session, ActivityType.CONTRIBUTION_WITHDRAWN)
    assert len(withdrawn) == 1
    assert withdrawn[0].activity_metadata["request_id"] == first_id
    assert withdrawn[0].activity_metadata["idea_title"] == "Solar Kiosk"

    again = contribution_service.request_contribution(idea.id, candidate, "Hello again")
    assert again.status == ContributionStatus.PENDING


def test_withdraw_without_pending_request_is_not_found(contribution_service, idea, candidate):
    with pytest.raises(ResourceNotFoundException):
        contribution_service.withdraw_request(idea.id, candidate)


def test_withdraw_refuses_invitations(contribution_service, idea, owner, candidate):
    contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join us", ["React"]
    )
    with pytest.raises(PermissionDeniedException):
        contribution_service.withdraw_request(idea.id, candidate)


# ------------------------------------------------------------------ invitations
def test_invite_creates_pending_invitation_and_notifies_candidate(
    session, contribution_service, idea, owner, candidate
):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join us", ["React", " React ", "Node", ""]
    )

    assert invite.initiated_by_owner is True
    assert invite.status == ContributionStatus.PENDING
    assert invite.user_id == candidate.id
    assert invite.skills == ["React", "Node"]

    notifications = _notifications(session, candidate.id)
    assert len(notifications) == 1
    assert notifications[0].title == "New Contribution Invitation"
    assert notifications[0].notification_metadata["required_skills"] == ["React", "Node"]

    invited = _activities(session, ActivityType.CONTRIBUTION_INVITED)
    assert len(invited) == 1
    assert invited[0].user_id == owner.id
    assert invited[0].activity_metadata["invited_user_id"] == candidate.id


def test_invite_requires_skills(contribution_service, idea, owner, candidate):
    with pytest.raises(ValidationException) as exc_info:
        contribution_service.invite_contribution(idea.id, owner, candidate.id, "Join", [" "])
    assert exc_info.value.details == {"field": "required_skills"}


def test_only_owner_can_invite(contribution_service, idea, stranger, candidate):
    with pytest.raises(PermissionDeniedException):
        contribution_service.invite_contribution(
            idea.id, stranger, candidate.id, "Join", ["React"]
        )


def test_non_owner_invite_of_unknown_user_is_forbidden(contribution_service, idea, stranger):
    with pytest.raises(PermissionDeniedException):
        contribution_service.invite_contribution(
            idea.id, stranger, 99999, "Join", ["React"]
        )


def test_owner_cannot_invite_self(contribution_service, idea, owner):
    with pytest.raises(PermissionDeniedException):
        contribution_service.invite_contribution(idea.id, owner, owner.id, "Join", ["React"])


def test_invite_unknown_user_is_not_found(contribution_service, idea, owner):
    with pytest.raises(ResourceNotFoundException):
        contribution_service.invite_contribution(idea.id, owner, 9999, "Join", ["React"])


def test_invite_blocked_by_pending_candidate_request(
    session, contribution_service, idea, owner, candidate
):
    contribution_service.request_contribution(idea.id, candidate, "Hello")

    with pytest.raises(DuplicateRequestException):
        contribution_service.invite_contribution(
            idea.id, owner, candidate.id, "Join", ["React"]
        )
    assert _pending_rows(session, idea.id, candidate.id) == 1


# -------------------------------------------------------------------- responses
def test_accepting_invite_makes_candidate_a_contributor(
    session, contribution_service, idea, owner, candidate
):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )

    accepted = contribution_service.respond_to_invite(
        invite.id, candidate, "ACCEPTED", idea_id=idea.id
    )

    assert accepted.status == ContributionStatus.ACCEPTED
    assert accepted.responded_at is not None
    assert contribution_service.is_contributor(idea.id, candidate.id) is True

    notifications = _notifications(session, owner.id)
    assert [n.notification_type for n in notifications] == [
        NotificationType.CONTRIBUTION_ACCEPTED.value
    ]
    assert notifications[0].title == "Contribution Invitation Accepted"
    assert len(_activities(session, ActivityType.CONTRIBUTION_ACCEPTED)) == 1

    with pytest.raises(DuplicateRequestException) as exc_info:
        contribution_service.request_contribution(idea.id, candidate, "Again")
    assert exc_info.value.message == "You are already a contributor to this idea"


def test_rejecting_invite_allows_a_new_invitation(
    session, contribution_service, idea, owner, candidate
):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    rejected = contribution_service.respond_to_invite(invite.id, candidate, "rejected")

    assert rejected.status == ContributionStatus.REJECTED
    assert contribution_service.is_contributor(idea.id, candidate.id) is False
    notifications = _notifications(session, owner.id)
    assert notifications[-1].notification_type == NotificationType.CONTRIBUTION_DECLINED.value

    second = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Second try", ["Node"]
    )
    assert second.id != invite.id
    assert second.status == ContributionStatus.PENDING


def test_responding_twice_is_a_conflict(contribution_service, idea, owner, candidate):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(invite.id, candidate, "accepted")

    with pytest.raises(ResourceConflictException):
        contribution_service.respond_to_invite(invite.id, candidate, "rejected")


def test_only_invited_user_can_respond(contribution_service, idea, owner, candidate, stranger):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    with pytest.raises(PermissionDeniedException):
        contribution_service.respond_to_invite(invite.id, stranger, "accepted")
    with pytest.raises(PermissionDeniedException):
        contribution_service.respond_to_invite(invite.id, owner, "accepted")


def test_candidate_cannot_accept_own_request(contribution_service, idea, candidate):
    request = contribution_service.request_contribution(idea.id, candidate, "Hello")
    with pytest.raises(PermissionDeniedException):
        contribution_service.respond_to_invite(request.id, candidate, "accepted")


@pytest.mark.parametrize("decision", ["maybe", "", "withdrawn", "pending"])
def test_respond_rejects_unknown_decision(contribution_service, idea, owner, candidate, decision):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    with pytest.raises(ValidationException):
        contribution_service.respond_to_invite(invite.id, candidate, decision)


def test_respond_with_mismatched_idea_is_not_found(
    contribution_service, make_idea, idea, owner, candidate
):
    other = make_idea(owner, "Other idea", skills=["Go"])
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    with pytest.raises(ResourceNotFoundException):
        contribution_service.respond_to_invite(
            invite.id, candidate, "accepted", idea_id=other.id
        )


# ----------------------------------------------------------------- cancellation
def test_owner_cancels_pending_invite(session, contribution_service, idea, owner, candidate):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    invite_id = invite.id

    contribution_service.cancel_invite(invite_id, owner, idea_id=idea.id)

    assert session.get(ContributionRequest, invite_id) is None
    cancelled = [
        n
        for n in _notifications(session, candidate.id)
        if n.notification_type == NotificationType.CONTRIBUTION_INVITATION_CANCELLED.value
    ]
    assert len(cancelled) == 1
    assert len(_activities(session, ActivityType.CONTRIBUTION_INVITATION_CANCELLED)) == 1


def test_cancel_invite_guards(contribution_service, idea, owner, candidate, stranger):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    with pytest.raises(PermissionDeniedException):
        contribution_service.cancel_invite(invite.id, stranger)
    with pytest.raises(PermissionDeniedException):
        contribution_service.cancel_invite(invite.id, candidate)

    contribution_service.respond_to_invite(invite.id, candidate, "accepted")
    with pytest.raises(ResourceConflictException):
        contribution_service.cancel_invite(invite.id, owner)


def test_owner_cannot_cancel_candidate_request(contribution_service, idea, owner, candidate):
    request = contribution_service.request_contribution(idea.id, candidate, "Hello")
    with pytest.raises(PermissionDeniedException):
        contribution_service.cancel_invite(request.id, owner)


def test_cancel_missing_invite_is_not_found(contribution_service, owner):
    with pytest.raises(ResourceNotFoundException):
        contribution_service.cancel_invite(9999, owner)


# ------------------------------------------------------------------------ reads
def test_list_contributions_for_user_groups_by_status(
    contribution_service, make_idea, idea, owner, candidate
):
    second = make_idea(owner, "Second", skills=["React"])
    third = make_idea(owner, "Third", skills=["React"])
    contribution_service.request_contribution(idea.id, candidate, "Hello")
    invite = contribution_service.invite_contribution(
        second.id, owner, candidate.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(invite.id, candidate, "accepted")
    declined = contribution_service.invite_contribution(
        third.id, owner, candidate.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(declined.id, candidate, "rejected")

    grouped = contribution_service.list_contributions_for_user(candidate, candidate.id)

    assert set(grouped) == {"pending", "accepted", "rejected", "withdrawn"}
    assert [r.idea_id for r in grouped["pending"]] == [idea.id]
    assert [r.idea_id for r in grouped["accepted"]] == [second.id]
    assert [r.idea_id for r in grouped["rejected"]] == [third.id]
    assert grouped["withdrawn"] == []


def test_list_contributions_for_other_user_is_forbidden(
    contribution_service, candidate, stranger
):
    with pytest.raises(PermissionDeniedException):
        contribution_service.list_contributions_for_user(stranger, candidate.id)


def test_list_requests_for_idea_filters_by_status(
    contribution_service, make_user, idea, owner, candidate
):
    other = make_user("Other")
    contribution_service.request_contribution(idea.id, candidate, "Hello")
    invite = contribution_service.invite_contribution(
        idea.id, owner, other.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(invite.id, other, "accepted")

    everything = contribution_service.list_requests_for_idea(idea.id, owner)
    assert {r.user_id for r in everything} == {candidate.id, other.id}

    accepted = contribution_service.list_requests_for_idea(idea.id, owner, status="Accepted")
    assert [r.user_id for r in accepted] == [other.id]

    with pytest.raises(ValidationException):
        contribution_service.list_requests_for_idea(idea.id, owner, status="bogus")


def test_list_requests_for_idea_is_owner_only(contribution_service, idea, candidate):
    with pytest.raises(PermissionDeniedException):
        contribution_service.list_requests_for_idea(idea.id, candidate)


def test_list_invites_for_idea_puts_pending_first(
    contribution_service, make_user, idea, owner, candidate
):
    other = make_user("Other")
    first = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(first.id, candidate, "rejected")
    second = contribution_service.invite_contribution(
        idea.id, owner, other.id, "Join", ["Node"]
    )
    contribution_service.request_contribution(idea.id, candidate, "Asking myself")

    invites = contribution_service.list_invites_for_idea(idea.id, owner)

    assert [invite.id for invite in invites] == [second.id, first.id]


def test_summarize_idea_requests(contribution_service, make_user, idea, owner, candidate):
    other = make_user("Other")
    contribution_service.request_contribution(idea.id, candidate, "Hello")
    invite = contribution_service.invite_contribution(
        idea.id, owner, other.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(invite.id, other, "rejected")

    summary = contribution_service.summarize_idea_requests(idea.id, owner)

    assert summary["idea_id"] == idea.id
    assert summary["requests"]["pending"] == 1
    assert summary["invitations"]["rejected"] == 1
    assert summary["totals"] == {"pending": 1, "accepted": 0, "rejected": 1, "withdrawn": 0}


def test_list_pending_invites(contribution_service, make_idea, idea, owner, candidate):
    second = make_idea(owner, "Second", skills=["React"])
    kept = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    answered = contribution_service.invite_contribution(
        second.id, owner, candidate.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(answered.id, candidate, "accepted")

    inbox = contribution_service.list_pending_invites(candidate)

    assert [invite.id for invite in inbox] == [kept.id]


def test_list_contributors_visibility(
    contribution_service, idea, owner, candidate, stranger
):
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    with pytest.raises(PermissionDeniedException):
        contribution_service.list_contributors(idea.id, candidate)

    contribution_service.respond_to_invite(invite.id, candidate, "accepted")

    assert [u.id for u in contribution_service.list_contributors(idea.id, owner)] == [
        candidate.id
    ]
    assert [u.id for u in contribution_service.list_contributors(idea.id, candidate)] == [
        candidate.id
    ]
    with pytest.raises(PermissionDeniedException):
        contribution_service.list_contributors(idea.id, stranger)


def test_check_contributor_requires_existing_idea(
    contribution_service, idea, owner, candidate
):
    assert contribution_service.check_contributor(idea.id, candidate) is False
    invite = contribution_service.invite_contribution(
        idea.id, owner, candidate.id, "Join", ["React"]
    )
    contribution_service.respond_to_invite(invite.id, candidate, "accepted")
    assert contribution_service.check_contributor(idea.id, candidate) is True

    with pytest.raises(ResourceNotFoundException):
        contribution_service.check_contributor(424242, candidate)
