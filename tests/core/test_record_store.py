import pytest
from sqlalchemy.exc import OperationalError

from app.core.database import RecordConflictError, RecordNotFoundError, RecordStore
from app.core.exceptions import DependencyFailureException
from app.modules.users.models import Skill, User


@pytest.fixture
def store(session):
    return RecordStore(session)


def test_insert_and_get(store):
    skill = store.insert(Skill(name="Python"))
    assert skill.id is not None
    assert store.get(Skill, skill.id).name == "Python"
    assert store.get(Skill, 9999) is None


def test_insert_conflict_rolls_back(store, session):
    store.insert(Skill(name="Python"))
    with pytest.raises(RecordConflictError) as exc_info:
        store.insert(Skill(name="Python"))
    assert exc_info.value.table == "skills"
    # Session is usable again after the rollback.
    assert session.query(Skill).count() == 1


def test_update_if_applies_patch_when_criteria_hold(store):
    user = store.insert(User(name="Ada", email="ada@example.com"))
    updated = store.update_if(User, user.id, {"name": "Ada"}, {"name": "Ada L."})
    assert updated.name == "Ada L."


def test_update_if_precondition_failure(store, session):
    user = store.insert(User(name="Ada", email="ada@example.com"))
    with pytest.raises(RecordNotFoundError) as exc_info:
        store.update_if(User, user.id, {"name": "Grace"}, {"name": "Changed"})
    assert exc_info.value.key == user.id
    session.expire_all()
    assert session.get(User, user.id).name == "Ada"


def test_delete_if(store, session):
    skill = store.insert(Skill(name="Go"))
    skill_id = skill.id
    with pytest.raises(RecordNotFoundError):
        store.delete_if(Skill, skill_id, {"name": "Rust"})
    store.delete_if(Skill, skill_id, {"name": "Go"})
    assert session.get(Skill, skill_id) is None


def test_driver_errors_become_dependency_failures(store, session, monkeypatch):
    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(session, "get", unavailable)
    with pytest.raises(DependencyFailureException) as exc_info:
        store.get(Skill, 1)
    assert exc_info.value.status_code == 503
    assert exc_info.value.details == {"service": "database"}
