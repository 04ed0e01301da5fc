# ruff: noqa: E402
import os
from typing import Dict, Iterable, Optional

import pytest

# Set testing environment flags before importing the app or settings
os.environ["APP_ENV"] = "test"
os.environ["SIDE_EFFECT_RETRY_ENABLED"] = "0"

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

import app.models.registry  # noqa: F401 - populate Base.metadata
from app.core.config import settings
from app.core.database import Base, build_engine, get_db
from app.main import app
from app.modules.ideas.models import Idea, IdeaSkill, IdeaStatus, IdeaVisibility
from app.modules.users.models import Skill, SkillLevel, User, UserSkill
from app.oauth2 import create_access_token
from app.services.contributions import ContributionService
from app.services.matching import MatchingService
from app.services.side_effects import InMemoryRetryQueue, SideEffectEmitter
from tests.testclient import TestClient

# Align settings with test environment even if loaded before env vars
object.__setattr__(settings, "environment", "test")

test_db_url = settings.get_database_url(use_test=True)

# Safety: never run tests against a non-test Postgres database.
parsed_url = make_url(test_db_url)
if parsed_url.drivername.startswith("postgresql") and parsed_url.database:
    if not parsed_url.database.endswith("_test"):
        raise RuntimeError(
            f"Refusing to run tests against non-test database '{parsed_url.database}'. "
            "Set TEST_DATABASE_URL to a dedicated *_test database."
        )

engine = build_engine(test_db_url)
Base.metadata.drop_all(bind=engine)
Base.metadata.create_all(bind=engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def _truncate_all() -> None:
    with engine.begin() as connection:
        if engine.dialect.name == "sqlite":
            for table in reversed(Base.metadata.sorted_tables):
                connection.execute(table.delete())
        else:
            table_names = ", ".join(f'"{tbl.name}"' for tbl in Base.metadata.sorted_tables)
            if table_names:
                connection.execute(text(f"TRUNCATE {table_names} RESTART IDENTITY CASCADE"))


# Autouse cleanup to keep DB isolated across all tests, including those that
# do not explicitly request the session fixture.
@pytest.fixture(autouse=True, scope="function")
def _clean_db_between_tests():
    _truncate_all()
    yield


@pytest.fixture(scope="function")
def session():
    """Fresh database session for each test."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def client(session):
    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        try:
            yield test_client
        finally:
            app.dependency_overrides.clear()


# ----------------------------------------------------------------- factories
def _get_or_create_skill(session, name: str) -> Skill:
    skill = session.query(Skill).filter(Skill.name == name).first()
    if skill is None:
        skill = Skill(name=name)
        session.add(skill)
        session.flush()
    return skill


@pytest.fixture
def make_user(session):
    """Factory: `make_user("Ada", skills={"Python": SkillLevel.EXPERT})`."""
    counter = {"n": 0}

    def _make_user(
        name: str = "User",
        email: Optional[str] = None,
        skills: Optional[Dict[str, SkillLevel]] = None,
    ) -> User:
        counter["n"] += 1
        user = User(name=name, email=email or f"user{counter['n']}@example.com")
        for skill_name, level in (skills or {}).items():
            user.skills.append(
                UserSkill(skill=_get_or_create_skill(session, skill_name), level=level)
            )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_idea(session):
    """Factory: `make_idea(author, "Title", skills=["React"])`."""

    def _make_idea(
        author: User,
        title: str = "Idea",
        skills: Iterable[str] = (),
        status: IdeaStatus = IdeaStatus.PUBLISHED,
        visibility: IdeaVisibility = IdeaVisibility.PUBLIC,
    ) -> Idea:
        idea = Idea(
            author_id=author.id,
            title=title,
            description=f"{title} description",
            status=status,
            visibility=visibility,
        )
        idea.skill_links = [
            IdeaSkill(skill=_get_or_create_skill(session, name)) for name in skills
        ]
        session.add(idea)
        session.commit()
        session.refresh(idea)
        return idea

    return _make_idea


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> Dict[str, str]:
        token = create_access_token({"user_id": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def retry_queue():
    return InMemoryRetryQueue()


@pytest.fixture
def emitter(session, retry_queue):
    return SideEffectEmitter(session, retry_queue=retry_queue)


@pytest.fixture
def contribution_service(session, emitter):
    return ContributionService(session, emitter=emitter)


@pytest.fixture
def matching_service(session):
    return MatchingService(session)
