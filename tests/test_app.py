import uuid

from sqlalchemy.exc import OperationalError

from app.core.database import get_db
from app.main import app


def test_livez(client):
    response = client.get("/livez")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_readyz(client):
    response = client.get("/readyz")
    assert response.status_code == 200
    assert response.json()["details"] == {"database": "connected"}


def test_readyz_reports_database_failure(client):
    class BrokenSession:
        def execute(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("down"))

    def broken_db():
        yield BrokenSession()

    app.dependency_overrides[get_db] = broken_db
    response = client.get("/readyz")
    assert response.status_code == 503
    assert response.json()["error"]["code"] == "dependency_failure"


def test_request_id_is_echoed(client):
    response = client.get("/livez", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"


def test_request_id_is_generated(client):
    response = client.get("/livez")
    assert uuid.UUID(response.headers["X-Request-ID"])


def test_protected_routes_require_token(client):
    response = client.get("/users/me")
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "not_authenticated"
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_invalid_token_is_rejected(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "invalid_token"


def test_token_for_deleted_user_is_rejected(client, make_user, auth_headers, session):
    user = make_user("Ghost")
    headers = auth_headers(user)
    session.delete(user)
    session.commit()

    response = client.get("/users/me", headers=headers)
    assert response.status_code == 401


def test_users_me(client, make_user, auth_headers):
    from app.modules.users.models import SkillLevel

    user = make_user("Ada", skills={"Python": SkillLevel.EXPERT})
    response = client.get("/users/me", headers=auth_headers(user))
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "Ada"
    assert body["skills"] == [{"name": "Python", "level": "expert"}]
