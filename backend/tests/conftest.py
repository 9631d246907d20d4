import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.config import settings
from app.database import Base, get_db
from app.main import app
from app.models.task import Task
from app.models.user import User
from app.services import notification_service
from app.services.auth_provider import AuthProviderError, get_auth_provider
from app.services.auth_service import hash_password

TEST_DB_URL = "sqlite:///./test_taskboard.db"
TEST_PASSWORD = "Password1!"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class FakeAuthProvider:
    """메모리 기반 외부 인증 서비스. 실패 주입용 큐를 가진다."""

    def __init__(self):
        self.users = {}
        self.calls = []
        self.sign_up_errors = []
        self.create_errors = []
        self.update_errors = []
        self.delete_errors = []
        self._seq = 0

    def _add(self, email, password):
        self._seq += 1
        provider_id = f"ext-{self._seq}"
        self.users[provider_id] = {"id": provider_id, "email": email, "password": password, "user_metadata": {}}
        return self.users[provider_id]

    def sign_up(self, email, password):
        self.calls.append(("sign_up", email))
        if self.sign_up_errors:
            raise self.sign_up_errors.pop(0)
        if self.find_user_by_email(email):
            raise AuthProviderError("User already registered", 422, "user_already_exists")
        return self._add(email, password)

    def create_user(self, email, password, email_confirm=True):
        self.calls.append(("create_user", email))
        if self.create_errors:
            raise self.create_errors.pop(0)
        if self.find_user_by_email(email):
            raise AuthProviderError(
                "A user with this email address has already been registered", 422, "email_exists"
            )
        return self._add(email, password)

    def list_users(self):
        return list(self.users.values())

    def find_user_by_email(self, email):
        for user in self.users.values():
            if user["email"].lower() == email.lower():
                return user
        return None

    def delete_user(self, provider_user_id):
        self.calls.append(("delete_user", provider_user_id))
        if self.delete_errors:
            raise self.delete_errors.pop(0)
        self.users.pop(provider_user_id, None)

    def update_user(self, provider_user_id, *, password=None, email_confirm=None, user_metadata=None):
        self.calls.append(("update_user", provider_user_id))
        if self.update_errors:
            raise self.update_errors.pop(0)
        user = self.users[provider_user_id]
        if password is not None:
            user["password"] = password
        if user_metadata is not None:
            user["user_metadata"] = user_metadata
        return user


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def auth_provider():
    provider = FakeAuthProvider()
    app.dependency_overrides[get_auth_provider] = lambda: provider
    yield provider
    app.dependency_overrides.pop(get_auth_provider, None)


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    outbox = []

    def fake_send_email(to, subject, text, html=None):
        outbox.append({"to": to, "subject": subject, "text": text, "html": html})
        return {"success": True}

    monkeypatch.setattr(notification_service, "send_email", fake_send_email)
    monkeypatch.setattr(settings, "EMAIL_RETRY_BACKOFF_SECONDS", 0.0)
    return outbox


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_users(db):
    users = {
        "admin": User(email="admin@test.com", name="Admin", role="ADMIN", password=TEST_PASSWORD_HASH),
        "user1": User(email="user1@test.com", name="Ann", role="USER", password=TEST_PASSWORD_HASH),
        "user2": User(email="user2@test.com", name="Bob", role="USER", password=TEST_PASSWORD_HASH),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_task(db, seed_users):
    # admin 이 만들고 user1 에게 배정한 태스크
    task = Task(
        title="API 설계",
        description="태스크 API 문서 정리",
        priority="HIGH",
        status="OPEN",
        tags=["backend"],
        assigned_to_id=seed_users["user1"].user_id,
        created_by_id=seed_users["admin"].user_id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def get_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["access_token"]


def auth_headers(client, email: str) -> dict:
    return {"Authorization": f"Bearer {get_token(client, email)}"}
