import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker

# Must be set before any app module is imported so nothing binds to a real database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["TELEGRAM_BOT_TOKEN"] = "123:test-token"
os.environ["SUPABASE_URL"] = "https://testproject.supabase.co"
os.environ["PUBLIC_BASE_URL"] = "https://api.example.com"
os.environ["TELEGRAM_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test"

from app.main import app
from app.database import Base
import app.database as db_module
import app.dependencies as dependencies_module
from app.models.user import User, UserRole
from app.exceptions import UpstreamError
from app.services.gemini import GeminiClient
from app.services.telegram import TelegramClient


@pytest.fixture(scope="session")
def test_engine():
    return create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,  # share same in-memory DB across connections
    )


@pytest.fixture()
def db_session(test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    # Fresh schema per test
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(autouse=True)
def patch_sessionlocal(monkeypatch, test_engine, db_session):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    monkeypatch.setattr(db_module, "engine", test_engine, raising=False)
    monkeypatch.setattr(db_module, "SessionLocal", TestingSessionLocal, raising=True)
    # get_db looks SessionLocal up at call time, so patching the module is enough
    monkeypatch.setattr(dependencies_module, "SessionLocal", TestingSessionLocal, raising=True)

    if hasattr(app.state, "limiter"):
        setattr(app.state.limiter, "enabled", False)
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client():
    return TestClient(app)


def _seed_user(db, email, role):
    user = User(
        email=email,
        password_hash="x",
        name="Test User",
        role=role,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture()
def admin_user(db_session):
    return _seed_user(db_session, "admin@example.com", UserRole.ADMIN)


@pytest.fixture()
def regular_user(db_session):
    return _seed_user(db_session, "owner@example.com", UserRole.USER)


@pytest.fixture()
def other_user(db_session):
    return _seed_user(db_session, "other@example.com", UserRole.USER)


class FakeGemini:
    """Stands in for GeminiClient.generate_text and records prompts."""

    def __init__(self):
        self.reply = ""
        self.error = None
        self.prompts = []

    def __call__(self, prompt, **kwargs):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture()
def fake_gemini(monkeypatch):
    fake = FakeGemini()
    monkeypatch.setattr(GeminiClient, "generate_text", fake)
    return fake


class FakeTelegram:
    """Replaces TelegramClient.call; responses are keyed by Bot API method."""

    def __init__(self):
        self.calls = []
        self.responses = {
            "getMe": {"ok": True, "result": {"id": 999, "username": "announce_bot"}},
            "setWebhook": {"ok": True, "result": True, "description": "Webhook was set"},
            "setMyCommands": {"ok": True, "result": True},
            "sendMessage": {"ok": True, "result": {"message_id": 42}},
            "getChatMember": {"ok": True, "result": {"status": "administrator"}},
            "getChatMemberCount": {"ok": True, "result": 1234},
            "getChat": {"ok": True, "result": {"id": -100555, "title": "Alpha Traders", "type": "supergroup"}},
        }
        self.failing_chats = set()

    def __call__(self, method, payload=None):
        self.calls.append((method, payload))
        if method == "sendMessage" and payload and payload["chat_id"] in self.failing_chats:
            raise UpstreamError("Telegram sendMessage failed: chat not found")
        data = self.responses[method]
        if not data.get("ok"):
            raise UpstreamError(f"Telegram {method} failed: {data.get('description')}")
        return data

    def methods(self):
        return [method for method, _ in self.calls]


@pytest.fixture()
def fake_telegram(monkeypatch):
    fake = FakeTelegram()
    monkeypatch.setattr(TelegramClient, "call", fake)
    return fake
