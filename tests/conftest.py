"""
Pytest configuration and shared fixtures.

The data service and the identity provider are replaced by in-memory
fakes served through httpx.MockTransport.
"""
import json
import re
import uuid
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from jose import jwt

from todoapp.app import build_services
from todoapp.auth.models import Session
from todoapp.auth.session_store import SessionStore
from todoapp.settings import Settings

GRAPHQL_URL = "https://hasura.test/v1/graphql"
IDENTITY_URL = "https://identity.test/v1"
ADMIN_SECRET = "test-admin-secret"
API_KEY = "test-api-key"
TOKEN_SECRET = "test-signing-key"

OPERATION_RE = re.compile(r"(?:query|mutation)\s+(\w+)")


def make_token(user_id: str, email: str, expires_in: int = 3600) -> str:
    """Build an ID token shaped like the ones Firebase issues."""
    exp = int((datetime.now(timezone.utc) + timedelta(seconds=expires_in)).timestamp())
    return jwt.encode(
        {"user_id": user_id, "sub": user_id, "email": email, "exp": exp},
        TOKEN_SECRET,
        algorithm="HS256",
    )


class FakeHasura:
    """In-memory stand-in for the GraphQL data service."""

    def __init__(self):
        self.users: dict[str, dict] = {}
        self.todos: dict[str, dict] = {}
        self.referrals: list[dict] = []
        self.requests: list[httpx.Request] = []
        self.operations: list[str] = []
        self.fail_operations: set[str] = set()
        self._clock = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)

    def _now(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content)
        operation = OPERATION_RE.search(body["query"]).group(1)
        self.operations.append(operation)
        variables = body.get("variables") or {}

        if operation in self.fail_operations:
            return httpx.Response(200, json={
                "errors": [{"message": "database error", "extensions": {"code": "unexpected"}}],
            })

        handler = getattr(self, f"op_{operation}")
        return httpx.Response(200, json={"data": handler(variables)})

    # ==================== USERS ====================

    def op_CreateUser(self, v):
        self.users[v["id"]] = {"id": v["id"], "email": v["email"]}
        return {"insert_users_one": self.users[v["id"]]}

    # ==================== TODOS ====================

    def op_GetTodos(self, v):
        rows = [t for t in self.todos.values() if t["user_id"] == v["userId"]]
        rows.sort(key=lambda t: t["created_at"], reverse=True)
        return {"todos": [dict(t) for t in rows]}

    def op_AddTodo(self, v):
        now = self._now()
        todo = {
            "id": str(uuid.uuid4()),
            "user_id": v["userId"],
            "title": v["title"],
            "description": v["description"],
            "is_completed": False,
            "created_at": now,
            "updated_at": now,
        }
        self.todos[todo["id"]] = todo
        return {"insert_todos_one": dict(todo)}

    def op_UpdateTodo(self, v):
        todo = self.todos.get(v["id"])
        if not todo or todo["user_id"] != v["userId"]:
            return {"update_todos": {"returning": []}}
        for key, value in v["changes"].items():
            todo[key] = self._now() if value == "now()" else value
        return {"update_todos": {"returning": [dict(todo)]}}

    def op_DeleteTodo(self, v):
        todo = self.todos.get(v["id"])
        if not todo or todo["user_id"] != v["userId"]:
            return {"delete_todos": {"returning": []}}
        del self.todos[v["id"]]
        return {"delete_todos": {"returning": [{"id": v["id"]}]}}

    # ==================== REFERRALS ====================

    def op_GetReferral(self, v):
        return {"referrals": [dict(r) for r in self.referrals if r["referrer_id"] == v["referrerId"]]}

    def op_GetReferrer(self, v):
        return {"referrals": [dict(r) for r in self.referrals if r["referral_code"] == v["referralCode"]]}

    def op_AddReferral(self, v):
        row = {"referrer_id": v["referrerId"], "referral_code": v["referralCode"], "referred_id": None}
        self.referrals.append(row)
        return {"insert_referrals": {"returning": [dict(row)]}}

    def op_RedeemReferral(self, v):
        affected = 0
        for row in self.referrals:
            if row["referral_code"] == v["referralCode"] and row["referred_id"] is None:
                row["referred_id"] = v["referredId"]
                affected += 1
        return {"update_referrals": {"affected_rows": affected}}


class FakeFirebase:
    """In-memory stand-in for the Firebase Auth REST API."""

    def __init__(self):
        self.accounts: dict[str, dict] = {}
        self.requests: list[httpx.Request] = []

    @staticmethod
    def _error(message: str) -> httpx.Response:
        return httpx.Response(400, json={"error": {"code": 400, "message": message}})

    def _signed_in(self, account: dict) -> httpx.Response:
        return httpx.Response(200, json={
            "localId": account["uid"],
            "email": account["email"],
            "idToken": make_token(account["uid"], account["email"]),
            "refreshToken": "refresh-" + account["uid"],
            "expiresIn": "3600",
        })

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.params.get("key") != API_KEY:
            return self._error("API_KEY_INVALID")

        body = json.loads(request.content)
        email, password = body.get("email", ""), body.get("password", "")

        if request.url.path.endswith("accounts:signUp"):
            if email in self.accounts:
                return self._error("EMAIL_EXISTS")
            if len(password) < 6:
                return self._error("WEAK_PASSWORD : Password should be at least 6 characters")
            self.accounts[email] = {"uid": uuid.uuid4().hex[:28], "email": email, "password": password}
            return self._signed_in(self.accounts[email])

        if request.url.path.endswith("accounts:signInWithPassword"):
            account = self.accounts.get(email)
            if not account or account["password"] != password:
                return self._error("INVALID_LOGIN_CREDENTIALS")
            return self._signed_in(account)

        return httpx.Response(404, json={"error": {"message": "NOT_FOUND"}})


class RecordingNotifier:
    """Notifier that keeps every alert."""

    def __init__(self):
        self.alerts: list[tuple[str, str]] = []

    def alert(self, title: str, message: str) -> None:
        self.alerts.append((title, message))

    @property
    def titles(self) -> list[str]:
        return [title for title, _ in self.alerts]


@pytest.fixture
def fake_hasura():
    return FakeHasura()


@pytest.fixture
def fake_firebase():
    return FakeFirebase()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        _env_file=None,
        graphql_url=GRAPHQL_URL,
        graphql_admin_secret=ADMIN_SECRET,
        firebase_api_key=API_KEY,
        identity_base_url=IDENTITY_URL,
        data_dir=tmp_path,
        session_database_url=f"sqlite:///{tmp_path / 'session.db'}",
    )


@pytest.fixture
def store(test_settings):
    session_store = SessionStore(test_settings.session_database_url)
    yield session_store
    session_store.close()


@pytest.fixture
def services(test_settings, store, fake_hasura, fake_firebase):
    return build_services(
        test_settings,
        store=store,
        graphql_transport=httpx.MockTransport(fake_hasura.handle),
        identity_transport=httpx.MockTransport(fake_firebase.handle),
    )


@pytest.fixture
def session():
    return Session(
        user_id="user-1",
        email="user1@example.com",
        token=make_token("user-1", "user1@example.com"),
    )
