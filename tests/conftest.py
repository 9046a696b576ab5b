"""
Test configuration and fixtures.

FakeSupabase stands in for supabase-py's sync Client: an in-memory table
store behind the same query-builder chain, plus an auth client that issues
sessions and emits auth-state events the way the SDK does (synchronously,
on whatever thread made the call).
"""

import copy
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from taskmarket.database.supabase_client import get_request_supabase, get_supabase
from taskmarket.core.dependencies import get_auth_service
from taskmarket.modules.auth.service import AuthService, clear_auth_cache


class FakeAPIError(Exception):
    pass


class FakeAuthError(Exception):
    pass


class FakeResponse:
    def __init__(self, data):
        self.data = data
        self.count = None


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.filters: List[tuple] = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None
        self._single: Optional[str] = None

    def select(self, columns: str = "*", **kwargs):
        self.columns = columns
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, payload):
        self.op, self.payload = "update", payload
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def in_(self, column, values):
        self.filters.append(("in", column, list(values)))
        return self

    def order(self, column, desc: bool = False):
        self._order = (column, desc)
        return self

    def limit(self, count: int):
        self._limit = count
        return self

    def single(self):
        self._single = "single"
        return self

    def maybe_single(self):
        self._single = "maybe"
        return self

    def _matches(self, row: Dict[str, Any]) -> bool:
        for kind, column, value in self.filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "in" and row.get(column) not in value:
                return False
        return True

    def execute(self):
        self.db.record(self)
        for hook in list(self.db.hooks):
            hook(self.table_name, self.op)
        delay = self.db.delays.get(self.table_name)
        if delay:
            time.sleep(delay)
        error = self.db.failures.get((self.table_name, self.op)) or self.db.failures.get((self.table_name, "*"))
        if error is not None:
            raise error

        with self.db.lock:
            rows = self.db.tables.setdefault(self.table_name, [])
            if self.op == "insert":
                items = self.payload if isinstance(self.payload, list) else [self.payload]
                created = []
                for item in items:
                    row = {"id": str(uuid.uuid4()), **item}
                    rows.append(row)
                    created.append(copy.deepcopy(row))
                return FakeResponse(created)

            matched = [row for row in rows if self._matches(row)]
            if self.op == "update":
                for row in matched:
                    row.update(self.payload)
            elif self.op == "delete":
                for row in matched:
                    rows.remove(row)
            data = [copy.deepcopy(row) for row in matched]

        if self._order:
            column, desc = self._order
            data.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._limit is not None:
            data = data[: self._limit]
        if self._single == "single":
            if len(data) != 1:
                raise FakeAPIError("JSON object requested, multiple (or no) rows returned")
            return FakeResponse(data[0])
        if self._single == "maybe":
            return FakeResponse(data[0] if data else None)
        return FakeResponse(data)


@dataclass
class FakeUser:
    id: str
    email: str
    user_metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: str = "2026-01-01T00:00:00+00:00"


@dataclass
class FakeSession:
    access_token: str
    user: FakeUser


@dataclass
class FakeAuthResponse:
    user: Optional[FakeUser]
    session: Optional[FakeSession]


@dataclass
class FakeUserResponse:
    user: FakeUser


class FakeSubscription:
    def __init__(self, auth: "FakeAuth", callback):
        self.auth = auth
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        self.active = False
        if self.callback in self.auth.listeners:
            self.auth.listeners.remove(self.callback)


class FakeAdmin:
    def __init__(self):
        self.signed_out: List[str] = []

    def sign_out(self, jwt, scope="global"):
        self.signed_out.append(jwt)


class FakeAuth:
    def __init__(self):
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.tokens: Dict[str, FakeUser] = {}
        self.session: Optional[FakeSession] = None
        self.session_error: Optional[Exception] = None
        self.listeners: List[Callable] = []
        self.sign_up_calls: List[Dict[str, Any]] = []
        self.sign_in_calls: List[Dict[str, Any]] = []
        self.sign_out_calls = 0
        self.admin = FakeAdmin()

    def emit(self, event: str, session: Optional[FakeSession]):
        for callback in list(self.listeners):
            callback(event, session)

    def add_account(self, email: str, password: str, confirmed: bool = True) -> FakeUser:
        user = FakeUser(id=str(uuid.uuid4()), email=email)
        self.accounts[email] = {"password": password, "user": user, "confirmed": confirmed}
        self.tokens[f"token-{user.id}"] = user
        return user

    def sign_in_with_password(self, credentials):
        self.sign_in_calls.append(credentials)
        account = self.accounts.get(credentials["email"])
        if account is None or account["password"] != credentials["password"]:
            raise FakeAuthError("Invalid login credentials")
        if not account["confirmed"]:
            raise FakeAuthError("Email not confirmed")
        user = account["user"]
        self.session = FakeSession(access_token=f"token-{user.id}", user=user)
        self.emit("SIGNED_IN", self.session)
        return FakeAuthResponse(user=user, session=self.session)

    def sign_up(self, credentials):
        self.sign_up_calls.append(credentials)
        if credentials["email"] in self.accounts:
            raise FakeAuthError("User already registered")
        user = self.add_account(credentials["email"], credentials["password"], confirmed=False)
        return FakeAuthResponse(user=user, session=None)

    def sign_out(self):
        self.sign_out_calls += 1
        self.session = None
        self.emit("SIGNED_OUT", None)

    def get_session(self):
        if self.session_error is not None:
            raise self.session_error
        return self.session

    def get_user(self, jwt=None):
        user = self.tokens.get(jwt)
        if user is None:
            raise FakeAuthError("invalid JWT: unable to parse or verify signature")
        return FakeUserResponse(user=user)

    def on_auth_state_change(self, callback):
        self.listeners.append(callback)
        return FakeSubscription(self, callback)


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[tuple] = []
        self.failures: Dict[tuple, Exception] = {}
        self.delays: Dict[str, float] = {}
        self.hooks: List[Callable[[str, str], None]] = []
        self.lock = threading.Lock()
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    from_ = table

    def record(self, query: FakeQuery):
        self.calls.append((query.table_name, query.op, copy.deepcopy(query.payload), list(query.filters)))

    def calls_to(self, table: str, op: Optional[str] = None) -> List[tuple]:
        return [c for c in self.calls if c[0] == table and (op is None or c[1] == op)]

    def fail(self, table: str, op: str = "*", message: str = "backend unavailable"):
        self.failures[(table, op)] = FakeAPIError(message)

    def add_user(
        self,
        email: str = "worker@example.com",
        password: str = "Secret123",
        confirmed: bool = True,
        admin: bool = False,
        **profile: Any,
    ) -> FakeUser:
        user = self.auth.add_account(email, password, confirmed)
        row = {
            "id": user.id,
            "email": email,
            "full_name": "Test Worker",
            "membership_tier": "none",
            "daily_tasks_used": 0,
            "total_earnings": 0,
            "pending_earnings": 0,
            "approved_earnings": 0,
            "tasks_completed": 0,
        }
        row.update(profile)
        self.tables.setdefault("profiles", []).append(row)
        if admin:
            self.tables.setdefault("user_roles", []).append(
                {"id": str(uuid.uuid4()), "user_id": user.id, "role": "admin"}
            )
        return user


def auth_headers(user: FakeUser) -> Dict[str, str]:
    return {"Authorization": f"Bearer token-{user.id}"}


@pytest.fixture(autouse=True)
def reset_auth_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def app(fake_supabase):
    from taskmarket.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_request_supabase] = lambda: fake_supabase
    app.dependency_overrides[get_auth_service] = lambda: AuthService(
        fake_supabase, auth_client_factory=lambda: fake_supabase
    )
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def worker(fake_supabase) -> FakeUser:
    return fake_supabase.add_user()


@pytest.fixture
def admin(fake_supabase) -> FakeUser:
    return fake_supabase.add_user(email="admin@example.com", full_name="Admin", admin=True)
