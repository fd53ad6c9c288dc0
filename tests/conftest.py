"""
Shared fixtures: an in-memory stand-in for the Supabase client and a TestClient
wired to it through FastAPI dependency overrides.
"""

import itertools
import re
import uuid
from datetime import datetime, timedelta
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from connectvida.database.supabase_client import get_supabase, get_service_supabase
from connectvida.modules.auth.service import clear_auth_cache

_clock = itertools.count()
_BASE_TIME = datetime(2024, 1, 1)


def _timestamp() -> str:
    # Strictly increasing so created_at ordering follows insertion order
    return (_BASE_TIME + timedelta(seconds=next(_clock))).isoformat()


def _sort_key(value: Any):
    return (value is None, value if value is not None else "")


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.on_conflict = "id"
        self.filters: List = []
        self.orders: List = []
        self.limit_value: Optional[int] = None
        self.mode: Optional[str] = None
        self.count: Optional[str] = None

    # operations

    def select(self, columns: str = "*", count: Optional[str] = None):
        self.columns = columns
        self.count = count
        return self

    def insert(self, payload):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, values: dict):
        self.op = "update"
        self.payload = values
        return self

    def upsert(self, payload, on_conflict: str = "id", **kwargs):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def delete(self, count: Optional[str] = None):
        self.op = "delete"
        self.count = count
        return self

    # filters

    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def neq(self, column, value):
        self.filters.append(lambda row: row.get(column) != value)
        return self

    def in_(self, column, values):
        values = list(values)
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def is_(self, column, value):
        if value in ("null", None):
            self.filters.append(lambda row: row.get(column) is None)
        else:
            expected = value if isinstance(value, bool) else str(value).lower() == "true"
            self.filters.append(lambda row: row.get(column) is expected)
        return self

    def _compare(self, column, value, check):
        self.filters.append(lambda row: row.get(column) is not None and check(row.get(column), value))
        return self

    def gte(self, column, value):
        return self._compare(column, value, lambda a, b: a >= b)

    def lte(self, column, value):
        return self._compare(column, value, lambda a, b: a <= b)

    def gt(self, column, value):
        return self._compare(column, value, lambda a, b: a > b)

    def lt(self, column, value):
        return self._compare(column, value, lambda a, b: a < b)

    def ilike(self, column, pattern):
        regex = re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("%")) + "$", re.IGNORECASE)
        self.filters.append(lambda row: bool(regex.match(str(row.get(column) or ""))))
        return self

    def order(self, column, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, value: int):
        self.limit_value = value
        return self

    def maybe_single(self):
        self.mode = "maybe_single"
        return self

    def single(self):
        self.mode = "single"
        return self

    # execution

    def _matches(self, row: dict) -> bool:
        return all(f(row) for f in self.filters)

    def _project(self, row: dict) -> dict:
        if self.columns.strip() == "*":
            return dict(row)
        return {c.strip(): row.get(c.strip()) for c in self.columns.split(",")}

    def execute(self):
        self.db.calls.append((self.op, self.table))
        failure = self.db.failures.get((self.table, self.op))
        if failure:
            raise failure
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            created = [self.db.add(self.table, item) for item in items]
            return SimpleNamespace(data=[dict(r) for r in created], count=None)

        if self.op == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            keys = [k.strip() for k in self.on_conflict.split(",")]
            result = []
            for item in items:
                existing = next(
                    (r for r in rows if all(k in item and r.get(k) == item[k] for k in keys)), None
                )
                if existing:
                    existing.update(item)
                    result.append(dict(existing))
                else:
                    result.append(dict(self.db.add(self.table, item)))
            return SimpleNamespace(data=result, count=None)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        if self.op == "delete":
            self.db.tables[self.table] = [r for r in rows if not self._matches(r)]
            return SimpleNamespace(data=[dict(r) for r in matched], count=len(matched) if self.count else None)

        for column, desc in reversed(self.orders):
            matched = sorted(matched, key=lambda r: _sort_key(r.get(column)), reverse=desc)
        total = len(matched)
        if self.limit_value is not None:
            matched = matched[:self.limit_value]
        data = [self._project(r) for r in matched]

        if self.mode == "maybe_single":
            if not data:
                return None
            return SimpleNamespace(data=data[0], count=None)
        if self.mode == "single":
            if len(data) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return SimpleNamespace(data=data[0], count=None)
        return SimpleNamespace(data=data, count=total if self.count else None)


class FakeAuthAdmin:
    def __init__(self, auth: "FakeAuth"):
        self.auth = auth
        self.fail_create: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None

    def create_user(self, attributes: dict):
        if self.fail_create:
            raise self.fail_create
        email = attributes["email"]
        if any((u.email or "").lower() == email.lower() for u in self.auth.users.values()):
            raise Exception("A user with this email address has already been registered")
        user = self.auth.add_user(email, attributes.get("password"), attributes.get("user_metadata"))
        return SimpleNamespace(user=user)

    def update_user_by_id(self, user_id: str, attributes: dict):
        user = self.auth.users[user_id]
        if "password" in attributes:
            user.password = attributes["password"]
        if "user_metadata" in attributes:
            user.user_metadata = attributes["user_metadata"]
        return SimpleNamespace(user=user)

    def delete_user(self, user_id: str):
        if self.fail_delete:
            raise self.fail_delete
        self.auth.users.pop(user_id, None)

    def list_users(self, page: int = 1, per_page: int = 50):
        users = list(self.auth.users.values())
        start = (page - 1) * per_page
        return users[start:start + per_page]


class FakeAuth:
    def __init__(self):
        self.users: Dict[str, SimpleNamespace] = {}
        self.tokens: Dict[str, str] = {}
        self.admin = FakeAuthAdmin(self)

    def add_user(self, email: str, password: Optional[str] = None, metadata: Optional[dict] = None,
                 user_id: Optional[str] = None) -> SimpleNamespace:
        user = SimpleNamespace(
            id=user_id or str(uuid.uuid4()),
            email=email,
            password=password,
            user_metadata=metadata or {},
            app_metadata={},
        )
        self.users[user.id] = user
        return user

    def issue_token(self, user_id: str) -> str:
        token = f"token-{user_id}"
        self.tokens[token] = user_id
        return token

    def sign_in_with_password(self, credentials: dict):
        for user in self.users.values():
            if user.email == credentials["email"] and user.password == credentials["password"]:
                token = self.issue_token(user.id)
                return SimpleNamespace(user=user, session=SimpleNamespace(access_token=token))
        raise Exception("Invalid login credentials")

    def get_user(self, jwt: str = None):
        user_id = self.tokens.get(jwt)
        if not user_id or user_id not in self.users:
            raise Exception("invalid JWT: unable to parse or verify signature")
        return SimpleNamespace(user=self.users[user_id])

    def sign_out(self):
        return None


class FakeSupabase:
    def __init__(self):
        self.tables: Dict[str, List[dict]] = {}
        self.failures: Dict[tuple, Exception] = {}
        self.calls: List[tuple] = []
        self.auth = FakeAuth()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def add(self, table: str, row: dict) -> dict:
        row = dict(row)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", _timestamp())
        self.tables.setdefault(table, []).append(row)
        return row

    def rows(self, table: str) -> List[dict]:
        return self.tables.get(table, [])

    def row(self, table: str, row_id: str) -> Optional[dict]:
        return next((r for r in self.rows(table) if r["id"] == row_id), None)

    def fail(self, table: str, op: str, error: Optional[Exception] = None):
        self.failures[(table, op)] = error or Exception(f"{op} on {table} failed")


@pytest.fixture
def fake():
    clear_auth_cache()
    yield FakeSupabase()
    clear_auth_cache()


@pytest.fixture
def client(fake):
    from connectvida.main import app

    app.dependency_overrides[get_supabase] = lambda: fake
    app.dependency_overrides[get_service_supabase] = lambda: fake
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def add_church(fake: FakeSupabase, **fields) -> dict:
    defaults = {"nome": "Igreja Central", "status": "active", "parent_church_id": None}
    return fake.add("igrejas", {**defaults, **fields})


def add_member(fake: FakeSupabase, church_id: Optional[str], funcao: str = "membro",
               email: Optional[str] = None, **fields) -> tuple:
    """Create an auth user with a membros row. Returns (member row, auth headers)."""
    email = email or f"{uuid.uuid4().hex[:8]}@example.com"
    user = fake.auth.add_user(email, "secret123")
    member = fake.add("membros", {
        "id": user.id,
        "id_igreja": church_id,
        "nome_completo": fields.pop("nome_completo", email.split("@")[0]),
        "email": email,
        "funcao": funcao,
        "status": "ativo",
        **fields,
    })
    return member, {"Authorization": f"Bearer {fake.auth.issue_token(user.id)}"}


def add_super_admin(fake: FakeSupabase, church_id: Optional[str] = None) -> tuple:
    """Super admin without a membros row. Returns (user id, auth headers)."""
    user = fake.auth.add_user("root@example.com", "secret123")
    fake.add("super_admins", {"id": user.id, "nome_completo": "Root", "email": user.email})
    headers = {"Authorization": f"Bearer {fake.auth.issue_token(user.id)}"}
    if church_id:
        headers["X-Church-Id"] = church_id
    return user.id, headers
