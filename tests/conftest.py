"""
Shared fixtures: the FastAPI app wired to in-memory stand-ins for
PostgreSQL, GridFS and Google.
"""

from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from gridfs.errors import NoFile
from sqlalchemy import text
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from jobboard.api.deps import (
    get_anon_store, get_google_identity_client, get_resume_storage, get_service_store
)
from jobboard.core.config import Settings, get_settings
from jobboard.core.errors import IdentityVerificationFailed, StoreError
from jobboard.core.tokens import Role, TokenCodec
from jobboard.main import app
from jobboard.services.google_identity import GoogleProfile
from jobboard.services.resume_storage import ResumeStorage
from jobboard.services.store import DataStore

ADMIN_EMAIL = "admin@jobs.test"
ADMIN_PASSWORD = "correct-horse-battery"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


class FakeStore:
    """In-memory stand-in for DataStore with the same call surface."""

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.fail_on: set = set()
        self.updates: List[tuple] = []
        self._tick = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        self._tick += timedelta(seconds=1)
        return self._tick

    def _check(self, op: str, table: str) -> None:
        if (op, table) in self.fail_on:
            raise StoreError(f"{op} on {table} failed")

    def _rows(self, table: str) -> List[Dict[str, Any]]:
        if table == "jobs_public":
            return [r for r in self.tables["jobs"] if r.get("is_active")]
        if table == "applications_admin_view":
            jobs = {j["id"]: j for j in self.tables["jobs"]}
            return [{**a, "job_title": jobs.get(a["job_id"], {}).get("title")} for a in self.tables["applications"]]
        if table == "user_profile_view":
            return self.tables["users"]
        return self.tables[table]

    @staticmethod
    def _matches(row, filters, where_in=None) -> bool:
        for key, value in (filters or {}).items():
            if row.get(key) != value:
                return False
        for key, values in (where_in or {}).items():
            if row.get(key) not in values:
                return False
        return True

    @staticmethod
    def _project(row, columns: str) -> Dict[str, Any]:
        if columns.strip() == "*":
            return dict(row)
        return {c.strip(): row.get(c.strip()) for c in columns.split(",")}

    async def select(self, table, columns="*", *, filters=None, where_in=None,
                     order_by=None, descending=True, limit=None):
        self._check("select", table)
        rows = [r for r in self._rows(table) if self._matches(r, filters, where_in)]
        if order_by:
            rows.sort(key=lambda r: r.get(order_by), reverse=descending)
        if limit is not None:
            rows = rows[:limit]
        return [self._project(r, columns) for r in rows]

    async def select_one(self, table, columns="*", *, filters):
        rows = await self.select(table, columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table, values):
        self._check("insert", table)
        if table == "users" and any(u["email"] == values["email"] for u in self.tables["users"]):
            raise StoreError("duplicate key value violates unique constraint users_email_key")
        now = self._now()
        row = {"id": str(uuid4()), "created_at": now, "updated_at": now, **values}
        if table == "applications":
            row.setdefault("applied_at", now)
        if table == "users":
            row.setdefault("name", None)
            row.setdefault("google_id", None)
            row.setdefault("profile_picture_url", None)
            row.setdefault("is_admin", False)
        self.tables[table].append(row)
        return dict(row)

    async def update(self, table, values, *, filters):
        self._check("update", table)
        self.updates.append((table, dict(values), dict(filters)))
        for row in self.tables[table]:
            if self._matches(row, filters):
                row.update(values)
                return dict(row)
        return None

    async def delete(self, table, *, filters):
        self._check("delete", table)
        before = len(self.tables[table])
        self.tables[table] = [r for r in self.tables[table] if not self._matches(r, filters)]
        return before - len(self.tables[table])

    async def rpc(self, function, **params):
        self._check("rpc", function)
        apps = self.tables["applications"]
        return {
            "total_users": len(self.tables["users"]),
            "total_jobs": len(self.tables["jobs"]),
            "active_jobs": len([j for j in self.tables["jobs"] if j.get("is_active")]),
            "total_applications": len(apps),
        }

    # Seeding helpers

    def add_user(self, email: str, **fields) -> Dict[str, Any]:
        now = self._now()
        row = {
            "id": str(uuid4()), "email": email, "name": "Test User", "is_admin": False,
            "google_id": None, "profile_picture_url": None, "created_at": now, "updated_at": now,
        }
        row.update(fields)
        self.tables["users"].append(row)
        return row

    def add_job(self, **fields) -> Dict[str, Any]:
        now = self._now()
        row = {
            "id": str(uuid4()), "title": "Backend Engineer",
            "description": "Build and run the job board API.",
            "requirements": "Python", "qualifications": "BSc", "skills": "python,sql",
            "experience": "2 years", "location": "Remote", "salary_range": "80-100k",
            "is_active": True, "posted_by": None, "created_at": now, "updated_at": now,
        }
        row.update(fields)
        self.tables["jobs"].append(row)
        return row

    def add_application(self, job_id: str, user_id: str, **fields) -> Dict[str, Any]:
        now = self._now()
        row = {
            "id": str(uuid4()), "job_id": job_id, "user_id": user_id, "name": "Ada",
            "email": "ada@example.com", "phone": "5551234", "status": "pending",
            "resume_path": f"resumes/{user_id}/seeded.pdf", "applied_at": now, "updated_at": now,
        }
        row.update(fields)
        self.tables["applications"].append(row)
        return row


class FakeGridOut:
    def __init__(self, content: bytes, metadata: Optional[dict]):
        self._content = content
        self.metadata = metadata

    async def read(self) -> bytes:
        return self._content


class FakeBucket:
    """In-memory stand-in for AsyncGridFSBucket."""

    def __init__(self):
        self.files: Dict[str, tuple] = {}

    async def upload_from_stream_with_id(self, file_id, filename, source, metadata=None):
        self.files[file_id] = (bytes(source), metadata)

    async def open_download_stream(self, file_id):
        if file_id not in self.files:
            raise NoFile(f"no file in gridfs collection with _id {file_id!r}")
        content, metadata = self.files[file_id]
        return FakeGridOut(content, metadata)

    async def delete(self, file_id):
        if self.files.pop(file_id, None) is None:
            raise NoFile(f"no file in gridfs collection with _id {file_id!r}")


class FakeGoogle:
    """Resolves known tokens to profiles; anything else is rejected."""

    def __init__(self):
        self.profiles: Dict[str, GoogleProfile] = {}
        self.calls: List[tuple] = []

    async def resolve(self, access_token=None, id_token=None) -> GoogleProfile:
        self.calls.append((access_token, id_token))
        token = access_token or id_token
        if token not in self.profiles:
            raise IdentityVerificationFailed("Google userinfo rejected the token (HTTP 401)")
        return self.profiles[token]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret_key="test-signing-secret",
        admin_email=ADMIN_EMAIL.upper(),
        admin_password=ADMIN_PASSWORD,
        google_client_id="client-123.apps.googleusercontent.com",
        public_base_url="http://testserver",
    )


@pytest.fixture
def codec(settings) -> TokenCodec:
    return TokenCodec.from_settings(settings)


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket()


@pytest.fixture
def google() -> FakeGoogle:
    return FakeGoogle()


@pytest.fixture
def storage(bucket, settings) -> ResumeStorage:
    return ResumeStorage(lambda: bucket, settings)


@pytest.fixture
def client(settings, store, google, storage):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_service_store] = lambda: store
    app.dependency_overrides[get_anon_store] = lambda: store
    app.dependency_overrides[get_google_identity_client] = lambda: google
    app.dependency_overrides[get_resume_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def applicant(store):
    return store.add_user("applicant@example.com", name="Applicant")


@pytest.fixture
def applicant_headers(applicant, codec):
    token = codec.issue(applicant["id"], applicant["email"], Role.user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_user(store):
    return store.add_user(ADMIN_EMAIL, name="Admin", is_admin=True)


@pytest.fixture
def admin_headers(admin_user, codec):
    token = codec.issue(admin_user["id"], admin_user["email"], Role.admin)
    return {"Authorization": f"Bearer {token}"}


SQLITE_SCHEMA = (
    """
    CREATE TABLE users (
        id TEXT PRIMARY KEY,
        email TEXT NOT NULL UNIQUE,
        name TEXT,
        google_id TEXT,
        profile_picture_url TEXT,
        is_admin BOOLEAN NOT NULL DEFAULT 0,
        created_at TEXT DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE jobs (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT 1,
        created_at INTEGER
    )
    """,
    """
    CREATE TABLE applications (
        id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
        job_id TEXT NOT NULL REFERENCES jobs (id),
        user_id TEXT NOT NULL,
        name TEXT, email TEXT, phone TEXT, skills TEXT, expected_salary TEXT,
        cover_letter TEXT, location TEXT, city TEXT, experience TEXT,
        education TEXT, position_applying TEXT,
        resume_path TEXT,
        status TEXT NOT NULL DEFAULT 'pending',
        applied_at TEXT DEFAULT CURRENT_TIMESTAMP,
        updated_at TEXT
    )
    """,
)


class RefusingSession:
    """Session wrapper that fails chosen statement kinds like an unreachable server."""

    def __init__(self, session, refused: set):
        self._session = session
        self._refused = refused

    async def execute(self, statement, params=None):
        verb = str(statement).split(None, 1)[0].upper()
        if verb in self._refused:
            raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")
        return await self._session.execute(statement, params)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()


@pytest.fixture
def refused() -> set:
    """Statement verbs (SELECT, INSERT, UPDATE, DELETE) the sqlite store refuses."""
    return set()


@pytest_asyncio.fixture
async def sqlite_store(tmp_path, monkeypatch, refused):
    """Real DataStore running its SQL against a throwaway SQLite database."""
    # NullPool: TestClient requests run on a different event loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        for statement in SQLITE_SCHEMA:
            await conn.execute(text(statement))
    factory = async_sessionmaker(engine, expire_on_commit=False)

    @asynccontextmanager
    async def session(role):
        async with factory() as db:
            wrapped = RefusingSession(db, refused)
            try:
                yield wrapped
                await wrapped.commit()
            except Exception:
                await wrapped.rollback()
                raise

    monkeypatch.setattr("jobboard.services.store.get_db_session", session)
    yield DataStore()
    await engine.dispose()
