# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory stand-ins for the Supabase handles (row store, auth users,
#   storage) and the email dispatcher
# - Seeded admin / contributor / user profiles and a pending asset
# =============================================================================

import copy
import os
import time
import uuid
from typing import Any, Callable, Mapping

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("EMAIL_ENABLED", "false")
os.environ.setdefault("EMAIL_VIA_WORKER", "false")

import pytest
from jose import jwt

from app.auth.models import AuthSession, AuthUser
from app.config import settings
from core.services.authorization import AuthorizationGuard
from core.services.moderation_service import AssetModerationService
from core.services.notification_service import NotificationService
from lib.supabase_client import NOT_NULL, RowStoreError, SupabaseClientError


ADMIN_ID = "11111111-1111-4111-8111-111111111111"
CONTRIBUTOR_ID = "22222222-2222-4222-8222-222222222222"
USER_ID = "33333333-3333-4333-8333-333333333333"
APPLICANT_ID = "44444444-4444-4444-8444-444444444444"
PENDING_ASSET_ID = "aaaaaaaa-0000-4000-8000-000000000001"


# =============================================================================
# Fakes
# =============================================================================

class FakeRowStore:
    """
    In-memory RowStore.

    Same filter semantics as the real one: None matches NULL, NOT_NULL
    matches any non-null value, anything else is equality.

    Failure injection:
        store.fail("update", "assets")   # next update on assets raises
        store.before_update = callback   # runs before an update is applied
    """

    def __init__(self, tables: Mapping[str, list[dict[str, Any]]] | None = None):
        self.tables: dict[str, list[dict[str, Any]]] = {
            name: [dict(row) for row in rows] for name, rows in (tables or {}).items()
        }
        self.failures: set[tuple[str, str]] = set()
        self.before_update: Callable[[str, Mapping[str, Any]], None] | None = None
        self.calls: list[tuple[str, str]] = []

    # -- helpers --------------------------------------------------------------

    def fail(self, operation: str, table: str) -> None:
        self.failures.add((operation, table))

    def _check(self, operation: str, table: str) -> None:
        self.calls.append((operation, table))
        if (operation, table) in self.failures:
            raise RowStoreError(f"Simulated {operation} failure on {table}", code="SIMULATED")

    @staticmethod
    def _matches(row: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
        for column, value in (filters or {}).items():
            current = row.get(column)
            if value is None:
                if current is not None:
                    return False
            elif value is NOT_NULL:
                if current is None:
                    return False
            elif str(current) != str(value):
                return False
        return True

    def rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables.setdefault(table, [])

    def get(self, table: str, row_id: str) -> dict[str, Any] | None:
        for row in self.rows(table):
            if row.get("id") == row_id:
                return row
        return None

    # -- RowStore interface ---------------------------------------------------

    def select(self, table, columns="*", filters=None, order_by=None, desc=False, limit=None):
        self._check("select", table)
        found = [copy.deepcopy(r) for r in self.rows(table) if self._matches(r, filters)]
        if order_by:
            found.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) if r.get(order_by) is not None else 0), reverse=desc)
        if columns != "*":
            wanted = [c.strip() for c in columns.split(",")]
            found = [{c: r.get(c) for c in wanted} for r in found]
        if limit is not None:
            found = found[:limit]
        return found

    def select_one(self, table, columns="*", filters=None):
        rows = self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    def count(self, table, filters=None):
        self._check("count", table)
        return sum(1 for r in self.rows(table) if self._matches(r, filters))

    def insert(self, table, values):
        self._check("insert", table)
        row = {"id": str(uuid.uuid4()), **copy.deepcopy(values)}
        self.rows(table).append(row)
        return copy.deepcopy(row)

    def update(self, table, values, filters):
        self._check("update", table)
        if self.before_update:
            hook, self.before_update = self.before_update, None
            hook(table, filters)
        changed = []
        for row in self.rows(table):
            if self._matches(row, filters):
                row.update(copy.deepcopy(values))
                changed.append(copy.deepcopy(row))
        return changed

    def upsert(self, table, values, on_conflict="id"):
        self._check("upsert", table)
        for row in self.rows(table):
            if row.get(on_conflict) == values.get(on_conflict):
                row.update(copy.deepcopy(values))
                return copy.deepcopy(row)
        row = copy.deepcopy(values)
        self.rows(table).append(row)
        return copy.deepcopy(row)

    def delete(self, table, filters):
        self._check("delete", table)
        kept, removed = [], []
        for row in self.rows(table):
            (removed if self._matches(row, filters) else kept).append(row)
        self.tables[table] = kept
        return removed


class FakeIdentityDirectory:
    """Auth user lookups backed by dicts."""

    def __init__(self, emails=None, created_at=None, fail=False):
        self.emails = dict(emails or {})
        self.created = dict(created_at or {})
        self.fail = fail

    def get_email(self, user_id):
        if self.fail:
            raise SupabaseClientError("auth admin API unavailable", code="FETCH_USER_FAILED")
        return self.emails.get(str(user_id))

    def get_created_at(self, user_id):
        if self.fail:
            raise SupabaseClientError("auth admin API unavailable", code="FETCH_USER_FAILED")
        return self.created.get(str(user_id))


class FakeMailer:
    """Records sends; returns `result` or raises `error`."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.sent: list[dict[str, Any]] = []

    def send(self, to, subject, template, data):
        self.sent.append({"to": to, "subject": subject, "template": template, "data": dict(data)})
        if self.error:
            raise self.error
        return self.result


class FakeStorage:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.removed: list[str] = []

    def remove(self, path):
        if self.fail:
            raise SupabaseClientError("storage unavailable", code="STORAGE_REMOVE_FAILED")
        self.removed.append(path)

    def list_buckets(self):
        return [{"name": settings.STORAGE_BUCKET}]


# =============================================================================
# Helpers
# =============================================================================

def make_session(user_id: str, email: str | None = None) -> AuthSession:
    """An already-validated session for `user_id`."""
    return AuthSession(
        user=AuthUser(id=uuid.UUID(user_id), email=email or f"{user_id[:4]}@example.com"),
        access_token="test-access-token",
    )


def mint_token(user_id: str, email: str = "someone@example.com", expires_in: int = 3600, **claims) -> str:
    """Sign an HS256 access token the way Supabase Auth does."""
    now = int(time.time())
    payload = {
        "sub": user_id,
        "email": email,
        "aud": "authenticated",
        "role": "authenticated",
        "iat": now,
        "exp": now + expires_in,
        **claims,
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


def seed_tables() -> dict[str, list[dict[str, Any]]]:
    return {
        "profiles": [
            {"id": ADMIN_ID, "username": "admin", "role": "admin"},
            {"id": CONTRIBUTOR_ID, "username": "jane", "role": "contributor", "contributor_tier": "bronze"},
            {"id": USER_ID, "username": "bob", "role": "user", "application_date": None},
            {
                "id": APPLICANT_ID,
                "username": "carol",
                "role": "user",
                "application_date": "2024-01-15T10:30:00+00:00",
                "application_message": "I shoot aerial footage",
                "portfolio_url": "https://carol.example.com",
            },
        ],
        "assets": [
            {
                "id": PENDING_ASSET_ID,
                "contributor_id": CONTRIBUTOR_ID,
                "title": "Sunset over dunes",
                "type": "image",
                "status": "pending",
                "rejected_reason": None,
                "storage_path": f"contributors/{CONTRIBUTOR_ID}/sunset.jpg",
                "license": "standard",
                "price": 0,
                "created_at": "2024-02-01T09:00:00+00:00",
            },
        ],
        "notifications": [],
    }


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def store():
    return FakeRowStore(seed_tables())


@pytest.fixture
def identities():
    return FakeIdentityDirectory(emails={CONTRIBUTOR_ID: "jane@example.com"})


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def guard(store):
    return AuthorizationGuard(store)


@pytest.fixture
def notifications(store):
    return NotificationService(store)


@pytest.fixture
def moderation(store, guard, notifications, mailer, identities):
    return AssetModerationService(
        store=store,
        guard=guard,
        notifications=notifications,
        mailer=mailer,
        identities=identities,
    )


@pytest.fixture
def admin_session():
    return make_session(ADMIN_ID, "admin@example.com")


@pytest.fixture
def contributor_session():
    return make_session(CONTRIBUTOR_ID, "jane@example.com")


@pytest.fixture
def user_session():
    return make_session(USER_ID, "bob@example.com")
