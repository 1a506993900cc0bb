# =============================================================================
# tests/test_api.py - HTTP Surface Tests
# =============================================================================
# Drives the FastAPI app through TestClient with the Supabase-backed
# dependencies overridden by in-memory fakes. Tokens are real HS256 JWTs,
# so the auth dependencies run unmodified.
# =============================================================================

import base64
import json

import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.dependencies import (
    get_identities,
    get_mailer,
    get_privileged_store,
    get_storage,
    get_user_store,
)
from app.main import app
from tests.conftest import (
    ADMIN_ID,
    APPLICANT_ID,
    CONTRIBUTOR_ID,
    FakeStorage,
    PENDING_ASSET_ID,
    USER_ID,
    mint_token,
)


@pytest.fixture
def client(store, identities, mailer):
    app.dependency_overrides[get_privileged_store] = lambda: store
    app.dependency_overrides[get_user_store] = lambda: store
    app.dependency_overrides[get_identities] = lambda: identities
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_storage] = lambda: FakeStorage()
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(user_id)}"}


# =============================================================================
# Moderation
# =============================================================================

class TestModerationEndpoints:

    def test_approve(self, client, store, mailer):
        response = client.post(
            "/api/v1/admin/asset/approve",
            json={"asset_id": PENDING_ASSET_ID},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Asset approved successfully",
            "asset_id": PENDING_ASSET_ID,
        }
        assert store.get("assets", PENDING_ASSET_ID)["status"] == "approved"
        # Background side effects ran after the response
        assert len(store.rows("notifications")) == 1
        assert len(mailer.sent) == 1

    def test_reject_with_reason(self, client, store):
        response = client.post(
            "/api/v1/admin/asset/reject",
            json={"asset_id": PENDING_ASSET_ID, "reason": " Too dark "},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 200
        assert store.get("assets", PENDING_ASSET_ID)["rejected_reason"] == "Too dark"

    def test_no_token_is_401(self, client):
        response = client.post("/api/v1/admin/asset/approve", json={"asset_id": PENDING_ASSET_ID})

        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized: Please log in"
        assert response.json()["status"] == 401

    def test_invalid_token_is_401(self, client):
        response = client.post(
            "/api/v1/admin/asset/approve",
            json={"asset_id": PENDING_ASSET_ID},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_contributor_is_403(self, client, store):
        response = client.post(
            "/api/v1/admin/asset/approve",
            json={"asset_id": PENDING_ASSET_ID},
            headers=auth(CONTRIBUTOR_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Forbidden: Admin access required"
        assert store.get("assets", PENDING_ASSET_ID)["status"] == "pending"

    def test_missing_asset_id_is_400(self, client):
        response = client.post("/api/v1/admin/asset/approve", json={}, headers=auth(ADMIN_ID))

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_missing_body_without_token_is_401_not_400(self, client):
        response = client.post("/api/v1/admin/asset/approve")

        assert response.status_code == 401

    def test_unknown_asset_is_404(self, client):
        response = client.post(
            "/api/v1/admin/asset/approve",
            json={"asset_id": "nope"},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Asset not found"

    def test_already_decided_is_400(self, client):
        client.post("/api/v1/admin/asset/approve", json={"asset_id": PENDING_ASSET_ID}, headers=auth(ADMIN_ID))

        response = client.post(
            "/api/v1/admin/asset/reject",
            json={"asset_id": PENDING_ASSET_ID, "reason": "bad"},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 400
        assert "approved" in response.json()["error"]

    def test_store_failure_is_500(self, client, store):
        store.fail("update", "assets")

        response = client.post(
            "/api/v1/admin/asset/approve",
            json={"asset_id": PENDING_ASSET_ID},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 500
        assert response.json()["error"] == "Failed to approve asset"

    def test_pending_list(self, client):
        response = client.get("/api/v1/admin/assets/pending", headers=auth(ADMIN_ID))

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["assets"][0]["id"] == PENDING_ASSET_ID

    def test_edit_and_delete(self, client, store):
        edited = client.put(
            f"/api/v1/admin/assets/{PENDING_ASSET_ID}",
            json={"title": "Renamed"},
            headers=auth(ADMIN_ID),
        )
        deleted = client.delete(f"/api/v1/admin/assets/{PENDING_ASSET_ID}", headers=auth(ADMIN_ID))

        assert edited.status_code == 200
        assert edited.json()["title"] == "Renamed"
        assert deleted.status_code == 200
        assert store.get("assets", PENDING_ASSET_ID) is None


# =============================================================================
# Cookie sessions
# =============================================================================

def test_cookie_session_is_accepted(client):
    payload = json.dumps({"access_token": mint_token(ADMIN_ID)}).encode()
    encoded = base64.urlsafe_b64encode(payload).decode().rstrip("=")
    client.cookies.set(settings.auth_cookie_name, f"base64-{encoded}")

    response = client.get("/api/v1/admin/assets/pending")

    assert response.status_code == 200


# =============================================================================
# Contributors
# =============================================================================

class TestContributorEndpoints:

    def test_apply(self, client, store):
        response = client.post(
            "/api/v1/contributor/apply",
            json={"application_message": "Drone shots"},
            headers=auth(USER_ID),
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert store.get("profiles", USER_ID)["application_date"]

    def test_apply_while_pending_is_flagged(self, client):
        response = client.post("/api/v1/contributor/apply", json={}, headers=auth(APPLICANT_ID))

        assert response.status_code == 400
        assert response.json()["has_pending_application"] is True

    def test_new_user_applies_twice(self, client, store):
        new_user = "66666666-6666-4666-8666-666666666666"

        first = client.post("/api/v1/contributor/apply", json={}, headers=auth(new_user))
        second = client.post("/api/v1/contributor/apply", json={}, headers=auth(new_user))

        assert first.status_code == 200
        assert store.get("profiles", new_user)["role"] == "user"
        assert second.status_code == 400
        assert "already submitted" in second.json()["error"]
        assert second.json()["has_pending_application"] is True

    def test_admin_approves_application(self, client, store):
        response = client.post(
            "/api/v1/admin/contributor/approve",
            json={"id": APPLICANT_ID},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 200
        assert store.get("profiles", APPLICANT_ID)["role"] == "contributor"

    def test_update_level(self, client, store):
        response = client.post(
            "/api/v1/admin/contributor/update-level",
            json={"id": CONTRIBUTOR_ID, "level": "gold"},
            headers=auth(ADMIN_ID),
        )

        assert response.status_code == 200
        assert store.get("profiles", CONTRIBUTOR_ID)["contributor_tier"] == "gold"

    def test_pending_applications(self, client):
        response = client.get("/api/v1/admin/contributors/pending", headers=auth(ADMIN_ID))

        assert response.status_code == 200
        assert [a["id"] for a in response.json()["applications"]] == [APPLICANT_ID]


# =============================================================================
# Assets, plans, admin
# =============================================================================

class TestOtherEndpoints:

    def test_create_asset(self, client, store):
        response = client.post(
            "/api/v1/assets",
            json={
                "title": "Lake",
                "type": "video",
                "storage_path": f"contributors/{CONTRIBUTOR_ID}/lake.mp4",
                "license": "standard",
            },
            headers=auth(CONTRIBUTOR_ID),
        )

        assert response.status_code == 201
        asset_id = response.json()["asset_id"]
        assert store.get("assets", asset_id)["status"] == "pending"

    def test_list_plans_returns_numbers(self, client, store):
        store.rows("subscription_plans").append({
            "id": "pro", "name": "Pro",
            "original_price_monthly": "15.00", "original_price_yearly": "150.00",
            "first_month_discount_percent": "33",
            "is_popular": None, "features": None,
        })

        response = client.get("/api/v1/plans")

        assert response.status_code == 200
        plan = response.json()["plans"][0]
        assert plan["original_price_monthly"] == 15.0
        assert plan["first_month_discount_percent"] == 33.0
        assert plan["is_popular"] is False

    def test_update_settings(self, client, store):
        response = client.put("/api/v1/admin/settings", json={"site_name": "Stock Hub"}, headers=auth(ADMIN_ID))

        assert response.status_code == 200
        assert store.get("admin_settings", "main")["site_name"] == "Stock Hub"

    def test_dashboard_for_admin(self, client):
        response = client.get("/api/v1/admin/dashboard", headers=auth(ADMIN_ID))

        assert response.status_code == 200
        assert response.json()["stats"]["pending_assets"] == 1

    def test_dashboard_redirects_anonymous_to_signin(self, client):
        response = client.get("/api/v1/admin/dashboard", follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"].startswith(settings.SIGNIN_PATH)

    def test_dashboard_redirects_non_admin_home(self, client):
        response = client.get("/api/v1/admin/dashboard", headers=auth(USER_ID), follow_redirects=False)

        assert response.status_code == 303
        assert response.headers["location"] == settings.HOME_PATH

    def test_me(self, client):
        response = client.get("/api/v1/auth/me", headers=auth(APPLICANT_ID))

        assert response.status_code == 200
        body = response.json()
        assert body["username"] == "carol"
        assert body["role"] == "user"
        assert body["has_pending_application"] is True

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_readiness(self, client):
        response = client.get("/api/v1/health/ready")

        assert response.json()["status"] == "ready"

    def test_me_shows_contributor_badge(self, client, store):
        store.get("profiles", CONTRIBUTOR_ID)["contributor_level"] = "level_4_elite"

        response = client.get("/api/v1/auth/me", headers=auth(CONTRIBUTOR_ID))

        assert response.json()["badge"] == "Elite"
        assert response.json()["contributor_tier"] == "bronze"
