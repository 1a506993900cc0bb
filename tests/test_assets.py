# =============================================================================
# tests/test_assets.py - Asset Record Tests
# =============================================================================

import pytest

from app.exceptions import (
    AssetNotFoundError,
    ForbiddenError,
    InputValidationError,
    UnauthenticatedError,
)
from core.services.asset_service import AssetService
from tests.conftest import CONTRIBUTOR_ID, FakeStorage, PENDING_ASSET_ID


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def assets(store, guard, storage):
    return AssetService(store, guard, storage)


def valid_payload(**overrides):
    payload = {
        "title": "  Mountain lake  ",
        "type": "image",
        "storage_path": f"contributors/{CONTRIBUTOR_ID}/lake.jpg",
        "license": "standard",
        "tags": ["lake", "mountain"],
    }
    payload.update(overrides)
    return payload


class TestCreate:
    """Contributors registering uploads."""

    def test_contributor_creates_pending_asset(self, assets, store, contributor_session):
        asset_id = assets.create(contributor_session, valid_payload(price=99, status="approved"))

        row = store.get("assets", asset_id)
        assert row["title"] == "Mountain lake"
        assert row["status"] == "pending"
        assert row["price"] == 0
        assert row["contributor_id"] == CONTRIBUTOR_ID
        assert row["type"] == "image"
        assert row["tags"] == ["lake", "mountain"]

    def test_3d_type_is_accepted(self, assets, store, contributor_session):
        asset_id = assets.create(contributor_session, valid_payload(type="3d"))

        assert store.get("assets", asset_id)["type"] == "3d"

    @pytest.mark.parametrize("missing", ["title", "type", "storage_path", "license"])
    def test_required_fields(self, assets, contributor_session, missing):
        payload = valid_payload()
        del payload[missing]

        with pytest.raises(InputValidationError) as exc_info:
            assets.create(contributor_session, payload)

        fields = [e["field"] for e in exc_info.value.details["errors"]]
        assert missing in fields

    def test_unknown_type_is_rejected(self, assets, contributor_session):
        with pytest.raises(InputValidationError):
            assets.create(contributor_session, valid_payload(type="audio"))

    def test_blank_title_is_rejected(self, assets, contributor_session):
        with pytest.raises(InputValidationError):
            assets.create(contributor_session, valid_payload(title="   "))

    def test_storage_path_must_be_own_folder(self, assets, contributor_session):
        with pytest.raises(InputValidationError) as exc_info:
            assets.create(contributor_session, valid_payload(storage_path="contributors/someone-else/x.jpg"))

        assert exc_info.value.message == "Invalid storage path"

    def test_admin_may_use_admin_folder(self, assets, store, admin_session):
        asset_id = assets.create(admin_session, valid_payload(storage_path="assets/admin/x.jpg"))

        assert store.get("assets", asset_id)["storage_path"] == "assets/admin/x.jpg"

    def test_contributor_may_not_use_admin_folder(self, assets, contributor_session):
        with pytest.raises(InputValidationError):
            assets.create(contributor_session, valid_payload(storage_path="assets/admin/x.jpg"))

    def test_plain_user_is_forbidden(self, assets, user_session):
        with pytest.raises(ForbiddenError) as exc_info:
            assets.create(user_session, valid_payload())

        assert exc_info.value.message == "Forbidden: Contributor access required"

    def test_no_session_is_unauthenticated(self, assets):
        with pytest.raises(UnauthenticatedError):
            assets.create(None, valid_payload())


class TestAdminEdits:

    def test_update_whitelisted_fields(self, assets, store, admin_session):
        asset = assets.update(admin_session, PENDING_ASSET_ID, {"title": "Dunes at dusk", "is_featured": True})

        assert asset.title == "Dunes at dusk"
        assert store.get("assets", PENDING_ASSET_ID)["is_featured"] is True

    def test_status_cannot_be_edited(self, assets, store, admin_session):
        with pytest.raises(InputValidationError):
            assets.update(admin_session, PENDING_ASSET_ID, {"status": "approved"})

        assert store.get("assets", PENDING_ASSET_ID)["status"] == "pending"

    def test_empty_update_is_rejected(self, assets, admin_session):
        with pytest.raises(InputValidationError):
            assets.update(admin_session, PENDING_ASSET_ID, {})

    def test_update_unknown_asset(self, assets, admin_session):
        with pytest.raises(AssetNotFoundError):
            assets.update(admin_session, "nope", {"title": "x"})

    def test_update_requires_admin(self, assets, contributor_session):
        with pytest.raises(ForbiddenError):
            assets.update(contributor_session, PENDING_ASSET_ID, {"title": "x"})

    def test_delete_removes_file_and_row(self, assets, store, storage, admin_session):
        assets.delete(admin_session, PENDING_ASSET_ID)

        assert store.get("assets", PENDING_ASSET_ID) is None
        assert storage.removed == [f"contributors/{CONTRIBUTOR_ID}/sunset.jpg"]

    def test_delete_survives_storage_failure(self, store, guard, admin_session):
        service = AssetService(store, guard, FakeStorage(fail=True))

        service.delete(admin_session, PENDING_ASSET_ID)

        assert store.get("assets", PENDING_ASSET_ID) is None

    def test_delete_unknown_asset(self, assets, admin_session):
        with pytest.raises(AssetNotFoundError):
            assets.delete(admin_session, "nope")

    def test_list_pending(self, assets, admin_session):
        pending = assets.list_pending(admin_session)

        assert [a.id for a in pending] == [PENDING_ASSET_ID]
        assert pending[0].is_pending
