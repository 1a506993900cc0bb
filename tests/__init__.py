# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the asset marketplace API:
# - conftest.py: In-memory fakes for Supabase, the mailer and storage
# - test_authorization.py / test_auth.py: Admin guard, tokens, auth cookies
# - test_moderation.py: Asset approve/reject workflow
# - test_contributor.py, test_assets.py, test_plans.py, test_admin_service.py
# - test_api.py: Endpoint tests through TestClient
#
# Run tests with: pytest
# =============================================================================
