# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Row store, identity lookups and storage over Supabase
# - mailer.py: Email templates and delivery (SMTP, or via the Celery worker)
# - utils.py: Shared utilities (UUID normalization, timestamps, month math)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import (
    NOT_NULL,
    IdentityDirectory,
    RowStore,
    RowStoreError,
    StorageBucket,
    SupabaseClient,
    SupabaseClientError,
)
from lib.utils import add_months, normalize_uuid, parse_timestamp, utc_now

__all__ = [
    # Supabase
    "NOT_NULL",
    "IdentityDirectory",
    "RowStore",
    "RowStoreError",
    "StorageBucket",
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "add_months",
    "normalize_uuid",
    "parse_timestamp",
    "utc_now",
]
