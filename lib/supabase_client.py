# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
#
# Two kinds of client exist:
# - privileged: service_role key, bypasses Row Level Security (RLS). One
#   shared instance, created lazily.
# - user-scoped: anon key plus the caller's access token, so RLS policies
#   apply exactly as they would in the browser. Created per request.
#
# Services never talk to the Supabase client directly. They receive a
# RowStore (filter/insert/update/delete over rows) and, where needed, an
# IdentityDirectory (auth user lookups), so tests can hand them fakes.
#
# Usage:
#   from lib.supabase_client import SupabaseClient, RowStore
#   store = RowStore(SupabaseClient.get_client())
#   asset = store.select_one("assets", filters={"id": asset_id})
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import normalize_uuid, parse_timestamp

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages:
    "Errors should tell HOW to fix, not just WHAT failed."
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class RowStoreError(SupabaseClientError):
    """A select/insert/update/delete against a table failed."""


class _NotNull:
    """Filter value meaning `column IS NOT NULL`."""

    def __repr__(self) -> str:
        return "NOT_NULL"


# Use as a filter value: filters={"application_date": NOT_NULL}
# A plain None filter value means `column IS NULL`.
NOT_NULL = _NotNull()


class SupabaseClient:
    """
    Factory for Supabase clients.

    The privileged client is a singleton shared across the application.
    User-scoped clients are cheap and built per request.
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton privileged Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def get_user_client(cls, access_token: str) -> Client:
        """
        Create a client that acts as the signed-in user.

        Queries go out with the user's JWT, so RLS policies apply.

        Raises:
            SupabaseClientError: If client creation fails
        """
        try:
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
            client.postgrest.auth(access_token)
            return client
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create user-scoped Supabase client: {e}",
                code="USER_CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
            )


class RowStore:
    """
    Row-level access to Supabase tables.

    Filters are equality matches; a None value matches NULL and NOT_NULL
    matches any non-null value. Every method raises RowStoreError on
    failure, never a raw client exception.

    Example:
        store = RowStore(SupabaseClient.get_client())
        rows = store.select(
            "assets",
            filters={"status": "pending"},
            order_by="created_at",
            desc=True,
            limit=20,
        )
    """

    def __init__(self, client: Client):
        self._client = client

    @staticmethod
    def _apply_filters(query: Any, filters: Mapping[str, Any] | None) -> Any:
        for column, value in (filters or {}).items():
            if value is None:
                query = query.is_(column, "null")
            elif value is NOT_NULL:
                query = query.not_.is_(column, "null")
            else:
                if isinstance(value, UUID):
                    value = normalize_uuid(value)
                query = query.eq(column, value)
        return query

    def select(
        self,
        table: str,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Fetch rows matching the filters.

        Returns:
            List of row dicts (empty when nothing matches)

        Raises:
            RowStoreError: If the query fails
        """
        try:
            query = self._client.table(table).select(columns)
            query = self._apply_filters(query, filters)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
            rows = response.data or []
            logger.debug(f"Selected {len(rows)} rows from {table}")
            return rows

        except Exception as e:
            raise RowStoreError(
                message=f"Failed to select from {table}: {e}",
                code="SELECT_FAILED",
                details={"table": table, "filters": _printable(filters)},
            )

    def select_one(
        self,
        table: str,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Fetch a single row, or None if nothing matches.

        Raises:
            RowStoreError: If the query fails
        """
        rows = self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    def count(self, table: str, filters: Mapping[str, Any] | None = None) -> int:
        """
        Count rows matching the filters without transferring them.

        Raises:
            RowStoreError: If the query fails
        """
        try:
            query = self._client.table(table).select("id", count="exact").limit(1)
            query = self._apply_filters(query, filters)
            response = query.execute()
            return response.count or 0

        except Exception as e:
            raise RowStoreError(
                message=f"Failed to count rows in {table}: {e}",
                code="COUNT_FAILED",
                details={"table": table, "filters": _printable(filters)},
            )

    def insert(self, table: str, values: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one row.

        Returns:
            The inserted row with generated columns (id, created_at)

        Raises:
            RowStoreError: If the insert fails or returns nothing
        """
        try:
            response = self._client.table(table).insert(values).execute()
        except Exception as e:
            raise RowStoreError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                details={"table": table},
            )

        if not response.data:
            raise RowStoreError(
                message=f"Insert into {table} returned no data",
                code="INSERT_NO_DATA",
                suggestion="Check that RLS policies allow returning the inserted row",
                details={"table": table},
            )
        return response.data[0]

    def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: Mapping[str, Any],
    ) -> list[dict[str, Any]]:
        """
        Update every row matching the filters.

        The returned list is the set of rows actually changed, so
        `len(result)` is the affected-row count. Filtering on the current
        value of a column turns this into a conditional update.

        Raises:
            RowStoreError: If the update fails
        """
        if not filters:
            raise RowStoreError(
                message=f"Refusing to update {table} without filters",
                code="UNFILTERED_UPDATE",
            )
        try:
            query = self._client.table(table).update(values)
            query = self._apply_filters(query, filters)
            response = query.execute()
            rows = response.data or []
            logger.debug(f"Updated {len(rows)} rows in {table}")
            return rows

        except Exception as e:
            raise RowStoreError(
                message=f"Failed to update {table}: {e}",
                code="UPDATE_FAILED",
                details={"table": table, "filters": _printable(filters)},
            )

    def upsert(
        self,
        table: str,
        values: dict[str, Any],
        on_conflict: str = "id",
    ) -> dict[str, Any]:
        """
        Insert or update one row keyed on `on_conflict`.

        Raises:
            RowStoreError: If the upsert fails
        """
        try:
            response = (
                self._client.table(table)
                .upsert(values, on_conflict=on_conflict)
                .execute()
            )
        except Exception as e:
            raise RowStoreError(
                message=f"Failed to upsert into {table}: {e}",
                code="UPSERT_FAILED",
                details={"table": table},
            )
        return response.data[0] if response.data else values

    def delete(self, table: str, filters: Mapping[str, Any]) -> list[dict[str, Any]]:
        """
        Delete every row matching the filters.

        Returns:
            The deleted rows

        Raises:
            RowStoreError: If the delete fails
        """
        if not filters:
            raise RowStoreError(
                message=f"Refusing to delete from {table} without filters",
                code="UNFILTERED_DELETE",
            )
        try:
            query = self._client.table(table).delete()
            query = self._apply_filters(query, filters)
            response = query.execute()
            return response.data or []

        except Exception as e:
            raise RowStoreError(
                message=f"Failed to delete from {table}: {e}",
                code="DELETE_FAILED",
                details={"table": table, "filters": _printable(filters)},
            )


class IdentityDirectory:
    """
    Lookups against Supabase Auth users (auth.users).

    Needs the privileged client: the admin API is not available to anon keys.
    """

    def __init__(self, client: Client):
        self._client = client

    def _fetch_user(self, user_id: str | UUID) -> Any:
        user_id_str = normalize_uuid(user_id)
        try:
            response = self._client.auth.admin.get_user_by_id(user_id_str)
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch auth user: {e}",
                code="FETCH_USER_FAILED",
                details={"user_id": user_id_str},
            )
        return getattr(response, "user", None)

    def get_email(self, user_id: str | UUID) -> str | None:
        """
        Fetch the email address of an auth user.

        Returns:
            The email, or None if the user (or their email) is missing

        Raises:
            SupabaseClientError: If the lookup fails
        """
        user = self._fetch_user(user_id)
        return getattr(user, "email", None) if user else None

    def get_created_at(self, user_id: str | UUID) -> datetime | None:
        """
        Fetch when an auth user signed up.

        Raises:
            SupabaseClientError: If the lookup fails
            ValueError: If the stored value is not a timestamp
        """
        user = self._fetch_user(user_id)
        return parse_timestamp(getattr(user, "created_at", None)) if user else None


class StorageBucket:
    """File operations on one Supabase Storage bucket."""

    def __init__(self, client: Client, bucket: str | None = None):
        self._client = client
        self.bucket = bucket or settings.STORAGE_BUCKET

    def remove(self, path: str) -> None:
        """
        Remove a file from the bucket.

        Raises:
            SupabaseClientError: If removal fails
        """
        try:
            self._client.storage.from_(self.bucket).remove([path])
            logger.info(f"Removed {path} from storage bucket {self.bucket}")
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to remove file from storage: {e}",
                code="STORAGE_REMOVE_FAILED",
                details={"bucket": self.bucket, "path": path},
            )

    def list_buckets(self) -> list[Any]:
        """List buckets; used by the readiness check."""
        return self._client.storage.list_buckets()


def _printable(filters: Mapping[str, Any] | None) -> dict[str, str]:
    return {k: repr(v) if v is NOT_NULL or v is None else str(v) for k, v in (filters or {}).items()}
