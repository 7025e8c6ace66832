"""Supabase client wrapper with async context manager support."""

import os
from typing import Optional
from supabase import create_client, Client
from supabase.client import ClientOptions
from src.utils.errors import DuplicateListingError, SupabaseError
import logging

logger = logging.getLogger(__name__)

PROPERTIES_TABLE = "properties"
LISTING_DETAILS_TABLE = "listing_details"
FEATURES_TABLE = "property_features"
PHOTOS_TABLE = "property_photos"

INSERT_AGGREGATE_FUNCTION = "insert_property_aggregate"

# Default PostgREST max rows per response
PAGE_SIZE = 1000

# Global client instance (singleton pattern)
_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Get or create Supabase client singleton."""
    global _client

    if _client is None:
        url = os.environ.get("SUPABASE_URL")
        key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")

        options = ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        )

        _client = create_client(url, key, options)
        logger.info("Supabase client initialized", extra={"supabase_url": url})

    return _client


async def close_supabase_client() -> None:
    """Drop the cached Supabase client."""
    global _client
    if _client:
        # Supabase-py has no explicit close
        _client = None
        logger.info("Supabase client closed")


class SupabaseClient:
    """Async context manager for Supabase client."""

    def __init__(self):
        self.client: Optional[Client] = None

    async def __aenter__(self) -> Client:
        self.client = get_supabase_client()
        return self.client

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            logger.error(
                "Supabase operation error",
                extra={"error": str(exc_val), "error_type": exc_type.__name__}
            )
        return False


def is_duplicate_key_error(error: Exception) -> bool:
    """True when the store rejected a write on a unique constraint."""
    text = str(error).lower()
    return "duplicate key" in text or "23505" in text


# Properties (listing aggregate) operations
async def listing_exists(zpid: str) -> bool:
    """Check if a listing with this zpid is already stored."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROPERTIES_TABLE).select("id").eq("zpid", zpid).limit(1).execute()
            return len(result.data) > 0
        except Exception as e:
            raise SupabaseError(f"Failed to check listing {zpid}: {e}")


async def insert_listing_aggregate(aggregate: dict) -> str:
    """
    Write a property row with its detail, features and photos in one transaction.

    The ``insert_property_aggregate`` Postgres function performs all four
    writes, so either every row is stored or none is. Returns the property id.
    """
    async with SupabaseClient() as client:
        try:
            result = client.rpc(INSERT_AGGREGATE_FUNCTION, {"aggregate": aggregate}).execute()
        except Exception as e:
            if is_duplicate_key_error(e):
                raise DuplicateListingError(f"Listing {aggregate['property'].get('zpid')} already exists: {e}")
            raise SupabaseError(f"Failed to insert listing aggregate: {e}")

        if result.data:
            return result.data
        raise SupabaseError("Failed to insert listing aggregate: no ID returned")


async def count_rows(table: str) -> int:
    """Exact row count for a table."""
    async with SupabaseClient() as client:
        try:
            result = client.table(table).select("id", count="exact").execute()
            return result.count or 0
        except Exception as e:
            raise SupabaseError(f"Failed to count {table}: {e}")


def fetch_pages(build_query, limit: Optional[int] = None) -> list[dict]:
    """
    Run an ordered query page by page with ``range`` until a short page.

    ``build_query`` returns a fresh, ordered query builder for each page.
    With ``limit`` set, stops once that many rows were read.
    """
    page_size = PAGE_SIZE
    rows: list[dict] = []
    while limit is None or len(rows) < limit:
        size = page_size if limit is None else min(page_size, limit - len(rows))
        start = len(rows)
        result = build_query().range(start, start + size - 1).execute()
        page = result.data or []
        rows.extend(page)
        if len(page) < size:
            break
    return rows


async def get_property_rows(limit: Optional[int] = None) -> list[dict]:
    """Property rows ordered by creation time, optionally limited."""
    async with SupabaseClient() as client:
        try:
            return fetch_pages(
                lambda: client.table(PROPERTIES_TABLE).select("*").order("created_at").order("id"),
                limit=limit,
            )
        except Exception as e:
            raise SupabaseError(f"Failed to get properties: {e}")


async def get_property_row(zpid: str) -> Optional[dict]:
    """Get a property row by zpid."""
    async with SupabaseClient() as client:
        try:
            result = client.table(PROPERTIES_TABLE).select("*").eq("zpid", zpid).execute()
            return result.data[0] if result.data and len(result.data) > 0 else None
        except Exception as e:
            raise SupabaseError(f"Failed to get property {zpid}: {e}")


async def get_child_rows(table: str, property_id: str) -> list[dict]:
    """Rows of a child table for one property. Photos come back in sort order, ties by insertion."""
    async with SupabaseClient() as client:
        try:
            query = client.table(table).select("*").eq("property_id", property_id)
            if table == PHOTOS_TABLE:
                query = query.order("sort_order").order("id")
            result = query.execute()
            return result.data if result.data else []
        except Exception as e:
            raise SupabaseError(f"Failed to get {table} for property {property_id}: {e}")


async def get_property_ids(table: str) -> set[str]:
    """Distinct property ids referenced by a table (``id`` for the root table)."""
    column = "id" if table == PROPERTIES_TABLE else "property_id"
    async with SupabaseClient() as client:
        try:
            rows = fetch_pages(lambda: client.table(table).select(column).order(column))
            return {row[column] for row in rows}
        except Exception as e:
            raise SupabaseError(f"Failed to get property ids from {table}: {e}")
