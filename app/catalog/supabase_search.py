"""Comparable item search backed by the marketplace listings table in Supabase."""

import asyncio
import logging
from typing import Callable, List

from supabase import Client

from app.catalog.search import ComparableItem, ComparableItemSearch, ComparableQuery
from app.core.exceptions import CatalogUnavailableError, ComparableSearchError
from app.db.supabase_client import get_supabase

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, price, location"


def _escape_ilike(keyword: str) -> str:
    """Keywords are already [a-z0-9]; strip anything PostgREST would treat as syntax."""
    return "".join(ch for ch in keyword if ch.isalnum())


class SupabaseComparableSearch(ComparableItemSearch):
    """Queries ``listings`` with status/category equality and OR-ed title ILIKE filters.

    The supabase client is synchronous, so each query runs in the default
    thread executor to keep the event loop free.
    """

    def __init__(
        self,
        table: str = "listings",
        name: str = "catalog",
        client_factory: Callable[[], Client] = get_supabase,
    ):
        self._table = table
        self._client_factory = client_factory
        self.name = name

    def _client(self) -> Client:
        try:
            return self._client_factory()
        except RuntimeError as e:
            raise CatalogUnavailableError(str(e)) from e

    def _run_query(self, client: Client, query: ComparableQuery, limit: int) -> list:
        request = (
            client.table(self._table)
            .select(_COLUMNS)
            .eq("status", query.status)
        )
        if query.category:
            request = request.eq("category", query.category)

        keywords = [k for k in (_escape_ilike(k) for k in query.title_matches_any) if k]
        if keywords:
            request = request.or_(",".join(f"title.ilike.%{k}%" for k in keywords))

        response = request.limit(limit).execute()
        return response.data or []

    async def search(self, query: ComparableQuery, limit: int) -> List[ComparableItem]:
        client = self._client()
        loop = asyncio.get_running_loop()
        try:
            rows = await loop.run_in_executor(None, self._run_query, client, query, limit)
        except Exception as e:
            raise ComparableSearchError(
                f"Listing search failed: {type(e).__name__}: {e}",
                details={"category": query.category, "keywords": query.title_matches_any},
            ) from e

        return [
            ComparableItem(
                id=str(row.get("id")),
                title=row.get("title") or "",
                price=row.get("price"),
                location=row.get("location"),
            )
            for row in rows
        ]

    async def ping(self) -> bool:
        try:
            client = self._client()
        except CatalogUnavailableError:
            return False

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None,
                lambda: client.table(self._table).select("id").limit(1).execute(),
            )
        except Exception as e:
            logger.warning(f"Catalog ping failed: {type(e).__name__}: {e}")
            return False
        return True


def build_comparable_search(
    backend: str,
    table: str = "listings",
    name: str = "catalog",
) -> ComparableItemSearch:
    """Pick the comparable search implementation named by configuration."""
    if backend == "supabase":
        return SupabaseComparableSearch(table=table, name=name)
    if backend == "memory":
        from app.catalog.memory_search import InMemoryComparableSearch
        return InMemoryComparableSearch(name=name)
    raise ValueError(f"Unknown catalog backend '{backend}'")
