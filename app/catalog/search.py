"""Comparable item search interface.

The pricing engine only ever reads from the catalog, through this interface.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class ComparableQuery(BaseModel):
    status: str = "active"
    category: Optional[str] = None
    # Case-insensitive OR match against the item title; empty means no title filter
    title_matches_any: List[str] = Field(default_factory=list)


class ComparableItem(BaseModel):
    id: str
    title: str = ""
    # Catalog data is loosely typed; the engine filters out unusable prices
    price: Any = None
    location: Optional[str] = None


class ComparableItemSearch(ABC):
    """Read-only comparable item lookup (best effort, possibly empty)."""

    name: str = "catalog"

    @abstractmethod
    async def search(self, query: ComparableQuery, limit: int) -> List[ComparableItem]:
        """Return up to ``limit`` items matching the query.

        Raises ComparableSearchError for a failed call and
        CatalogUnavailableError when the catalog cannot be used at all.
        """
        ...

    async def ping(self) -> bool:
        """Cheap availability check used by the health endpoint."""
        return True
