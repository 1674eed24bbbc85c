"""Comparable item search over an in-process list of listings."""

from typing import Any, Dict, Iterable, List, Optional

from app.catalog.search import ComparableItem, ComparableItemSearch, ComparableQuery


class InMemoryComparableSearch(ComparableItemSearch):
    """Filters a fixed list of listing dicts. Used for local runs and tests.

    Each listing is a dict with ``id``, ``title``, ``price``, ``category``,
    ``status`` and optionally ``location``.
    """

    def __init__(self, listings: Optional[Iterable[Dict[str, Any]]] = None, name: str = "catalog"):
        self._listings: List[Dict[str, Any]] = list(listings or [])
        self.name = name

    def add(self, listing: Dict[str, Any]) -> None:
        self._listings.append(listing)

    def _matches(self, listing: Dict[str, Any], query: ComparableQuery) -> bool:
        if listing.get("status") != query.status:
            return False
        if query.category and listing.get("category") != query.category:
            return False
        if query.title_matches_any:
            title = str(listing.get("title", "")).lower()
            if not any(keyword.lower() in title for keyword in query.title_matches_any):
                return False
        return True

    async def search(self, query: ComparableQuery, limit: int) -> List[ComparableItem]:
        matched = [listing for listing in self._listings if self._matches(listing, query)]
        return [
            ComparableItem(
                id=str(listing["id"]),
                title=str(listing.get("title", "")),
                price=listing.get("price"),
                location=listing.get("location"),
            )
            for listing in matched[:limit]
        ]
