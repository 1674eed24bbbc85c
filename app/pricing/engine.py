"""Pricing analysis engine.

Turns a free-text item description into a price estimate in four stages:

1. prepare  - heuristic price from the category and condition tables
2. match    - look up comparable active listings by keyword, then by category
3. compute  - average the usable comparable prices
4. finalize - confidence, price range and supporting sources

Progress is reported through an optional ``on_progress`` callback. The engine
never looks at what the callback returns and never mutates a job itself.
"""

import logging
import math
from typing import Any, Callable, List, Optional

from app.catalog.search import ComparableItem, ComparableItemSearch, ComparableQuery
from app.core.exceptions import ComparableSearchError
from app.jobs.models import ProgressUpdate, StepStatus
from app.pricing.keywords import MAX_KEYWORDS, extract_keywords
from app.pricing.models import (
    MarketTrend,
    PriceRange,
    PricingInput,
    PricingResult,
    PricingSource,
)
from app.pricing.tables import round_half_up, suggested_price

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressUpdate], Any]

# Overall job progress reported for each stage
STAGE_PROGRESS = {
    "prepare": 10,
    "match": 35,
    "compute": 70,
    "finalize": 100,
}

BASE_CONFIDENCE = 55
CONFIDENCE_PER_COMPARABLE = 5
MAX_COMPARABLE_BONUS = 40
MAX_CONFIDENCE = 95

RANGE_LOW = 0.85
RANGE_HIGH = 1.15


def usable_price(value: Any) -> Optional[float]:
    """Return the price as a float if it is a finite positive number, else None."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price) or price <= 0:
        return None
    return price


def compute_confidence(comparable_count: int) -> int:
    bonus = min(MAX_COMPARABLE_BONUS, comparable_count * CONFIDENCE_PER_COMPARABLE)
    return min(MAX_CONFIDENCE, BASE_CONFIDENCE + bonus)


def estimate_market_trend(comparables: List[ComparableItem]) -> MarketTrend:
    """Market trend for the comparables.

    Stub: listings carry no price history, so there is no signal to compute a
    trend from yet. Always reports "stable".
    """
    return "stable"


class PricingEngine:
    """Estimates a listing price from comparable catalog items."""

    def __init__(
        self,
        search: ComparableItemSearch,
        comparable_limit: int = 10,
        max_sources: int = 5,
        max_keywords: int = MAX_KEYWORDS,
        listing_url_prefix: str = "/listings/",
    ):
        self._search = search
        self._comparable_limit = comparable_limit
        self._max_sources = max_sources
        self._max_keywords = max_keywords
        self._listing_url_prefix = listing_url_prefix

    async def __call__(
        self,
        pricing_input: PricingInput,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PricingResult:
        return await self.analyze(pricing_input, on_progress)

    async def analyze(
        self,
        pricing_input: PricingInput,
        on_progress: Optional[ProgressCallback] = None,
    ) -> PricingResult:
        def report(step_id: str, status: StepStatus, message: str) -> None:
            if on_progress is not None:
                on_progress(ProgressUpdate(
                    step_id=step_id,
                    status=status,
                    progress=STAGE_PROGRESS[step_id],
                    message=message,
                ))

        # 1. Prepare
        report("prepare", StepStatus.RUNNING, "Preparing input")
        heuristic_price = suggested_price(pricing_input.category, pricing_input.condition)
        keywords = extract_keywords(
            pricing_input.title, pricing_input.description, limit=self._max_keywords
        )
        report("prepare", StepStatus.DONE, f"Heuristic price {heuristic_price}")

        # 2. Match
        report("match", StepStatus.RUNNING, "Finding similar listings")
        comparables = await self._find_comparables(pricing_input.category, keywords)
        report("match", StepStatus.DONE, f"Found {len(comparables)} similar listings")

        # 3. Compute
        report("compute", StepStatus.RUNNING, "Calculating market price")
        prices = [p for p in (usable_price(item.price) for item in comparables) if p is not None]
        if prices:
            average_price = round_half_up(sum(prices) / len(prices))
        else:
            average_price = heuristic_price
        report("compute", StepStatus.DONE, f"Average market price {average_price}")

        # 4. Finalize
        report("finalize", StepStatus.RUNNING, "Finalizing suggestion")
        result = PricingResult(
            price=average_price,
            confidence=compute_confidence(len(comparables)),
            reason=(
                f"Based on {len(comparables)} similar listings in {self._search.name}, "
                "your item's condition, and current market demand."
            ),
            market_trend=estimate_market_trend(comparables),
            sources=self._build_sources(comparables),
            price_range=PriceRange(
                min=round_half_up(average_price * RANGE_LOW),
                max=round_half_up(average_price * RANGE_HIGH),
            ),
        )
        report("finalize", StepStatus.DONE, "Finalizing suggestion")
        return result

    async def _find_comparables(self, category: str, keywords: List[str]) -> List[ComparableItem]:
        query = ComparableQuery(category=category or None, title_matches_any=keywords)
        items = await self._safe_search(query)

        # Short titles rarely match by keyword; category alone is a coarse substitute
        if not items and category:
            items = await self._safe_search(ComparableQuery(category=category))
        return items

    async def _safe_search(self, query: ComparableQuery) -> List[ComparableItem]:
        try:
            return await self._search.search(query, self._comparable_limit)
        except ComparableSearchError as e:
            logger.warning(f"Comparable search degraded to empty result: {e}")
            return []

    def _build_sources(self, comparables: List[ComparableItem]) -> List[PricingSource]:
        sources = []
        for item in comparables[: self._max_sources]:
            price = usable_price(item.price)
            sources.append(PricingSource(
                platform=self._search.name,
                price=price if price is not None else 0,
                title=item.title or None,
                url=f"{self._listing_url_prefix}{item.id}",
            ))
        return sources
