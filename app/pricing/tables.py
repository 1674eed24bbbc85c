"""Heuristic pricing tables used when market evidence is thin."""

import math
from typing import Optional


# Typical asking price per category, in EGP
BASE_PRICES = {
    "electronics": 15000,
    "furniture": 8000,
    "vehicles": 350000,
    "fashion": 500,
    "home": 3000,
    "sports": 2000,
    "books": 150,
    "toys": 300,
    "music": 5000,
    "gaming": 8000,
}
DEFAULT_BASE_PRICE = 1000

CONDITION_MULTIPLIERS = {
    "new": 1.0,
    "like new": 0.85,
    "good": 0.7,
    "fair": 0.5,
    "poor": 0.3,
}
DEFAULT_CONDITION_MULTIPLIER = 0.7


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def base_price_for(category: Optional[str]) -> int:
    return BASE_PRICES.get(_normalize(category), DEFAULT_BASE_PRICE)


def condition_multiplier_for(condition: Optional[str]) -> float:
    # "like-new", "like_new" and "Like  New" all mean the same thing
    key = " ".join(_normalize(condition).replace("-", " ").replace("_", " ").split())
    return CONDITION_MULTIPLIERS.get(key, DEFAULT_CONDITION_MULTIPLIER)


def suggested_price(category: Optional[str], condition: Optional[str]) -> int:
    """Heuristic price from the category and condition tables alone."""
    return round_half_up(base_price_for(category) * condition_multiplier_for(condition))
