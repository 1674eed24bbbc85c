"""
Shared fixtures for the pricing service tests.

Provides: sample listings, in-memory catalog, fresh job registry, engine and runner
"""

from typing import List

import pytest

from app.catalog.memory_search import InMemoryComparableSearch
from app.catalog.search import ComparableItem, ComparableItemSearch, ComparableQuery
from app.jobs.in_process_runner import InProcessRunner
from app.jobs.registry import InMemoryJobRegistry
from app.pricing.engine import PricingEngine
from app.pricing.models import PricingInput


SAMPLE_LISTINGS = [
    {"id": "l1", "title": "iPhone 13 Pro case, leather", "price": 200, "category": "electronics", "status": "active"},
    {"id": "l2", "title": "Clear iphone case", "price": 300, "category": "electronics", "status": "active"},
    {"id": "l3", "title": "Phone case bundle", "price": "abc", "category": "electronics", "status": "active"},
    {"id": "l4", "title": "Rugged case", "price": -5, "category": "electronics", "status": "active"},
    {"id": "l5", "title": "iPhone case (sold)", "price": 100, "category": "electronics", "status": "sold"},
    {"id": "l6", "title": "Oak dining table", "price": 9000, "category": "furniture", "status": "active"},
    {"id": "l7", "title": "Pine bookshelf", "price": 3000, "category": "furniture", "status": "active"},
]


class RecordingSearch(ComparableItemSearch):
    """Returns canned results in order and remembers every query it saw."""

    name = "Recording Listings"

    def __init__(self, results=None, errors=None):
        self.results = list(results or [])
        self.errors = list(errors or [])
        self.queries: List[ComparableQuery] = []

    async def search(self, query, limit):
        self.queries.append(query)
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        if self.results:
            return self.results.pop(0)
        return []


def make_items(*prices) -> List[ComparableItem]:
    return [
        ComparableItem(id=f"item-{i}", title=f"Item {i}", price=price)
        for i, price in enumerate(prices)
    ]


@pytest.fixture
def phone_case_input():
    return PricingInput(
        title="iPhone 13 case",
        description="",
        category="electronics",
        condition="good",
    )


@pytest.fixture
def catalog():
    return InMemoryComparableSearch(SAMPLE_LISTINGS, name="Weggo Listings")


@pytest.fixture
def empty_catalog():
    return InMemoryComparableSearch([], name="Weggo Listings")


@pytest.fixture
def registry():
    return InMemoryJobRegistry()


@pytest.fixture
def engine(catalog):
    return PricingEngine(catalog)


@pytest.fixture
def runner(registry, engine):
    return InProcessRunner(registry=registry, analyze_fn=engine.analyze)
