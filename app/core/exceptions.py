"""Exception hierarchy for the pricing service.

Catalog errors come in two flavours:

- ``ComparableSearchError``: one search call failed. The pricing engine logs it
  and carries on as if the search returned nothing.
- ``CatalogUnavailableError``: the backing store cannot be reached at all (or is
  not configured). This fails the pricing job.
"""

from typing import Any, Dict, Optional


class PricingServiceError(Exception):
    """Base exception for all pricing service errors."""

    def __init__(
        self,
        message: str,
        code: str = "PRICING_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        result = {"error": self.code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class InvalidPricingInputError(PricingServiceError):
    """A submission is missing one of its required fields."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_INPUT", details=details)


class CatalogError(PricingServiceError):
    """Base class for comparable item catalog failures."""


class ComparableSearchError(CatalogError):
    """A single comparable item search failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="COMPARABLE_SEARCH_FAILED", details=details)


class CatalogUnavailableError(CatalogError):
    """The comparable item catalog cannot be used at all."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CATALOG_UNAVAILABLE", details=details)
