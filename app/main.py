"""Listing price estimator - FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1.router import v1_router
from app.api.v1.health import router as health_root_router
from app.api.v1 import health as health_api
from app.api.v1 import pricing as pricing_api
from app.catalog.search import ComparableItemSearch
from app.catalog.supabase_search import build_comparable_search
from app.jobs.in_process_runner import InProcessRunner
from app.jobs.registry import InMemoryJobRegistry
from app.logging_config import configure_logging
from app.pricing.engine import PricingEngine

logger = logging.getLogger(__name__)


def build_runner(search: ComparableItemSearch) -> InProcessRunner:
    """Wire registry, engine and runner together for one process."""
    engine = PricingEngine(
        search,
        comparable_limit=settings.comparable_limit,
        max_sources=settings.max_sources,
        max_keywords=settings.max_keywords,
        listing_url_prefix=settings.listing_url_prefix,
    )
    return InProcessRunner(registry=InMemoryJobRegistry(), analyze_fn=engine.analyze)


def create_app(search: Optional[ComparableItemSearch] = None) -> FastAPI:
    """Build the FastAPI app. ``search`` overrides the configured catalog backend."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.log_level)
        logger.info(f"Starting price estimator on port {settings.compute_port}")

        catalog = search or build_comparable_search(
            settings.catalog_backend,
            table=settings.listings_table,
            name=settings.catalog_platform_name,
        )
        logger.info(f"Catalog backend: {settings.catalog_backend} ({catalog.name})")

        runner = build_runner(catalog)
        await runner.start()
        app.state.runner = runner

        # Wire runner and catalog into API endpoints
        pricing_api.set_dispatcher(runner)
        health_api.set_dispatcher(runner)
        health_api.set_search(catalog)

        yield

        logger.info("Shutting down price estimator")
        await runner.stop()
        pricing_api.set_dispatcher(None)
        health_api.set_dispatcher(None)
        health_api.set_search(None)

    app = FastAPI(
        title="Listing Price Estimator",
        description="Asynchronous price suggestions for marketplace listings",
        version=settings.app_version,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_root_router, tags=["health"])  # GET /health at root
    app.include_router(v1_router)  # All /api/v1/* endpoints
    return app


app = create_app()
