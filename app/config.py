"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # Supabase (only when catalog_backend=supabase)
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Comparable item catalog
    catalog_backend: str = "memory"  # "memory" or "supabase"
    listings_table: str = "listings"
    catalog_platform_name: str = "Weggo Listings"
    listing_url_prefix: str = "/listings/"

    # Pricing analysis
    comparable_limit: int = 10
    max_sources: int = 5
    max_keywords: int = 6

    # Service
    compute_port: int = 8001
    log_level: str = "INFO"
    app_version: str = "0.1.0"
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
