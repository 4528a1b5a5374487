from functools import lru_cache

from fastapi import Request

from dlna_catalog.core.config import Config, load_config
from dlna_catalog.service import CatalogService


@lru_cache(maxsize=1)
def get_config() -> Config:
    """FastAPI dependency for configuration."""
    return load_config()


def get_service(request: Request) -> CatalogService:
    """FastAPI dependency for the shared catalog service."""
    return request.app.state.catalog_service
