import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from dlna_catalog.core.config import ensure_directories
from dlna_catalog.service import CatalogService
from web.backend.deps import get_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()
    ensure_directories(config)
    service = CatalogService(config)
    app.state.catalog_service = service
    logger.info(f"Mirroring {config.upstream.control_url}")
    try:
        yield
    finally:
        await service.aclose()


app = FastAPI(title="DLNA Catalog API", version="0.1.0", lifespan=lifespan)

# CORS: Allow environment override for production
allowed_origins_env = os.getenv("ALLOWED_ORIGINS", "")
allowed_origins = (
    allowed_origins_env.split(",")
    if allowed_origins_env
    else ["http://localhost:5173"]  # Dev default
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from web.backend.routers import album_art, catalog

app.include_router(catalog.router, prefix="/api", tags=["catalog"])
app.include_router(album_art.router, prefix="/api", tags=["album-art"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
