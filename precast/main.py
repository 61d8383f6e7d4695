"""
Main FastAPI application
"""
import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from precast.config import get_settings
from precast.database import AsyncSessionLocal, engine, init_models
from precast.models import Product  # noqa: F401 - registers the table
from precast.services.catalog import catalog_cache
from precast.utils.logger import configure_logging
from precast.api import admin, landing, products

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()

    # Warm the catalog so the first visitor doesn't wait on it
    async with AsyncSessionLocal() as session:
        snapshot = await catalog_cache.load(session)
        logger.info(f"Catalog loaded: status={snapshot.status}, products={len(snapshot.products)}")

    yield

    await engine.dispose()

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(landing.router, prefix="/api/landing", tags=["Landing"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

# Locally stored product images
if settings.STORAGE_BACKEND == "local":
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
async def root():
    return {
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "precast.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
