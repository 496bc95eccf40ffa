"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from proprio import __version__
from proprio.config import get_settings
from proprio.api import api_router
from proprio.api.session import get_worker

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.app_name}")
    worker = get_worker()
    worker.start()
    yield
    worker.stop()
    logger.info(f"Shutting down {settings.app_name}")


app = FastAPI(
    title=settings.app_name,
    description="""
    Proprio Motion Engine API

    Turns per-frame body keypoints into smoothed motion metrics.

    ## Metrics

    - **Tremor amplitude**: Normalized, EMA-smoothed wrist spread (0-1)
    - **Gait stability**: Inferred from tremor amplitude (1.0 = stable)
    - **Gait symmetry**: Left/right ankle spread ratio (1.0 = symmetric)
    - **Tremor trend**: increasing / decreasing / stable

    ## Modes

    - **gait**: Ankle symmetry plus right wrist tremor
    - **tremor**: Bilateral wrist tremor
    """,
    version=__version__,
    lifespan=lifespan
)

# Include API routes
app.include_router(api_router, prefix=settings.api_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": __version__
    }
