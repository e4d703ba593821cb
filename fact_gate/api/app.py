"""FastAPI application for the fact-gate service."""

import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.config_loader import configure_logging, load_environment
from ..infrastructure.dependencies import get_service_container
from .endpoints import fact_check, health, review, validation

# Load environment variables from .env file
load_environment()

# Configure logging
configure_logging()
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI application."""
    logger.info("🚀 fact-gate API starting")

    yield  # Application runs here

    # Shutdown: close provider clients
    container = get_service_container()
    await container.shutdown()
    logger.info("👋 fact-gate API stopped")


# Create FastAPI application
app = FastAPI(
    title="Fact Gate API",
    description="Fact verification and publish gating for generated Korean blog posts",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(fact_check.router)
app.include_router(validation.router)
app.include_router(review.router)
