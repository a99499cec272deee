"""FastAPI application factory and main entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import logging_config
from api import router as api_router
from api.responses import register_exception_handlers
from db import close_db, init_db
from tenant_pool import TenantConnectionPool

# Setup logging
logging_config.setup_logging(config.settings.LOG_LEVEL)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.
    """
    # Startup
    await init_db()
    pool = TenantConnectionPool.from_settings(config.settings)
    pool.start()
    app.state.tenant_pool = pool
    logger.info("Admin database connected")
    yield
    # Shutdown
    await pool.shutdown()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title="LMS Rewards Backend",
    description="Multi-tenant rewards API for the LMS",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API router
app.include_router(api_router.api_router, prefix=config.settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "LMS Rewards Backend API",
        "version": "0.1.0",
    }
