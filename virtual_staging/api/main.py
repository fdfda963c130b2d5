"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, virtual_staging.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from virtual_staging.api.deps import get_service_cache
from virtual_staging.configs import get_settings
from virtual_staging.observability import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
)

from .routers import (
    credits_router,
    generations_router,
    health_router,
    jobs_router,
    reaper_router,
    sessions_router,
    users_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Configures logging on startup and closes cached clients on shutdown.
    """
    configure_logging(get_settings().log_level)
    logger = logging.getLogger(__name__)
    logger.info(f"{__name__}:lifespan - Virtual staging API starting")

    yield

    await get_service_cache().aclose()
    logger.info(f"{__name__}:lifespan - Service cache cleared")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Virtual Staging API",
        description="Credit-backed AI room staging: empty-room and multi-variant staging generations",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    # All routes versioned under /api/v1
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(users_router, prefix="/api/v1")
    app.include_router(credits_router, prefix="/api/v1")
    app.include_router(sessions_router, prefix="/api/v1")
    app.include_router(generations_router, prefix="/api/v1")
    app.include_router(jobs_router, prefix="/api/v1")
    app.include_router(reaper_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "virtual_staging.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
