"""API routers."""

from .credits import router as credits_router
from .generations import router as generations_router
from .health import router as health_router
from .jobs import router as jobs_router
from .reaper import router as reaper_router
from .sessions import router as sessions_router
from .users import router as users_router

__all__ = [
    "credits_router",
    "generations_router",
    "health_router",
    "jobs_router",
    "reaper_router",
    "sessions_router",
    "users_router",
]
