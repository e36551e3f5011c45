"""API routers (preferred import path)."""

from .exercises import router as exercises_router
from .execution import router as execution_router
from .progress import router as progress_router
from .submissions import router as submissions_router
from .system import router as system_router

__all__ = [
    "exercises_router",
    "execution_router",
    "progress_router",
    "submissions_router",
    "system_router",
]
