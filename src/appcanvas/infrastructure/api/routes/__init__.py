"""API Routes for AppCanvas."""

from .databases_router import router as databases_router
from .records_router import router as records_router
from .render_router import router as render_router

__all__ = [
    "databases_router",
    "records_router",
    "render_router",
]
