"""API route handlers."""

from .scheduler import router as scheduler_router
