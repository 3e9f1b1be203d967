#!/usr/bin/env python3
"""
DueWatch Ops API - FastAPI Application

Health check, scheduler status and manual scan/cleanup triggers. The
reminder scheduler is started with the app and stopped on shutdown.

Usage:
    python main.py api

Then open:
    - http://localhost:8080/health - Health check (default port, configurable in config.yaml)
    - http://localhost:8080/docs - API Documentation (Swagger UI)
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from starlette.exceptions import HTTPException

from core.app_context import AppContext
from .exceptions import http_exception_handler, general_exception_handler
from .models.responses import HealthResponse
from .routers import scheduler_router
from .routers.scheduler import add_rate_limit_handlers

logger = logging.getLogger(__name__)


def create_app(ctx: AppContext, start_scheduler: Optional[bool] = None) -> FastAPI:
    """
    Build the FastAPI app around an existing AppContext.

    Args:
        ctx: Wired application context
        start_scheduler: Run the reminder scheduler for the app's lifetime;
            defaults to ``scheduler.enabled`` from config
    """
    if start_scheduler is None:
        start_scheduler = ctx.config.scheduler.enabled

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_scheduler:
            ctx.scheduler.start()
        else:
            logger.info("Reminder scheduler disabled for this app")
        try:
            yield
        finally:
            ctx.scheduler.stop()

    app = FastAPI(
        title="DueWatch API",
        description="Operations API for the reminder notification scheduler",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.ctx = ctx

    # Configure rate limiting
    add_rate_limit_handlers(app)

    # Register exception handlers
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Include routers
    app.include_router(scheduler_router)

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """Health check endpoint."""
        return HealthResponse(
            status="healthy",
            service="duewatch",
            scheduler_running=ctx.scheduler.is_running,
        )

    return app
