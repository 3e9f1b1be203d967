#!/usr/bin/env python3
"""
Scheduler endpoints - inspect the timers and trigger runs out of cadence.
"""

import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from core.app_context import AppContext
from ..dependencies import get_app_context
from ..models.responses import SchedulerStatusResponse, ScanResponse, CleanupResponse

logger = logging.getLogger(__name__)

# Manual triggers hit the email and push providers; keep them bounded
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/api/scheduler", tags=["scheduler"])


def add_rate_limit_handlers(app):
    """Add rate limit exception handlers to the FastAPI app."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


async def _rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=429,
        content={"detail": str(exc)}
    )


@router.get("/status", response_model=SchedulerStatusResponse)
def get_scheduler_status(ctx: AppContext = Depends(get_app_context)):
    """Running flag, registered jobs with their next run times, and the last results."""
    return ctx.scheduler.status()


@router.post("/scan", response_model=ScanResponse)
@limiter.limit("10/minute")
def trigger_scan(request: Request, ctx: AppContext = Depends(get_app_context)):
    """
    Run one reminder scan now and return its report.

    Runs in the request thread; it does not need the scheduler to be running.
    """
    report = ctx.scheduler.trigger_scan_now()
    return ScanResponse(success=report.success, report=report.to_dict())


@router.post("/cleanup", response_model=CleanupResponse)
@limiter.limit("10/minute")
def trigger_cleanup(request: Request, ctx: AppContext = Depends(get_app_context)):
    """Delete read notifications past the retention period now."""
    deleted = ctx.scheduler.trigger_cleanup_now()
    return CleanupResponse(success=True, deleted=deleted)
