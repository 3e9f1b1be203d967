#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Dict


class HealthResponse(BaseModel):
    status: str
    service: str
    scheduler_running: bool


class ScheduledJob(BaseModel):
    id: str
    next_run_time: Optional[str] = None


class ScanSummary(BaseModel):
    """Counts from one reminder scan."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "started_at": "2026-02-01T12:00:00+00:00",
                "found": 3,
                "notified": 1,
                "not_due": 1,
                "suppressed": 1,
                "failed": 0,
                "error": None,
                "execution_time": 0.42,
                "outcomes": {"550e8400-e29b-41d4-a716-446655440000": "notified"}
            }
        }
    )

    started_at: str
    found: int = Field(ge=0)
    notified: int = Field(ge=0)
    not_due: int = Field(ge=0)
    suppressed: int = Field(ge=0)
    failed: int = Field(ge=0)
    error: Optional[str] = None
    execution_time: float = 0.0
    outcomes: Dict[str, str] = Field(default_factory=dict)


class SchedulerStatusResponse(BaseModel):
    running: bool
    jobs: List[ScheduledJob] = Field(default_factory=list)
    last_scan: Optional[ScanSummary] = None
    last_cleanup_count: Optional[int] = None


class ScanResponse(BaseModel):
    success: bool
    report: ScanSummary


class CleanupResponse(BaseModel):
    success: bool
    deleted: int = Field(ge=0)
