from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from outreach.config import settings


class CampaignRequest(BaseModel):
    query: str = Field(default=settings.default_query, min_length=1)
    target: int = Field(default=settings.max_results, ge=1)


class FollowUpRequest(BaseModel):
    max_send: int = Field(default=settings.max_send_messages, ge=1)
    max_passes: int = Field(default=settings.max_scroll_passes, ge=1)


class JobStatusOut(BaseModel):
    job_id: str
    task_type: Optional[str] = None
    status: str  # queued/running/completed/failed/not_found
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    result: Optional[dict[str, Any]] = None
    error: Optional[str] = None


class WorkerStatusOut(BaseModel):
    worker_status: str
    session_saved: bool
    active_job: Optional[str] = None
    known_profiles: int = 0
    history_files: int = 0
