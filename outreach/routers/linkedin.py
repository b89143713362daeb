from fastapi import APIRouter

from outreach.config import settings
from outreach.linkedin.session import SessionStateManager
from outreach.schemas.campaign import WorkerStatusOut
from outreach.services.dedup_store import history_stats
from outreach.worker.campaign_worker import worker
from outreach.worker.task_queue import task_registry

router = APIRouter()


@router.get("/status", response_model=WorkerStatusOut)
def get_worker_status():
    """Worker state, saved-session flag and the size of the result history."""
    active = task_registry.active()
    known_profiles, file_count = history_stats.counts(settings.results_dir, settings.dedup_file_pattern)
    return WorkerStatusOut(
        worker_status=worker.status,
        session_saved=SessionStateManager.state_exists(settings.storage_state_file),
        active_job=active.task_id if active else None,
        known_profiles=known_profiles,
        history_files=file_count,
    )
