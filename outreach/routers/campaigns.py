from fastapi import APIRouter, Query

from outreach.schemas.campaign import CampaignRequest, FollowUpRequest, JobStatusOut
from outreach.worker.campaign_worker import worker
from outreach.worker.task_queue import WorkerTask, TaskType, task_registry

router = APIRouter()


async def _enqueue(task_type: TaskType, payload: dict) -> JobStatusOut:
    task = WorkerTask(task_type=task_type, payload=payload)
    await worker.enqueue(task)
    return JobStatusOut(**task.to_dict())


@router.post("/campaigns", response_model=JobStatusOut)
async def start_campaign(req: CampaignRequest):
    """Queue an invitation campaign for a search query."""
    return await _enqueue(TaskType.RUN_CAMPAIGN, {"query": req.query, "target": req.target})


@router.post("/campaigns/pending", response_model=JobStatusOut)
async def harvest_pending(req: CampaignRequest):
    """Queue a pass that only records profiles with pending invitations."""
    return await _enqueue(TaskType.HARVEST_PENDING, {"query": req.query, "target": req.target})


@router.post("/followups", response_model=JobStatusOut)
async def send_followups(req: FollowUpRequest):
    """Queue the inbox follow-up scan."""
    return await _enqueue(
        TaskType.SEND_FOLLOWUPS, {"max_send": req.max_send, "max_passes": req.max_passes}
    )


@router.get("/jobs", response_model=list[JobStatusOut])
def list_jobs(limit: int = Query(default=20, ge=1, le=100)):
    """Most recent jobs first."""
    return [JobStatusOut(**t.to_dict()) for t in task_registry.recent(limit)]


@router.get("/jobs/{job_id}", response_model=JobStatusOut)
def get_job_status(job_id: str):
    """Check status of a background job."""
    task = task_registry.get(job_id)
    if not task:
        return JobStatusOut(job_id=job_id, status="not_found")
    return JobStatusOut(**task.to_dict())
