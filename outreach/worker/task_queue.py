"""
Job records for the background worker.

A job moves queued -> running -> completed | failed and keeps the summary
dict of whatever the run produced, so the status endpoint can report it
after the browser is gone.
"""
import uuid
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

logger = logging.getLogger("outreach")


class TaskType(str, Enum):
    RUN_CAMPAIGN = "run_campaign"
    HARVEST_PENDING = "harvest_pending"
    SEND_FOLLOWUPS = "send_followups"


class JobStatus(str, Enum):
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class WorkerTask:
    task_type: TaskType
    payload: dict = field(default_factory=dict)
    task_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=datetime.now)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    result: Optional[dict] = None
    error: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)

    def mark_running(self) -> None:
        self.status = JobStatus.RUNNING
        self.started_at = datetime.now()

    def mark_completed(self, result: Optional[dict]) -> None:
        self.status = JobStatus.COMPLETED
        self.result = result
        self.finished_at = datetime.now()

    def mark_failed(self, error: str) -> None:
        self.status = JobStatus.FAILED
        self.error = error
        self.finished_at = datetime.now()

    def to_dict(self) -> dict:
        return {
            "job_id": self.task_id,
            "task_type": self.task_type.value,
            "status": self.status.value,
            "created_at": self.created_at,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "error": self.error,
        }


class TaskRegistry:
    """In-memory index of jobs by id, oldest first."""

    def __init__(self):
        self._tasks: dict[str, WorkerTask] = {}

    def register(self, task: WorkerTask) -> str:
        self._tasks[task.task_id] = task
        return task.task_id

    def get(self, task_id: str) -> Optional[WorkerTask]:
        return self._tasks.get(task_id)

    def active(self) -> Optional[WorkerTask]:
        return next(
            (t for t in self._tasks.values() if t.status == JobStatus.RUNNING), None
        )

    def recent(self, limit: int = 20) -> list[WorkerTask]:
        """Newest first."""
        return list(reversed(self._tasks.values()))[:limit]

    def prune(self, keep_finished: int = 50) -> int:
        """Forget the oldest finished jobs beyond `keep_finished`. Returns how many."""
        finished = [t for t in self._tasks.values() if t.finished]
        stale = finished[: max(len(finished) - keep_finished, 0)]
        for t in stale:
            del self._tasks[t.task_id]
        if stale:
            logger.debug(f"Pruned {len(stale)} finished jobs from the registry.")
        return len(stale)


# Global registry
task_registry = TaskRegistry()
