import asyncio

import pytest

from fakes import FakeLinkedIn, FakeSession, profile
from outreach.config import settings
from outreach.errors import SessionInvalid
from outreach.services.campaign_service import CampaignPaths
from outreach.worker.campaign_worker import CampaignWorker
from outreach.worker.task_queue import JobStatus, TaskRegistry, TaskType, WorkerTask


@pytest.fixture
def paths(tmp_path, monkeypatch):
    paths = CampaignPaths(
        results_dir=tmp_path,
        run_file=tmp_path / "linkedin-results-2026-01-01.csv",
        global_file=tmp_path / "linkedin-global-results.csv",
        failed_send_file=tmp_path / "linkedin-connect-with-email.csv",
        dedup_pattern=settings.dedup_file_pattern,
    )
    monkeypatch.setattr(CampaignPaths, "from_settings", lambda: paths)
    monkeypatch.setattr(settings, "results_dir", tmp_path)
    return paths


def _run_until_done(worker, task, timeout=5.0):
    async def scenario():
        await worker.start()
        await worker.enqueue(task)
        deadline = asyncio.get_running_loop().time() + timeout
        while not task.finished:
            if asyncio.get_running_loop().time() > deadline:
                break
            await asyncio.sleep(0.02)
        await worker.stop()

    asyncio.run(scenario())


def test_execute_campaign_task(paths):
    session = FakeSession(FakeLinkedIn([[profile(1), profile(2)]]))
    worker = CampaignWorker(session_factory=lambda: session)
    task = WorkerTask(task_type=TaskType.RUN_CAMPAIGN, payload={"query": "cto", "target": 5})

    result = worker.execute_task(task)

    assert result["collected"] == 2
    assert session.closed
    assert paths.run_file.exists()


def test_execute_followup_task(paths):
    convo = {"id": "thread-1", "name": "Ada Lovelace", "snippet": "Hi!"}
    session = FakeSession(FakeLinkedIn([[]], conversations=[[convo]]))
    worker = CampaignWorker(session_factory=lambda: session)
    task = WorkerTask(task_type=TaskType.SEND_FOLLOWUPS, payload={"max_send": 1})

    assert worker.execute_task(task) == {"matched": 1, "sent": ["Ada Lovelace"], "failed": []}


def test_worker_loop_completes_task(paths):
    session = FakeSession(FakeLinkedIn([[profile(1, button_text="Pending")]]))
    worker = CampaignWorker(session_factory=lambda: session)
    task = WorkerTask(task_type=TaskType.HARVEST_PENDING, payload={"query": "cto", "target": 5})

    _run_until_done(worker, task)

    assert task.status == JobStatus.COMPLETED
    assert task.started_at <= task.finished_at
    assert task.result["rows_written"] == 1
    assert worker.status == "stopped"


def test_worker_loop_records_failure(paths):
    session = FakeSession(FakeLinkedIn([[]]), login_error=SessionInvalid("expired"))
    worker = CampaignWorker(session_factory=lambda: session)
    task = WorkerTask(task_type=TaskType.RUN_CAMPAIGN, payload={"query": "cto", "target": 5})

    _run_until_done(worker, task)

    assert task.status == JobStatus.FAILED
    assert task.error == "expired"
    assert session.closed


def test_registry_keeps_recent_finished_tasks():
    registry = TaskRegistry()
    tasks = [WorkerTask(task_type=TaskType.RUN_CAMPAIGN, status=JobStatus.COMPLETED) for _ in range(5)]
    for task in tasks:
        registry.register(task)
    running = WorkerTask(task_type=TaskType.SEND_FOLLOWUPS, status=JobStatus.RUNNING)
    registry.register(running)

    assert registry.prune(keep_finished=2) == 3

    assert registry.get(tasks[0].task_id) is None
    assert registry.get(tasks[-1].task_id) is tasks[-1]
    assert registry.active() is running
