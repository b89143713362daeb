"""
Background worker that runs Playwright jobs on one dedicated thread.

Playwright's sync API is bound to the thread that started it, so every job
goes through a single-thread executor instead of asyncio.to_thread().
"""
import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from outreach.config import settings
from outreach.worker.task_queue import WorkerTask, TaskType, task_registry

logger = logging.getLogger("outreach")


def _default_session_factory():
    from outreach.linkedin.browser import BrowserSession
    return BrowserSession()


class CampaignWorker:
    """
    Background worker that processes campaign and follow-up jobs.

    Key design:
    - Tasks come from an asyncio.Queue and run one at a time
    - Each task opens its own browser session and always closes it
    - Result summaries are stored on the WorkerTask for the status endpoint
    """

    def __init__(self, session_factory: Optional[Callable] = None):
        self.queue: asyncio.Queue[WorkerTask] = asyncio.Queue()
        self.session_factory = session_factory or _default_session_factory
        self._executor: Optional[ThreadPoolExecutor] = None
        self._running = False
        self._loop_task = None

    @property
    def status(self) -> str:
        if not self._running:
            return "stopped"
        if task_registry.active():
            return "busy"
        return "idle"

    async def start(self):
        """Start the worker's processing loop."""
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="playwright")
        self._running = True
        self._loop_task = asyncio.create_task(self._run_loop())
        logger.info("Campaign worker started.")

    async def stop(self):
        """Stop the worker loop and the Playwright thread."""
        self._running = False
        if self._loop_task:
            self._loop_task.cancel()
        if self._executor:
            self._executor.shutdown(wait=False)
            self._executor = None
        logger.info("Campaign worker stopped.")

    async def enqueue(self, task: WorkerTask) -> str:
        """Add a task to the queue. Returns task_id."""
        task_registry.register(task)
        await self.queue.put(task)
        logger.info(f"Task {task.task_id} ({task.task_type.value}) enqueued.")
        return task.task_id

    async def _run_loop(self):
        """Main processing loop - waits for tasks and executes them."""
        loop = asyncio.get_running_loop()
        while self._running:
            try:
                task = await asyncio.wait_for(self.queue.get(), timeout=1.0)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break

            task.mark_running()
            logger.info(f"Processing task {task.task_id} ({task.task_type.value})...")

            try:
                result = await loop.run_in_executor(self._executor, self.execute_task, task)
                task.mark_completed(result)
            except Exception as e:
                task.mark_failed(str(e))
                logger.error(f"Task {task.task_id} failed: {e}")

            task_registry.prune()

    def execute_task(self, task: WorkerTask) -> dict:
        """Run on the Playwright thread. Returns the job's summary dict."""
        from outreach.services.campaign_service import CampaignOrchestrator, CampaignPaths
        from outreach.services.followup_service import FollowUpScanner

        payload = task.payload
        with self.session_factory() as session:
            if task.task_type == TaskType.RUN_CAMPAIGN:
                orchestrator = CampaignOrchestrator(session, CampaignPaths.from_settings())
                summary = orchestrator.run(payload["query"], payload["target"])
            elif task.task_type == TaskType.HARVEST_PENDING:
                orchestrator = CampaignOrchestrator(session, CampaignPaths.from_settings())
                summary = orchestrator.harvest_pending(
                    payload["query"], payload["target"], settings.pending_results_file()
                )
            elif task.task_type == TaskType.SEND_FOLLOWUPS:
                scanner = FollowUpScanner(
                    session,
                    max_send=payload["max_send"],
                    max_passes=payload.get("max_passes", settings.max_scroll_passes),
                )
                summary = scanner.run()
            else:
                raise ValueError(f"Unknown task type: {task.task_type}")
        return summary.to_dict()


# Global worker instance
worker = CampaignWorker()
