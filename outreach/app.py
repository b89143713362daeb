import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from outreach.config import settings, setup_logging
from outreach.services.dedup_store import history_stats
from outreach.worker.campaign_worker import worker

logger = logging.getLogger("outreach")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate settings, report the result history, run the worker."""
    setup_logging()
    settings.validate()

    known_profiles, file_count = history_stats.counts(settings.results_dir, settings.dedup_file_pattern)
    logger.info(
        f"Results directory {settings.results_dir}: "
        f"{known_profiles} known profiles in {file_count} logs."
    )

    await worker.start()
    yield
    await worker.stop()
    logger.info("Shutting down.")


app = FastAPI(title="LinkedIn Outreach", version="1.0.0", lifespan=lifespan)

from outreach.routers import campaigns, linkedin  # noqa: E402

app.include_router(campaigns.router, prefix="/api", tags=["campaigns"])
app.include_router(linkedin.router, prefix="/api/linkedin", tags=["linkedin"])


@app.get("/api/health")
async def health():
    return {"status": "ok"}
