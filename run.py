"""Serve the outreach control API (campaign, pending and follow-up jobs)."""
import uvicorn

from outreach.config import settings, setup_logging

if __name__ == "__main__":
    setup_logging()
    uvicorn.run(
        "outreach.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level="info",
    )
