"""
Storage-state persistence for LinkedIn sessions.
"""
import logging
from pathlib import Path

from playwright.sync_api import BrowserContext


class SessionStateManager:
    """
    Handles Playwright storage-state snapshots for LinkedIn sessions.

    Strategy:
      - After a successful login we dump the context's storage state
        (cookies + local storage) to a JSON file.
      - On later runs the browser context is created from that file, which
        restores the session without touching the login form.
      - The critical cookie is 'li_at' which typically lasts 1-3 months.
    """

    @staticmethod
    def save_state(context: BrowserContext, filepath: Path) -> None:
        """Write the context's storage state to `filepath`."""
        filepath.parent.mkdir(parents=True, exist_ok=True)
        context.storage_state(path=str(filepath))
        logging.getLogger("outreach").info(f"Saved LinkedIn session to {filepath}")

    @staticmethod
    def state_exists(filepath: Path) -> bool:
        """Check if a storage-state file exists and is non-empty."""
        return filepath.exists() and filepath.stat().st_size > 0

    @staticmethod
    def context_options(filepath: Path) -> dict:
        """Keyword arguments for browser.new_context()."""
        if SessionStateManager.state_exists(filepath):
            return {"storage_state": str(filepath)}
        return {}
