"""
Playwright browser launch and LinkedIn session bootstrap.
"""
import logging
from pathlib import Path
from typing import Optional

from playwright.sync_api import sync_playwright

from outreach.config import settings
from outreach.errors import SessionInvalid
from outreach.linkedin.automation import LOGIN_URL, LinkedInAutomation
from outreach.linkedin.session import SessionStateManager

logger = logging.getLogger("outreach")


class BrowserSession:
    """
    One Chromium browser + context + page, reusing a saved session snapshot.

    Use as a context manager; the browser is always closed on exit:

        with BrowserSession() as session:
            session.login()
            session.linkedin.search_people("cto")
    """

    def __init__(
        self,
        state_file: Optional[Path] = None,
        headless: Optional[bool] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ):
        self.state_file = state_file or settings.storage_state_file
        self.headless = settings.headless if headless is None else headless
        self.email = settings.linkedin_email if email is None else email
        self.password = settings.linkedin_password if password is None else password
        self._pw = None
        self._browser = None
        self.context = None
        self.page = None
        self.linkedin: Optional[LinkedInAutomation] = None

    def __enter__(self) -> "BrowserSession":
        self.launch()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def launch(self) -> None:
        """Launch Chromium, restoring the saved storage state if present."""
        self._pw = sync_playwright().start()
        self._browser = self._pw.chromium.launch(
            headless=self.headless,
            slow_mo=settings.slow_mo,
        )
        self.context = self._browser.new_context(
            **SessionStateManager.context_options(self.state_file)
        )
        self.page = self.context.new_page()
        self.linkedin = LinkedInAutomation(self.page)
        logger.info("Browser launched.")

    def login(self) -> None:
        """
        Reuse the stored session or log in with credentials.

        Raises SessionInvalid if neither works. Nothing is scraped before this
        succeeds.
        """
        logger.info("Checking stored LinkedIn session...")
        if self.linkedin.check_login_status():
            logger.info("Reusing saved LinkedIn session.")
            return

        logger.info("Stored session unavailable. Logging in with credentials...")
        if not self.email or not self.password:
            raise SessionInvalid(
                "No valid session and LINKEDIN_EMAIL / LINKEDIN_PASSWORD are not set."
            )

        if not self.linkedin.login_with_credentials(self.email, self.password):
            if self.linkedin.detect_security_challenge():
                raise SessionInvalid("LinkedIn is asking for a security verification.")
            raise SessionInvalid("Credential login did not reach the feed.")

        SessionStateManager.save_state(self.context, self.state_file)
        logger.info("Logged in successfully.")

    def close(self) -> None:
        """Close the context, browser and Playwright driver."""
        try:
            if self.context:
                self.context.close()
            if self._browser:
                self._browser.close()
            if self._pw:
                self._pw.stop()
            logger.info("Browser closed.")
        except Exception as e:
            logger.debug(f"Browser cleanup: {e}")
        self._pw = None
        self._browser = None
        self.context = None
        self.page = None
        self.linkedin = None


def save_session_interactively(state_file: Path, wait_for_user, timeout_ms: int = 120000) -> Path:
    """
    Open the login page in a headed browser for a manual login, then save
    the storage state once the feed is reached.

    `wait_for_user` blocks until the user says they are done (e.g. input()).
    """
    with BrowserSession(state_file=state_file, headless=False) as session:
        session.page.goto(LOGIN_URL)
        logger.info("Log in manually, then wait until you see the feed page.")
        wait_for_user()
        try:
            session.page.wait_for_url("**/feed/**", timeout=timeout_ms)
        except Exception as e:
            raise SessionInvalid(f"Feed page not reached: {e}") from e
        SessionStateManager.save_state(session.context, state_file)
    return state_file
