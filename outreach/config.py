import logging
import os
from datetime import date, datetime
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


class Settings:
    """Application settings loaded from environment variables."""

    # --- Paths ---
    base_dir: Path = Path(__file__).resolve().parent.parent
    logs_dir: Path = base_dir / "logs"
    results_dir: Path = Path(os.getenv("LINKEDIN_RESULTS_DIR") or base_dir).resolve()
    storage_state_file: Path = Path(os.getenv("LINKEDIN_STATE_PATH") or "linkedin-state.json").resolve()
    run_file_override: str = os.getenv("LINKEDIN_RUN_FILE", "")
    failed_send_file_override: str = os.getenv("LINKEDIN_CONNECT_WITH_EMAIL_FILE", "")
    global_results_name: str = "linkedin-global-results.csv"
    pending_results_name: str = "linkedin-pending-results.csv"
    dedup_file_pattern: str = r"^linkedin-(results|connect-with-email|global-results).*\.csv$"

    # --- Credentials ---
    linkedin_email: str = os.getenv("LINKEDIN_EMAIL", "")
    linkedin_password: str = os.getenv("LINKEDIN_PASSWORD", "")

    # --- Browser ---
    headless: bool = os.getenv("PLAYWRIGHT_HEADLESS", "false").lower() == "true"
    slow_mo: int = int(os.getenv("PLAYWRIGHT_SLOW_MO", "100"))

    # --- Search ---
    default_query: str = os.getenv("LINKEDIN_SEARCH_QUERY", "cto")
    search_network: str = os.getenv("LINKEDIN_SEARCH_NETWORK", "S")
    search_geo_urn: str = os.getenv("LINKEDIN_SEARCH_GEO_URN", "103644278")

    # --- Campaign limits ---
    max_results: int = int(os.getenv("LINKEDIN_MAX_RESULTS", "130"))
    max_stagnant_pages: int = int(os.getenv("LINKEDIN_MAX_EMPTY_PAGES", "5"))

    # --- Fixed waits (LinkedIn UI) ---
    affordance_timeout_ms: int = 5000
    page_timeout_ms: int = 10000
    page_settle_seconds: float = 2.0
    send_cooldown_seconds: float = 10.0
    connection_note_max_chars: int = 300

    # --- Inbox follow-up ---
    max_scroll_passes: int = int(os.getenv("LINKEDIN_SCROLL_PASSES", "15"))
    max_send_messages: int = int(os.getenv("LINKEDIN_MAX_SEND_MESSAGES", "1"))

    # --- Control API ---
    api_host: str = os.getenv("OUTREACH_API_HOST", "127.0.0.1")
    api_port: int = int(os.getenv("OUTREACH_API_PORT", "8000"))

    def run_results_file(self, today: date = None) -> Path:
        """Per-run snapshot log; its name matches the dedup pattern."""
        if self.run_file_override:
            return Path(self.run_file_override).resolve()
        today = today or date.today()
        return self.results_dir / f"linkedin-results-{today.isoformat()}.csv"

    def global_results_file(self) -> Path:
        return self.results_dir / self.global_results_name

    def failed_send_file(self) -> Path:
        if self.failed_send_file_override:
            return Path(self.failed_send_file_override).resolve()
        return self.results_dir / "linkedin-connect-with-email.csv"

    def pending_results_file(self) -> Path:
        return self.results_dir / self.pending_results_name

    def validate(self):
        if self.max_results < 1:
            raise EnvironmentError("LINKEDIN_MAX_RESULTS must be at least 1")
        if self.max_stagnant_pages < 1:
            raise EnvironmentError("LINKEDIN_MAX_EMPTY_PAGES must be at least 1")


settings = Settings()


def setup_logging(logs_dir: Path = None) -> logging.Logger:
    """
    Configure dual logging: console (INFO) and daily log file (DEBUG).
    """
    logs_dir = logs_dir or settings.logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_filename = logs_dir / f"outreach_{datetime.now().strftime('%Y-%m-%d')}.log"

    logger = logging.getLogger("outreach")
    logger.setLevel(logging.DEBUG)

    # Avoid adding duplicate handlers on re-runs
    if logger.handlers:
        return logger

    formatter = logging.Formatter("%(asctime)s | %(levelname)-8s | %(message)s")

    # File handler: captures everything (DEBUG and above)
    fh = logging.FileHandler(log_filename, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    # Console handler: user-facing output (INFO and above)
    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)
    return logger
