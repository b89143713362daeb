"""
One campaign invocation: session, search, dedup, collect, persist.
"""
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from outreach.config import settings
from outreach.models.profile import OutreachOutcome, ProfileRecord
from outreach.services.dedup_store import append_records, extend_index, load_dedup_index
from outreach.services.dispatcher import OutreachDispatcher, PendingHarvester
from outreach.services.pagination import PaginationController

logger = logging.getLogger("outreach")


@dataclass
class CampaignPaths:
    results_dir: Path
    run_file: Path
    global_file: Optional[Path]
    failed_send_file: Path
    dedup_pattern: str

    @classmethod
    def from_settings(cls) -> "CampaignPaths":
        return cls(
            results_dir=settings.results_dir,
            run_file=settings.run_results_file(),
            global_file=settings.global_results_file(),
            failed_send_file=settings.failed_send_file(),
            dedup_pattern=settings.dedup_file_pattern,
        )

    def unscanned_logs(self) -> list[Path]:
        """Output logs that the directory scan with `dedup_pattern` would miss."""
        pattern = re.compile(self.dedup_pattern, re.IGNORECASE)
        results_dir = Path(self.results_dir).resolve()
        missed = []
        for path in (self.run_file, self.global_file, self.failed_send_file):
            if path is None or path in missed:
                continue
            path = Path(path)
            if path.resolve().parent == results_dir and pattern.match(path.name):
                continue
            missed.append(path)
        return missed


@dataclass
class CampaignSummary:
    query: str
    target: int
    known_profiles: int = 0
    history_files: int = 0
    pages_scanned: int = 0
    results: list[ProfileRecord] = field(default_factory=list)
    failed_sends: list[ProfileRecord] = field(default_factory=list)
    rows_written: int = 0
    failed_rows_written: int = 0

    @property
    def sent(self) -> int:
        return sum(1 for r in self.results if r.outreach_outcome == OutreachOutcome.SENT)

    @property
    def pending(self) -> int:
        return sum(1 for r in self.results if r.outreach_outcome == OutreachOutcome.SKIPPED_PENDING)

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "target": self.target,
            "known_profiles": self.known_profiles,
            "history_files": self.history_files,
            "pages_scanned": self.pages_scanned,
            "collected": len(self.results),
            "sent": self.sent,
            "pending": self.pending,
            "failed_sends": len(self.failed_sends),
            "rows_written": self.rows_written,
            "failed_rows_written": self.failed_rows_written,
            "profiles": [r.to_dict() for r in self.results],
            "failed_profiles": [r.to_dict() for r in self.failed_sends],
        }


class CampaignOrchestrator:
    """
    Wires session, dedup store, pagination and dispatcher for one run.

    `session` must expose login() and a `linkedin` automation object.
    """

    def __init__(
        self,
        session,
        paths: CampaignPaths,
        max_stagnant_pages: int = settings.max_stagnant_pages,
        note: Optional[str] = None,
        affordance_timeout_ms: int = settings.affordance_timeout_ms,
        cooldown_seconds: float = settings.send_cooldown_seconds,
        settle_seconds: float = settings.page_settle_seconds,
        page_timeout_ms: int = settings.page_timeout_ms,
    ):
        self.session = session
        self.paths = paths
        self.max_stagnant_pages = max_stagnant_pages
        self.note = note
        self.affordance_timeout_ms = affordance_timeout_ms
        self.cooldown_seconds = cooldown_seconds
        self.settle_seconds = settle_seconds
        self.page_timeout_ms = page_timeout_ms

    def _controller(self, dispatcher) -> PaginationController:
        return PaginationController(
            self.session.linkedin,
            dispatcher,
            max_stagnant_pages=self.max_stagnant_pages,
            settle_seconds=self.settle_seconds,
            page_timeout_ms=self.page_timeout_ms,
        )

    def _start(self, query: str) -> None:
        self.session.login()
        self.session.linkedin.search_people(
            query, network=settings.search_network, geo_urn=settings.search_geo_urn
        )

    def run(self, query: str, target: int) -> CampaignSummary:
        """Send invitations to up to `target` new profiles matching `query`."""
        summary = CampaignSummary(query=query, target=target)
        self._start(query)

        dedup_index, file_count = load_dedup_index(
            self.paths.results_dir, self.paths.dedup_pattern
        )
        file_count += extend_index(dedup_index, self.paths.unscanned_logs())
        summary.known_profiles = len(dedup_index)
        summary.history_files = file_count

        dispatcher = OutreachDispatcher(
            self.session.linkedin,
            note=self.note,
            affordance_timeout_ms=self.affordance_timeout_ms,
            cooldown_seconds=self.cooldown_seconds,
        )
        controller = self._controller(dispatcher)
        summary.results = controller.collect(target, dedup_index, summary.failed_sends)
        summary.pages_scanned = controller.state.current_page

        if summary.results:
            summary.rows_written = append_records(self.paths.run_file, summary.results)
            if self.paths.global_file and self.paths.global_file != self.paths.run_file:
                append_records(self.paths.global_file, summary.results)
        else:
            logger.info("No new profiles to save (all already recorded).")

        if summary.failed_sends:
            summary.failed_rows_written = append_records(
                self.paths.failed_send_file, summary.failed_sends
            )

        logger.info(
            f"Campaign '{query}' complete: {len(summary.results)} new, "
            f"{summary.sent} invited, {len(summary.failed_sends)} failed sends."
        )
        return summary

    def harvest_pending(self, query: str, target: int, pending_file: Path) -> CampaignSummary:
        """Record up to `target` profiles with a pending invite; no invitations are sent."""
        summary = CampaignSummary(query=query, target=target)
        self._start(query)

        dedup_index, file_count = load_dedup_index(
            pending_file.parent, f"^{re.escape(pending_file.name)}$"
        )
        summary.known_profiles = len(dedup_index)
        summary.history_files = file_count

        controller = self._controller(PendingHarvester(self.session.linkedin))
        summary.results = controller.collect(target, dedup_index)
        summary.pages_scanned = controller.state.current_page

        if summary.results:
            summary.rows_written = append_records(pending_file, summary.results)
        else:
            logger.info("No new pending profiles to save.")
        return summary
