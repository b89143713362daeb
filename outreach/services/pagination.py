"""
Walks LinkedIn search result pages and feeds each new entry to a dispatcher.

Stops when the target is reached, when there is no usable Next button, or
after too many consecutive pages that produced nothing new.
"""
import logging
from typing import Optional

from outreach.config import settings
from outreach.errors import OutreachActionError, PageAdvanceTimeout
from outreach.models.profile import LogBucket, PaginationState, ProfileRecord, canonical_profile_url
from outreach.services.dedup_store import DedupIndex

logger = logging.getLogger("outreach")


class PaginationController:
    def __init__(
        self,
        linkedin,
        dispatcher,
        max_stagnant_pages: int = settings.max_stagnant_pages,
        settle_seconds: float = settings.page_settle_seconds,
        page_timeout_ms: int = settings.page_timeout_ms,
    ):
        self.linkedin = linkedin
        self.dispatcher = dispatcher
        self.max_stagnant_pages = max_stagnant_pages
        self.settle_seconds = settle_seconds
        self.page_timeout_ms = page_timeout_ms
        self.state = PaginationState()
        self.seen: set[str] = set()

    def collect(
        self,
        target: int,
        dedup_index: DedupIndex,
        failed_sink: Optional[list] = None,
    ) -> list[ProfileRecord]:
        """
        Collect up to `target` main-log records, in discovery order.

        Records whose outreach failed after the note was written are appended
        to `failed_sink` instead and do not count towards the target.
        """
        if failed_sink is None:
            failed_sink = []
        results: list[ProfileRecord] = []
        self.state = PaginationState()
        logger.info(f"Collecting up to {target} new results...")

        while self.state.collected_count < target:
            logger.info(f"Processing page {self.state.current_page}...")
            net_new = self._scan_page(target, dedup_index, results, failed_sink)

            if net_new == 0:
                self.state.consecutive_stagnant_pages += 1
                logger.info(
                    f"No new profiles on this page "
                    f"({self.state.consecutive_stagnant_pages}/{self.max_stagnant_pages})"
                )
                if self.state.consecutive_stagnant_pages >= self.max_stagnant_pages:
                    logger.info("Stopping: too many pages with no new profiles.")
                    break
            else:
                self.state.consecutive_stagnant_pages = 0

            if self.state.collected_count >= target:
                logger.info("Collected enough new results.")
                break

            if not self.linkedin.next_page_available():
                logger.info("Reached end of available search results.")
                break

            logger.info("Going to next page...")
            try:
                self.linkedin.go_to_next_page(self.settle_seconds, self.page_timeout_ms)
            except PageAdvanceTimeout as e:
                # Scanned as an empty page on the next iteration.
                logger.warning(str(e))
            self.state.current_page += 1

        return results

    def _scan_page(
        self,
        target: int,
        dedup_index: DedupIndex,
        results: list[ProfileRecord],
        failed_sink: list,
    ) -> int:
        """Process the current page's entries in DOM order. Returns net-new count."""
        net_new = 0
        processed = 0
        max_to_process = target - self.state.collected_count

        for link in self.linkedin.result_links():
            if processed >= max_to_process:
                break

            try:
                name, href = self.linkedin.read_result(link)
            except OutreachActionError as e:
                logger.warning(f"Skipping unreadable result: {e}")
                continue

            profile_url = canonical_profile_url(href)
            if not name or not profile_url:
                continue
            if profile_url in self.seen or dedup_index.contains(profile_url):
                continue

            record = self.dispatcher.dispatch(link, name, profile_url)
            if record is None:
                continue

            self.seen.add(profile_url)
            processed += 1

            bucket = record.bucket
            if bucket == LogBucket.MAIN:
                results.append(record)
                self.state.collected_count += 1
                net_new += 1
                logger.info(f"{self.state.collected_count}. {record.name}")
            elif bucket == LogBucket.FAILED_SEND:
                failed_sink.append(record)
                net_new += 1

        return net_new
