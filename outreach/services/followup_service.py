"""
Second-touch messages for inbox conversations that still show our opening line.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterator

from outreach.config import settings
from outreach.errors import OutreachActionError
from outreach.models.profile import Conversation
from outreach.services.message_service import (
    FOLLOWUP_TARGET_SNIPPET,
    FOLLOWUP_TEMPLATE,
    build_followup_message,
)

logger = logging.getLogger("outreach")

LIST_SETTLE_SECONDS = 1.2


def iter_matching_conversations(
    linkedin,
    target_snippet: str = FOLLOWUP_TARGET_SNIPPET,
    max_passes: int = settings.max_scroll_passes,
    template: str = FOLLOWUP_TEMPLATE,
) -> Iterator[Conversation]:
    """
    Yield each newly discovered conversation whose latest snippet contains
    `target_snippet`.

    Every pull runs one pass over the loaded list, then asks for more
    conversations ("Load more" / scrolling). Ends after two passes in a row
    without a new match, or after `max_passes`.
    """
    seen_ids: set[str] = set()
    idle_passes = 0

    for _ in range(max_passes):
        added_this_pass = 0
        for convo in linkedin.visible_conversations(target_snippet):
            convo_id = convo.get("id") or f"{convo['name']}-{convo.get('snippet', '')}"
            if convo_id in seen_ids:
                continue
            seen_ids.add(convo_id)
            added_this_pass += 1
            yield Conversation(
                id=convo_id,
                name=convo["name"],
                message=build_followup_message(convo["name"], template),
                dom_id=convo.get("id") or "",
            )

        if added_this_pass == 0:
            idle_passes += 1
        else:
            idle_passes = 0

        if idle_passes >= 2:
            break

        clicked_load_more = linkedin.load_more_conversations()
        scrolled = linkedin.scroll_conversation_list()
        if clicked_load_more or scrolled:
            linkedin.pause(LIST_SETTLE_SECONDS)


@dataclass
class FollowUpSummary:
    matched: int = 0
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"matched": self.matched, "sent": self.sent, "failed": self.failed}


class FollowUpScanner:
    """Drafts and sends the follow-up for each matching conversation."""

    def __init__(
        self,
        session,
        max_send: int = settings.max_send_messages,
        max_passes: int = settings.max_scroll_passes,
        target_snippet: str = FOLLOWUP_TARGET_SNIPPET,
        cooldown_seconds: float = settings.send_cooldown_seconds,
    ):
        self.session = session
        self.max_send = max_send
        self.max_passes = max_passes
        self.target_snippet = target_snippet
        self.cooldown_seconds = cooldown_seconds

    def run(self) -> FollowUpSummary:
        summary = FollowUpSummary()
        self.session.login()
        linkedin = self.session.linkedin
        linkedin.open_inbox()

        for match in iter_matching_conversations(linkedin, self.target_snippet, self.max_passes):
            summary.matched += 1
            logger.info(f"Found a conversation with {match.name}. Drafting reply...")
            try:
                linkedin.open_conversation(match.dom_id, match.name)
                linkedin.draft_message(match.message)
            except OutreachActionError as e:
                logger.warning(f"Could not draft follow-up for {match.name}: {e}")
                summary.failed.append(match.name)
                continue

            if linkedin.click_send_if_available():
                logger.info(f"Follow-up sent to {match.name}.")
            else:
                logger.info(f"Follow-up drafted for {match.name} (send button not available).")
            summary.sent.append(match.name)
            linkedin.pause(self.cooldown_seconds)

            if len(summary.sent) >= self.max_send:
                logger.info(f"Reached max sends ({self.max_send}), stopping.")
                break

        if summary.matched == 0:
            logger.warning("No conversations found with the target snippet.")
        return summary
