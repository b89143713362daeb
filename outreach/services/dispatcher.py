"""
Per-profile outreach: classify the search entry, then connect with a note.

    Discovered -> Classified -> SkippedPending | SkippedFollowing | ActionAttempted
    ActionAttempted -> note opened -> message written -> send clicked -> Sent
                     | aborted at any step

A failed attempt is classified by how far it got: once the note has been
written the profile is routed to the failed-send log, before that it is
recorded like an ordinary skip.
"""
import logging
from typing import Any, Optional

from outreach.config import settings
from outreach.errors import OutreachActionError
from outreach.linkedin.classifier import classify_relationship
from outreach.models.profile import (
    OutreachAttempt,
    OutreachOutcome,
    ProfileRecord,
    RelationshipState,
)
from outreach.services.message_service import build_connection_note

logger = logging.getLogger("outreach")


class OutreachDispatcher:
    """Runs the connect-with-note sequence for one search entry at a time."""

    def __init__(
        self,
        linkedin,
        note: Optional[str] = None,
        affordance_timeout_ms: int = settings.affordance_timeout_ms,
        cooldown_seconds: float = settings.send_cooldown_seconds,
    ):
        self.linkedin = linkedin
        self.note = build_connection_note(note) if note else build_connection_note()
        self.affordance_timeout_ms = affordance_timeout_ms
        self.cooldown_seconds = cooldown_seconds

    def dispatch(self, link: Any, name: str, profile_url: str) -> ProfileRecord:
        """Classify and act on one entry. Always returns a record."""
        button_text = self.linkedin.relationship_text(link)
        logger.debug(f"Relationship button text for {name}: {button_text or 'Not found'}")

        state = classify_relationship(button_text)
        record = ProfileRecord(name=name, profile_url=profile_url, relationship_state=state)

        if state == RelationshipState.FOLLOWING:
            logger.info(f"Skipping follow-only profile {name} (not saved anywhere)")
            record.outreach_outcome = OutreachOutcome.SKIPPED_FOLLOWING
        elif state == RelationshipState.PENDING:
            logger.info(f"Skipping pending profile {name} (no new invite)")
            record.outreach_outcome = OutreachOutcome.SKIPPED_PENDING
        elif state == RelationshipState.ALREADY_CONNECTED_OR_UNKNOWN:
            record.outreach_outcome = OutreachOutcome.NOT_ATTEMPTED
        else:
            record.outreach_outcome = self._connect_with_note(link, name)

        return record

    def _connect_with_note(self, link: Any, name: str) -> OutreachOutcome:
        if not self.linkedin.click_relationship_control(link):
            logger.info(f"Relationship button for {name} could not be clicked.")
            return OutreachOutcome.FAILED_BEFORE_ACTION

        attempt = OutreachAttempt()
        try:
            self.linkedin.open_note_dialog(self.affordance_timeout_ms)
            self.linkedin.fill_note(self.note, self.affordance_timeout_ms)
            attempt.message_written = True
            self.linkedin.send_invitation(self.affordance_timeout_ms)
            attempt.send_clicked = True
            logger.info(f"Invitation sent to {name}.")
            self.linkedin.pause(self.cooldown_seconds)
        except OutreachActionError as e:
            logger.warning(f"Invite flow for {name} failed: {e}")
        finally:
            # A stuck modal would block the next profile and the Next button.
            self.linkedin.close_invite_dialog()

        if attempt.send_clicked:
            return OutreachOutcome.SENT
        if attempt.message_written:
            logger.warning(f"Message written but not sent for {name}; routing to failed-send log.")
            return OutreachOutcome.FAILED_AFTER_MESSAGE_WRITTEN
        return OutreachOutcome.FAILED_BEFORE_ACTION


class PendingHarvester:
    """Collects profiles that already have a pending invite; takes no action."""

    def __init__(self, linkedin):
        self.linkedin = linkedin

    def dispatch(self, link: Any, name: str, profile_url: str) -> Optional[ProfileRecord]:
        state = classify_relationship(self.linkedin.relationship_text(link))
        if state != RelationshipState.PENDING:
            return None
        logger.info(f"Pending: {name}")
        return ProfileRecord(
            name=name,
            profile_url=profile_url,
            relationship_state=state,
            outreach_outcome=OutreachOutcome.SKIPPED_PENDING,
        )
