from dataclasses import dataclass
from enum import Enum

LINKEDIN_ORIGIN = "https://www.linkedin.com"


class RelationshipState(str, Enum):
    UNCONNECTED = "unconnected"
    PENDING = "pending"
    FOLLOWING = "following"
    ALREADY_CONNECTED_OR_UNKNOWN = "already_connected_or_unknown"


class OutreachOutcome(str, Enum):
    NOT_ATTEMPTED = "not_attempted"
    SKIPPED_PENDING = "skipped_pending"
    SKIPPED_FOLLOWING = "skipped_following"
    SENT = "sent"
    FAILED_AFTER_MESSAGE_WRITTEN = "failed_after_message_written"
    FAILED_BEFORE_ACTION = "failed_before_action"


class LogBucket(str, Enum):
    MAIN = "main"
    FAILED_SEND = "failed_send"
    NONE = "none"


def canonical_profile_url(href: str) -> str:
    """Absolute hrefs are kept as-is; relative ones get the LinkedIn origin."""
    if not href:
        return ""
    if href.startswith("http"):
        return href
    return f"{LINKEDIN_ORIGIN}{href}"


@dataclass
class ProfileRecord:
    """One profile discovered on a search results page. Keyed by profile_url."""

    name: str
    profile_url: str
    relationship_state: RelationshipState = RelationshipState.ALREADY_CONNECTED_OR_UNKNOWN
    outreach_outcome: OutreachOutcome = OutreachOutcome.NOT_ATTEMPTED

    @property
    def bucket(self) -> LogBucket:
        if self.outreach_outcome == OutreachOutcome.SKIPPED_FOLLOWING:
            return LogBucket.NONE
        if self.outreach_outcome == OutreachOutcome.FAILED_AFTER_MESSAGE_WRITTEN:
            return LogBucket.FAILED_SEND
        return LogBucket.MAIN

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "profile_url": self.profile_url,
            "relationship_state": self.relationship_state.value,
            "outreach_outcome": self.outreach_outcome.value,
        }


@dataclass
class OutreachAttempt:
    """Transient per-profile progress through the connect-with-note sequence."""

    message_written: bool = False
    send_clicked: bool = False


@dataclass
class PaginationState:
    current_page: int = 1
    collected_count: int = 0
    consecutive_stagnant_pages: int = 0


@dataclass
class Conversation:
    """An inbox conversation whose latest snippet matched the opening line."""

    id: str
    name: str
    message: str
    dom_id: str = ""
