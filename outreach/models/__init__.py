from outreach.models.profile import (
    Conversation,
    LogBucket,
    OutreachAttempt,
    OutreachOutcome,
    PaginationState,
    ProfileRecord,
    RelationshipState,
    canonical_profile_url,
)

__all__ = [
    "Conversation",
    "LogBucket",
    "OutreachAttempt",
    "OutreachOutcome",
    "PaginationState",
    "ProfileRecord",
    "RelationshipState",
    "canonical_profile_url",
]
