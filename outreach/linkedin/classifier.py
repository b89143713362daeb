"""
Relationship classifier for search result entries.

Works on the text of the entry's relationship-building button
("Connect", "Pending", "Follow", "Message", ...). The browser layer hands
over an empty string when the button or its container is missing.
"""
from typing import Optional

from outreach.models.profile import RelationshipState


def classify_relationship(button_text: Optional[str]) -> RelationshipState:
    """
    Map relationship button text to a RelationshipState.

    First match wins: "pending", then "follow", then no text at all,
    otherwise the profile is treated as connectable.
    """
    text = (button_text or "").strip().lower()

    if "pending" in text:
        return RelationshipState.PENDING
    if "follow" in text:
        return RelationshipState.FOLLOWING
    if not text:
        return RelationshipState.ALREADY_CONNECTED_OR_UNKNOWN
    return RelationshipState.UNCONNECTED
