import re

from outreach.config import settings

# ---------------------------------------------------------------------------
# Message Templates
# ---------------------------------------------------------------------------

CONNECTION_NOTE = (
    "Hi! I'm exploring my next remote contract role. I'm a Lead Full-Stack "
    "Engineer (Python + TypeScript) with 15+ years of experience at Shutterstock, "
    "Adidas, Pearson, and HP. I'd love to see if there's an opportunity on your team."
)

# The opening line of CONNECTION_NOTE; used to find conversations to follow up on.
FOLLOWUP_TARGET_SNIPPET = "Hi! I'm exploring my next remote contract role."

FOLLOWUP_TEMPLATE = (
    "Thanks for connecting, {first_name}! Quick question: is your team hiring "
    "remote contract engineers right now? I'm a Lead Full-Stack (Python + TypeScript). "
    "If not you, who's the best person to talk to?"
)

_WHITESPACE = re.compile(r"\s+")
_NAME_SEPARATORS = re.compile(r"[\s,]+")


def build_connection_note(note: str = CONNECTION_NOTE) -> str:
    """Connection notes are capped at 300 characters by LinkedIn."""
    limit = settings.connection_note_max_chars
    if len(note) > limit:
        note = note[: limit - 3] + "..."
    return note


def extract_first_name(full_name: str) -> str:
    """First whitespace/comma token, keeping only letters, apostrophes and hyphens."""
    cleaned = _WHITESPACE.sub(" ", full_name or "").strip()
    if not cleaned:
        return ""

    parts = [p for p in _NAME_SEPARATORS.split(cleaned) if p]
    if not parts:
        return ""

    return "".join(ch for ch in parts[0] if ch.isalpha() or ch in "'-")


def build_followup_message(full_name: str, template: str = FOLLOWUP_TEMPLATE) -> str:
    """Second-touch message addressed by first name."""
    return template.format(first_name=extract_first_name(full_name) or "there")
