"""
Error taxonomy for outreach runs.

Only SessionInvalid aborts a whole run. Everything under OutreachActionError
is contained per profile or per page and turned into an outcome.
"""


class OutreachError(Exception):
    """Base class for all outreach errors."""


class SessionInvalid(OutreachError):
    """Login failed or LinkedIn demanded verification. Fatal."""


class OutreachActionError(OutreachError):
    """A browser action on a single profile or page did not complete."""


class ActionAffordanceTimeout(OutreachActionError):
    """A required UI element never became visible within its bound."""

    def __init__(self, affordance: str, timeout_ms: int):
        super().__init__(f"'{affordance}' not visible after {timeout_ms}ms")
        self.affordance = affordance
        self.timeout_ms = timeout_ms


class PageAdvanceTimeout(OutreachActionError):
    """The next search page never rendered its result markers."""


class LogParseError(OutreachError):
    """A historical result log could not be read or parsed."""
