from outreach.linkedin.automation import LinkedInAutomation
from outreach.linkedin.classifier import classify_relationship
from outreach.linkedin.session import SessionStateManager

__all__ = ["LinkedInAutomation", "SessionStateManager", "classify_relationship"]
