"""
Core module for the order portal.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- session: Explicit per-browser authentication context
- api_client: REST client for the external portal API
"""

from .exceptions import (
    PortalError,
    ConfigurationError,
    ValidationError,
    SubmissionInProgressError,
    CollaboratorError,
    SessionExpiredError,
)
from .session import PortalSession
from .api_client import PortalAPIClient

__all__ = [
    "PortalError",
    "ConfigurationError",
    "ValidationError",
    "SubmissionInProgressError",
    "CollaboratorError",
    "SessionExpiredError",
    "PortalSession",
    "PortalAPIClient",
]
