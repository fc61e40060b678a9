"""
Custom exceptions for the order portal.

Exception Hierarchy:
    PortalError (base)
    ├── ConfigurationError        - Invalid startup configuration (startup failure)
    ├── ValidationError           - User-correctable input problem (runtime, local)
    ├── SubmissionInProgressError - Re-entrant order submission (runtime, local)
    └── CollaboratorError         - Portal API call failed (runtime, graceful)
        └── SessionExpiredError   - Token refresh failed, session torn down

Usage:
    Startup errors (ConfigurationError) cause the app to fail fast.
    ValidationError never reaches the API - it is recovered in the view.
    CollaboratorError is surfaced as a dismissible message; the session survives.
"""

from typing import Optional, Dict, Any


class PortalError(Exception):
    """
    Base exception for all order portal errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# STARTUP ERRORS - Application will not start if these occur
# =============================================================================

class ConfigurationError(PortalError):
    """
    A required configuration value is missing or malformed.

    Typical causes:
    - PORTAL_API_BASE_URL not set or not an http(s) URL
    - PORTAL_API_TIMEOUT not a positive number
    """

    def __init__(self, setting: str, reason: str):
        message = f"Invalid configuration for {setting}: {reason}"
        details = {
            "setting": setting,
            "resolution": f"Check {setting} in .env or the process environment"
        }
        super().__init__(message, details)
        self.setting = setting


# =============================================================================
# LOCAL ERRORS - Recovered in the view, never reach the API
# =============================================================================

class ValidationError(PortalError):
    """
    User input failed validation.

    Carries the name of the offending field so the presentation layer can
    show the message next to it ("po_number", "items", "color", ...).
    """

    def __init__(self, field: str, message: str):
        super().__init__(message, {"field": field})
        self.field = field


class SubmissionInProgressError(PortalError):
    """An order submission is already running for this workspace."""

    def __init__(self, message: str = "An order submission is already in progress"):
        super().__init__(message)


# =============================================================================
# RUNTIME ERRORS - Operation fails gracefully, session continues
# =============================================================================

class CollaboratorError(PortalError):
    """
    The portal API rejected a request or could not be reached.

    status_code is the HTTP status returned by the API, or 0 when the
    request never produced a response (connection refused, timeout).
    """

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        error_details["status_code"] = status_code
        if operation:
            error_details["operation"] = operation
        super().__init__(message, error_details)
        self.status_code = status_code
        self.operation = operation


class SessionExpiredError(CollaboratorError):
    """
    The access token was rejected and could not be refreshed.

    The portal session has already been torn down when this is raised;
    the user must log in again.
    """

    def __init__(self, operation: Optional[str] = None):
        super().__init__("Session expired", status_code=401, operation=operation)
