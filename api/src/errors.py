"""
Error taxonomy shared by the services and the HTTP layer.

Every error carries an HTTP status code and an optional ``details`` payload.
For remote failures ``details`` is the upstream body, so callers can
cross-reference the platform's own error codes.
"""

from typing import Any, Optional


class DrivBotsError(Exception):
    """Base class for all service errors"""

    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(DrivBotsError):
    """Required configuration is missing or invalid"""


class ValidationError(DrivBotsError):
    """Malformed or missing input. Never reaches a remote call."""

    status_code = 400


class DuplicateBotNameError(ValidationError):
    status_code = 409


class InvalidCredentials(ValidationError):
    """Exchange API key/secret failed every validation tier"""


class AuthorizationError(DrivBotsError):
    # Rendered like a missing record so ownership does not leak existence
    status_code = 404


class NotFoundError(DrivBotsError):
    status_code = 404


class PreconditionError(DrivBotsError):
    """A lifecycle guard failed, e.g. pausing a bot that is not running"""

    status_code = 400


class RemoteError(DrivBotsError):
    """Base class for failures of an outbound call"""

    status_code = 502


class RemoteRejected(RemoteError):
    """The remote side answered with a 4xx/5xx. Not transient, never retried."""

    def __init__(self, upstream_status: int, body: Any = None, path: Optional[str] = None):
        message = f"Remote platform rejected the request with status {upstream_status}"
        if path:
            message = f"{message} ({path})"
        super().__init__(message, details=body)
        self.upstream_status = upstream_status
        self.body = body
        self.path = path


class RemoteUnreachable(RemoteError):
    """Timeout or network failure. Plausibly transient."""

    status_code = 504

    def __init__(self, cause: Any, path: Optional[str] = None):
        message = "Remote platform is unreachable"
        if path:
            message = f"{message} ({path})"
        super().__init__(message, details=str(cause) or type(cause).__name__)
        self.cause = cause
        self.path = path


class StorageError(DrivBotsError):
    """The repository failed to read or write"""
