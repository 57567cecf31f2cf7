"""Exceptions raised by docs-gateway.

All exceptions inherit from GatewayError. HandledError marks failures the
user has already been shown a dialog for; callers should abort without
reporting them again.
"""

from enum import Enum
from typing import Any


class GatewayError(Exception):
    """Base exception for all docs-gateway errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class HandledReason(str, Enum):
    """Why a HandledError was raised."""

    PERMISSION_NOT_GRANTED = "permission_not_granted"
    WRONG_ACCOUNT = "wrong_account"
    DOCUMENT_LOCKED = "document_locked"


class HandledError(GatewayError):
    """Raised after the failure has been surfaced to the user.

    Attributes:
        reason: Which dialog the user was shown.
    """

    def __init__(self, reason: HandledReason) -> None:
        self.reason = reason
        super().__init__(f"Handled error: {reason.value}")


class AuthError(GatewayError):
    """Raised when authorization fails."""


class PermissionDeniedError(AuthError):
    """Raised when the user did not grant the required scope."""


class AuthCancelledError(AuthError):
    """Raised when the authorization window is closed before completing."""


class AuthExpiredError(AuthError):
    """Raised when the remote API rejects stored credentials."""


class RemoteOperationError(GatewayError):
    """Raised when the dispatcher reports a failed operation.

    Attributes:
        stack: Server-side stack trace elements.
        error_type: Classification built from the server's error category.
    """

    def __init__(
        self,
        message: str,
        stack: list[dict[str, Any]] | None = None,
        error_type: str | None = None,
    ) -> None:
        self.stack = stack or []
        self.error_type = error_type
        super().__init__(message)


class LockError(GatewayError):
    """Another editing session holds a lock on the document."""


class AccessError(GatewayError):
    """The authorized account cannot access the document."""


class NonFatalWarning(GatewayError):
    """Server-reported error that does not stop the operation. Logged only."""


class TransportError(GatewayError):
    """Raised when an HTTP request fails.

    Attributes:
        status: HTTP status code, 0 if no response was received.
        body: Response body text.
    """

    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(f"{status}: request failed.\n\n{body}")
