"""Credential models for docs-gateway."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class CredentialStatus(str, Enum):
    """State of the persisted credential record."""

    MISSING = "missing"
    EXPIRED = "expired"
    VALID = "valid"
    INVALID = "invalid"


class AuthState(str, Enum):
    """Lifecycle of an interactive authorization."""

    IDLE = "idle"
    AWAITING_USER_GRANT = "awaiting_user_grant"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class Credentials(BaseModel):
    """The single credential record shared by every call.

    Attributes:
        headers: Request headers carrying the bearer token.
        last_email: Account used for the last authorization, sent as login hint.
        expires_at: When the token stops being usable (UTC).
    """

    headers: dict[str, str] | None = Field(default=None)
    last_email: str | None = Field(default=None)
    expires_at: datetime | None = Field(default=None)

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token has reached its expiry time.

        Args:
            now: Reference time. Defaults to the current UTC time.

        Returns:
            True if expires_at is set and not in the future.
        """
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at <= now

    def is_valid(self, now: datetime | None = None) -> bool:
        """Headers are present and not expired."""
        return bool(self.headers) and not self.is_expired(now)
