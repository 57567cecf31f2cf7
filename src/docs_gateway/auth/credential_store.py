"""Persisted credential record for docs-gateway.

Storage Location: ./.docs-gateway/credentials.json (or DOCS_GATEWAY_CREDENTIALS_PATH)

The file holds a single record: the bearer headers, the last account used
and the expiry time. It is written with owner-only permissions. Nothing
else is persisted.
"""

import json
import logging
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from docs_gateway.auth.models import CredentialStatus, Credentials
from docs_gateway.config import get_credentials_path

logger = logging.getLogger(__name__)


class CredentialStore:
    """JSON-backed store for the process-wide credential record.

    The record is cached in memory and written through on every change.
    There is no locking here; AuthFlow serialises refreshes.

    Attributes:
        path: Path to the credentials.json file.

    Example:
        ```python
        store = CredentialStore()
        store.set({"Authorization": "Bearer abc"}, "me@example.com", expires_at)

        if store.get().is_valid():
            headers = store.get().headers
        ```
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the store.

        Args:
            path: Custom path for credentials.json.
                Defaults to ./.docs-gateway/credentials.json.
        """
        self.path = path or get_credentials_path()
        self._credentials: Credentials | None = None

    def _ensure_dir(self) -> None:
        """Create the credentials directory with secure permissions if needed."""
        directory = self.path.parent
        if not directory.exists():
            directory.mkdir(parents=True, mode=0o700)
        else:
            directory.chmod(0o700)

    def _read_raw(self) -> dict | None:
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError):
            return None

    def _load(self) -> Credentials:
        raw = self._read_raw()
        if raw is None:
            return Credentials()
        try:
            return Credentials.model_validate(raw)
        except ValidationError:
            logger.warning(f"Ignoring unreadable credential record at {self.path}")
            return Credentials()

    def _save(self, credentials: Credentials) -> None:
        self._ensure_dir()
        with open(self.path, "w") as f:
            f.write(credentials.model_dump_json(indent=2))
        # Owner read/write only (600)
        self.path.chmod(0o600)
        self._credentials = credentials

    def get(self) -> Credentials:
        """Return the current record, or an empty one.

        Returns:
            A copy of the stored Credentials.
        """
        if self._credentials is None:
            self._credentials = self._load()
        return self._credentials.model_copy(deep=True)

    def set(
        self,
        headers: dict[str, str],
        account: str | None,
        expires_at: datetime | None,
    ) -> None:
        """Replace the record.

        Args:
            headers: Request headers carrying the bearer token.
            account: Account the token was issued for.
            expires_at: When the token should stop being used.
        """
        self._save(Credentials(headers=headers, last_email=account, expires_at=expires_at))

    def clear(self) -> None:
        """Forget the headers and the last-used account."""
        credentials = self.get()
        credentials.headers = None
        credentials.last_email = None
        self._save(credentials)

    def drop_headers(self) -> None:
        """Forget only the headers, keeping the account as a login hint."""
        credentials = self.get()
        if credentials.headers is None:
            return
        credentials.headers = None
        self._save(credentials)

    def get_status(self) -> CredentialStatus:
        """Get the status of the persisted record.

        Returns:
            CredentialStatus describing the record on disk.
        """
        raw = self._read_raw()
        if raw is None:
            return CredentialStatus.INVALID if self.path.exists() else CredentialStatus.MISSING
        try:
            credentials = Credentials.model_validate(raw)
        except ValidationError:
            return CredentialStatus.INVALID
        if not credentials.headers:
            return CredentialStatus.MISSING
        if credentials.is_expired():
            return CredentialStatus.EXPIRED
        return CredentialStatus.VALID
