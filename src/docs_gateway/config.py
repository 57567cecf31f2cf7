"""Configuration for docs-gateway.

Every field can be overridden with a ``DOCS_GATEWAY_<FIELD>`` environment
variable, e.g. ``DOCS_GATEWAY_CLIENT_ID``.

Environment Variables:
    DOCS_GATEWAY_CLIENT_ID: OAuth client ID (required for authorization)
    DOCS_GATEWAY_REDIRECT_URI: Redirect URI registered for the client
    DOCS_GATEWAY_API_URL: Generic dispatcher endpoint
    DOCS_GATEWAY_DEV_MODE: "1"/"true" to send devMode=true to the dispatcher
    DOCS_GATEWAY_CREDENTIALS_PATH: Where the credential record is persisted
"""

import os
from pathlib import Path

from pydantic import BaseModel, Field

ENV_PREFIX = "DOCS_GATEWAY_"

# Google OAuth endpoints
DEFAULT_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
DEFAULT_TOKEN_INFO_URL = "https://www.googleapis.com/oauth2/v3/tokeninfo"
DEFAULT_DOCS_API_BASE = "https://docs.googleapis.com/v1"

DOCUMENTS_SCOPE = "https://www.googleapis.com/auth/documents"
DEFAULT_SCOPE = f"{DOCUMENTS_SCOPE} email"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"
DEFAULT_AUTH_STATE = "google-docs-auth-callback"
DEFAULT_HELP_URL = "https://www.zotero.org/support/google_docs#authorization"


def get_credentials_path() -> Path:
    """Get the project-level credential record path.

    Returns:
        Path to credentials.json in ./.docs-gateway/
    """
    return Path.cwd() / ".docs-gateway" / "credentials.json"


class GatewayConfig(BaseModel):
    """Settings shared by the authorization flow and the request gateway."""

    client_id: str = Field(default="", description="OAuth client ID")
    redirect_uri: str = Field(default=DEFAULT_REDIRECT_URI, description="OAuth redirect URI")
    authorize_url: str = Field(default=DEFAULT_AUTHORIZE_URL)
    token_info_url: str = Field(default=DEFAULT_TOKEN_INFO_URL)
    api_url: str = Field(default="", description="Generic dispatcher endpoint")
    docs_api_base: str = Field(default=DEFAULT_DOCS_API_BASE)
    scope: str = Field(default=DEFAULT_SCOPE, description="Scopes requested at authorization")
    required_scope: str = Field(
        default=DOCUMENTS_SCOPE, description="Scope that must be granted for access"
    )
    auth_state: str = Field(default=DEFAULT_AUTH_STATE)
    api_version: int = Field(default=6, description="Dispatcher API version")
    dev_mode: bool = Field(default=False)
    client_name: str = Field(default="Docs Gateway", description="Title shown in dialogs")
    help_url: str = Field(default=DEFAULT_HELP_URL)
    credentials_path: Path = Field(default_factory=get_credentials_path)

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "GatewayConfig":
        """Build a config from ``DOCS_GATEWAY_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            GatewayConfig with every variable that is set applied.
        """
        if environ is None:
            environ = dict(os.environ)

        values = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw
        # pydantic coerces "6" -> 6, "true"/"1" -> True, str -> Path
        return cls.model_validate(values)
