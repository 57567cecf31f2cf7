"""OAuth authorization for docs-gateway.

This package holds the persisted credential record and the implicit-grant
flow that refreshes it.

Quick Start:
    ```python
    from docs_gateway.auth import AuthFlow, CredentialStore

    store = CredentialStore()
    flow = AuthFlow(config, store, surface)

    headers = await flow.get_headers()
    ```
"""

from docs_gateway.auth.auth_flow import EXPIRY_MARGIN_SECONDS, AuthFlow
from docs_gateway.auth.credential_store import CredentialStore
from docs_gateway.auth.models import AuthState, Credentials, CredentialStatus

__all__ = [
    "AuthFlow",
    "AuthState",
    "CredentialStore",
    "Credentials",
    "CredentialStatus",
    "EXPIRY_MARGIN_SECONDS",
]
