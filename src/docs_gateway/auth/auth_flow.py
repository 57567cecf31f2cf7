"""Implicit-grant OAuth flow for docs-gateway.

The flow opens the provider's authorize page in a browser surface and waits
for the front end to report the redirect URL back through
``complete_authorization``. The access token arrives in the URL fragment,
is verified against the token-info endpoint and stored with a 60 second
safety margin on its lifetime.

Only one authorization is in flight at a time. Callers that ask for headers
while the user is still looking at the consent page wait on the same
outcome instead of opening another window.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit

import httpx

from docs_gateway.auth.credential_store import CredentialStore
from docs_gateway.auth.models import AuthState
from docs_gateway.config import GatewayConfig
from docs_gateway.errors import (
    AuthCancelledError,
    AuthError,
    PermissionDeniedError,
)
from docs_gateway.surfaces import BrowserSurface

logger = logging.getLogger(__name__)

# Subtracted from expires_in to cover clock skew and in-flight requests
EXPIRY_MARGIN_SECONDS = 60
DEFAULT_EXPIRES_IN = 3600


class AuthFlow:
    """Produces authorization headers, running the OAuth flow when needed.

    Attributes:
        config: Gateway settings (client ID, endpoints, scopes).
        store: Credential record the flow reads and refreshes.
        surface: Browser surface used for the authorize page.
        state: Current AuthState.

    Example:
        ```python
        flow = AuthFlow(config, store, surface)

        # In the request path
        headers = await flow.get_headers()

        # In the front end, once the window reaches the redirect URL
        await flow.complete_authorization(redirect_url, window)
        ```
    """

    def __init__(
        self,
        config: GatewayConfig,
        store: CredentialStore,
        surface: BrowserSurface,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self.surface = surface
        self.state = AuthState.IDLE
        self._http_client = http_client
        self._pending: asyncio.Future[dict[str, str]] | None = None
        self._completing = False

    async def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0, connect=10.0))
        return self._http_client

    @property
    def is_pending(self) -> bool:
        """True while an authorization is waiting for the user."""
        return self._pending is not None and not self._pending.done()

    def authorization_url(self) -> str:
        """Build the authorize URL for an implicit-grant request.

        Returns:
            URL with client ID, redirect URI, scope, state and, if an account
            was used before, a login hint.
        """
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "token",
            "scope": self.config.scope,
            "state": self.config.auth_state,
        }
        last_email = self.store.get().last_email
        if last_email:
            params["login_hint"] = last_email
        return f"{self.config.authorize_url}?{urlencode(params)}"

    async def get_headers(self) -> dict[str, str]:
        """Get request headers, authorizing interactively if necessary.

        Returns:
            A copy of the stored headers.

        Raises:
            PermissionDeniedError: If the user did not grant the required scope.
            AuthCancelledError: If the authorization window was closed.
            AuthError: If the provider reported an error or the token is invalid.
        """
        credentials = self.store.get()
        if credentials.is_valid():
            return dict(credentials.headers or {})
        if credentials.headers and credentials.is_expired():
            self.store.drop_headers()

        if self.is_pending:
            logger.debug("Joining authorization already in progress")
        else:
            self._pending = self._start_authorization()

        # shield so one waiter being cancelled does not cancel the others
        return await asyncio.shield(self._pending)

    def _start_authorization(self) -> "asyncio.Future[dict[str, str]]":
        # For macOS, where opening a window doesn't bring it above progress windows
        self.surface.send_to_back()

        future: asyncio.Future[dict[str, str]] = asyncio.get_running_loop().create_future()
        url = self.authorization_url()
        self._pending = future
        self.state = AuthState.AWAITING_USER_GRANT
        logger.info("Opening authorization window")
        try:
            self.surface.open(url, on_close=self.cancel_authorization)
        except Exception:
            self._pending = None
            self.state = AuthState.IDLE
            raise
        return future

    async def complete_authorization(
        self, redirect_url: str, ui_handle: Any = None
    ) -> dict[str, str] | None:
        """Finish the authorization from the redirect URL.

        Args:
            redirect_url: URL the authorization window was redirected to.
            ui_handle: Window to close, as returned by the surface.

        Returns:
            The new headers, or None if the authorization failed and the
            failure was delivered to the waiting caller.

        Raises:
            AuthError: If the authorization failed and nobody is waiting for it.
        """
        # The future stays pending until verification ends so new callers join it.
        # Closing the window is ignored while _completing is set.
        future = self._pending
        self._completing = True
        try:
            if ui_handle is not None:
                self.surface.close(ui_handle)
            await self._accept_redirect(redirect_url)
        except AuthError as e:
            self.state = AuthState.REJECTED
            logger.info(f"Authorization failed: {e}")
            if future is None or future.done():
                raise
            future.set_exception(e)
            return None
        finally:
            self._completing = False
            if self._pending is future:
                self._pending = None

        headers = dict(self.store.get().headers or {})
        self.state = AuthState.RESOLVED
        logger.info("Authorization completed")
        if future is not None and not future.done():
            future.set_result(headers)
        return headers

    def cancel_authorization(self) -> None:
        """Reject the pending authorization because its window was closed."""
        if self._completing:
            return
        future, self._pending = self._pending, None
        if future is None or future.done():
            return
        self.state = AuthState.REJECTED
        logger.info("Authorization window closed before completing")
        future.set_exception(AuthCancelledError("Authorization was cancelled"))

    async def _accept_redirect(self, redirect_url: str) -> None:
        params = dict(parse_qsl(urlsplit(redirect_url).fragment, keep_blank_values=True))

        error = params.get("error")
        if error:
            if error == "access_denied":
                raise PermissionDeniedError("Permission to access documents not granted")
            raise AuthError(error)

        if self.config.required_scope not in params.get("scope", "").split():
            raise PermissionDeniedError("Permission to access documents not granted")

        access_token = params.get("access_token")
        if not access_token:
            raise AuthError("No access token in authorization response")

        token_info = await self._fetch_token_info(access_token)
        if token_info.get("aud") != self.config.client_id:
            raise AuthError("Access token invalid")

        try:
            expires_in = int(params.get("expires_in", DEFAULT_EXPIRES_IN))
        except ValueError:
            expires_in = DEFAULT_EXPIRES_IN
        expires_at = datetime.now(timezone.utc) + timedelta(
            seconds=expires_in - EXPIRY_MARGIN_SECONDS
        )

        self.store.set(
            {"Authorization": f"Bearer {access_token}"},
            token_info.get("email"),
            expires_at,
        )

    async def _fetch_token_info(self, access_token: str) -> dict[str, Any]:
        client = await self._get_http_client()
        try:
            response = await client.get(
                self.config.token_info_url, params={"access_token": access_token}
            )
            response.raise_for_status()
            result: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthError(f"Access token invalid: {e.response.text}") from e
        except (httpx.HTTPError, ValueError) as e:
            raise AuthError(f"Access token verification failed: {e}") from e
        return result

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
