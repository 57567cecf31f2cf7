"""Request gateway for the generic document dispatcher.

Sends RPC envelopes to the dispatcher endpoint with fresh authorization
headers and turns the server's failure reports into exceptions or
interactive recovery:

- a stale token is dropped and the call is retried once,
- a locked document can be force-unlocked by the user and the call replayed,
- an access error clears the credentials and tells the user,
- a non-fatal error is logged and the call result is still returned.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from docs_gateway.auth import AuthFlow, CredentialStore
from docs_gateway.config import GatewayConfig
from docs_gateway.errors import (
    AccessError,
    AuthExpiredError,
    HandledError,
    HandledReason,
    LockError,
    NonFatalWarning,
    PermissionDeniedError,
    RemoteOperationError,
    TransportError,
)
from docs_gateway.gateway.envelope import RPCRequest, RPCResponseEnvelope
from docs_gateway.gateway.prompts import GatewayPrompts

logger = logging.getLogger(__name__)

# Sent by the dispatcher when it rejects a token that has not expired yet
AUTHORIZATION_REQUIRED = "Authorization is required to perform that action."
UNLOCK_METHOD = "unlockTheDoc"


class RequestGateway:
    """Dispatches remote calls and recovers from the failures it can.

    Attributes:
        config: Gateway settings.
        auth: Authorization flow producing request headers.
        store: Credential record, cleared on access errors.
        prompts: Dialogs shown for recoverable failures.

    Example:
        ```python
        gateway = RequestGateway(config, auth, store, prompts)
        fields = await gateway.call({"documentId": doc_id}, "getFields", [])
        ```
    """

    def __init__(
        self,
        config: GatewayConfig,
        auth: AuthFlow,
        store: CredentialStore,
        prompts: GatewayPrompts,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.auth = auth
        self.store = store
        self.prompts = prompts
        self._http_client = http_client

    async def get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(None))
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def get_auth_headers(self, ui_context: Any = None) -> dict[str, str]:
        """Get authorization headers, telling the user if permission was refused.

        Raises:
            HandledError: If the user did not grant the required permission.
        """
        try:
            return await self.auth.get_headers()
        except PermissionDeniedError as e:
            await self.prompts.show_permissions_not_granted(ui_context)
            raise HandledError(HandledReason.PERMISSION_NOT_GRANTED) from e

    async def call(
        self,
        document_specifier: Any,
        method: str,
        args: Any = None,
        ui_context: Any = None,
    ) -> Any:
        """Run a remote method through the dispatcher.

        Args:
            document_specifier: Document (and tab) the method runs against.
            method: Remote method name.
            args: Positional arguments. Anything that is not a list is
                replaced by an empty list.
            ui_context: Passed to the prompter for any dialog shown.

        Returns:
            The method's return value.

        Raises:
            HandledError: If a dialog was shown and the call was abandoned.
            RemoteOperationError: If the remote method failed.
            AuthExpiredError: If the server keeps rejecting fresh credentials.
            TransportError: If the HTTP request failed.
        """
        if not isinstance(args, list):
            args = []
        return await self._call(document_specifier, method, args, ui_context, allow_reauth=True)

    async def _call(
        self,
        document_specifier: Any,
        method: str,
        args: list[Any],
        ui_context: Any,
        allow_reauth: bool,
    ) -> Any:
        headers = await self.get_auth_headers(ui_context)
        headers["Content-Type"] = "application/json"

        request = RPCRequest.for_method(
            document_specifier,
            method,
            args,
            self.config.api_version,
            dev_mode=self.config.dev_mode,
        )
        response = await self._post(request, headers, ui_context)

        try:
            envelope = RPCResponseEnvelope.model_validate_json(response.text)
        except ValidationError as e:
            raise TransportError(response.status_code, response.text) from e

        if envelope.error is not None:
            detail = envelope.error.first_detail
            if detail.error_message == AUTHORIZATION_REQUIRED:
                if not allow_reauth:
                    raise AuthExpiredError(AUTHORIZATION_REQUIRED)
                # The token is sometimes rejected before it expires
                logger.info(f"Authorization rejected for {method}, reauthorizing")
                self.store.drop_headers()
                return await self._call(
                    document_specifier, method, args, ui_context, allow_reauth=False
                )
            raise RemoteOperationError(
                detail.error_message,
                stack=detail.script_stack_trace_elements,
                error_type=f"{self.config.client_name} {envelope.error.message}",
            )

        result = envelope.result
        if result.lock_error:
            return await self._recover_from_lock(
                result.lock_error, document_specifier, method, args, ui_context
            )
        if result.doc_access_error:
            self.store.clear()
            await self.prompts.show_wrong_account(ui_context)
            raise HandledError(HandledReason.WRONG_ACCOUNT) from AccessError(
                str(result.doc_access_error)
            )
        if result.error:
            logger.warning(
                f"Non-fatal remote error: {result.error}",
                exc_info=NonFatalWarning(str(result.error)),
            )

        if result.debug:
            debug = "\n\n".join(str(line) for line in result.debug)
            logger.debug(f"Remote debug:\n\n{debug}")
        return result.response

    async def _post(
        self, request: RPCRequest, headers: dict[str, str], ui_context: Any
    ) -> httpx.Response:
        client = await self.get_http_client()
        try:
            response = await client.post(
                self.config.api_url,
                json=request.to_body(),
                headers=headers,
                timeout=None,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if 400 <= status < 404:
                self.store.clear()
                await self.prompts.show_wrong_account(ui_context)
                raise HandledError(HandledReason.WRONG_ACCOUNT) from e
            raise TransportError(status, e.response.text) from e
        except httpx.HTTPError as e:
            raise TransportError(0, str(e)) from e
        return response

    async def _recover_from_lock(
        self,
        lock_error: Any,
        document_specifier: Any,
        method: str,
        args: list[Any],
        ui_context: Any,
    ) -> Any:
        if not await self.prompts.confirm_force_unlock(ui_context):
            raise HandledError(HandledReason.DOCUMENT_LOCKED) from LockError(str(lock_error))

        logger.info("Force-unlocking document on user request")
        await self.call(document_specifier, UNLOCK_METHOD, [], ui_context)
        return await self.call(document_specifier, method, args, ui_context)
