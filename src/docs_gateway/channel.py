"""Typed request/response channel between the editing surface and the gateway.

The editing surface sends a GatewayRequest and always gets a
GatewayResponse back. Failures the user has already seen a dialog for come
back as ``handled=True`` with no error text, so the surface does not report
them a second time.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, Field

from docs_gateway.errors import GatewayError, HandledError
from docs_gateway.gateway import DocumentOps, RequestGateway

logger = logging.getLogger(__name__)


class GatewayRequest(BaseModel):
    """A request from the editing surface.

    Attributes:
        kind: Which gateway operation to run.
        document_id: Target document.
        tab_id: Target tab, if any.
        method: Remote method name (kind="call").
        args: Remote method arguments (kind="call").
        body: Batch-update body (kind="batch_update").
    """

    kind: Literal["call", "get_document", "batch_update"]
    document_id: str
    tab_id: str | None = Field(default=None)
    method: str | None = Field(default=None)
    args: list[Any] = Field(default_factory=list)
    body: dict[str, Any] = Field(default_factory=dict)

    def document_specifier(self) -> dict[str, Any]:
        return {"documentId": self.document_id, "tabId": self.tab_id}


class GatewayResponse(BaseModel):
    ok: bool
    result: Any = Field(default=None)
    error: str | None = Field(default=None)
    handled: bool = Field(default=False)


class GatewayChannel:
    """Routes GatewayRequests to the gateway and wraps the outcome."""

    def __init__(self, gateway: RequestGateway, documents: DocumentOps) -> None:
        self.gateway = gateway
        self.documents = documents

    async def handle(self, request: GatewayRequest, ui_context: Any = None) -> GatewayResponse:
        """Run a request and report its outcome.

        Args:
            request: The request to run.
            ui_context: Passed to the prompter for any dialog shown.

        Returns:
            GatewayResponse with the result or the failure.
        """
        try:
            result = await self._dispatch(request, ui_context)
        except HandledError as e:
            logger.debug(f"Handled error in {request.kind}: {e.reason.value}")
            return GatewayResponse(ok=False, handled=True)
        except GatewayError as e:
            logger.error(f"Error in {request.kind} for {request.document_id}: {e.message}")
            return GatewayResponse(ok=False, error=e.message)
        return GatewayResponse(ok=True, result=result)

    async def close(self) -> None:
        """Close the HTTP clients held by the gateway and its auth flow."""
        await self.gateway.close()
        await self.gateway.auth.close()

    async def _dispatch(self, request: GatewayRequest, ui_context: Any) -> Any:
        if request.kind == "call":
            if not request.method:
                raise GatewayError("A call request needs a method")
            return await self.gateway.call(
                request.document_specifier(), request.method, request.args, ui_context
            )
        if request.kind == "get_document":
            return await self.documents.get_document(request.document_id, request.tab_id)
        return await self.documents.batch_update_document(
            request.document_id, request.tab_id, request.body
        )
