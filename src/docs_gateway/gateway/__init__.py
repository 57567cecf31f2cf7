"""Remote calls against the document dispatcher and the Docs REST API."""

from docs_gateway.gateway.client import AUTHORIZATION_REQUIRED, UNLOCK_METHOD, RequestGateway
from docs_gateway.gateway.documents import DocumentOps
from docs_gateway.gateway.envelope import RPCRequest, RPCResponseEnvelope
from docs_gateway.gateway.prompts import GatewayPrompts
from docs_gateway.gateway.tab_scoping import TabScope, add_tab_scope, scope_for

__all__ = [
    "AUTHORIZATION_REQUIRED",
    "UNLOCK_METHOD",
    "DocumentOps",
    "GatewayPrompts",
    "RPCRequest",
    "RPCResponseEnvelope",
    "RequestGateway",
    "TabScope",
    "add_tab_scope",
    "scope_for",
]
