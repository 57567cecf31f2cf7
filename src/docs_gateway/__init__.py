"""docs-gateway: OAuth-backed gateway for a tab-scoped remote document API."""

from docs_gateway.__version__ import __version__
from docs_gateway.auth import AuthFlow, CredentialStore
from docs_gateway.channel import GatewayChannel, GatewayRequest, GatewayResponse
from docs_gateway.config import GatewayConfig
from docs_gateway.gateway import DocumentOps, GatewayPrompts, RequestGateway
from docs_gateway.surfaces import BrowserSurface, MessageCatalog, Prompter


def create_channel(
    config: GatewayConfig,
    surface: BrowserSurface,
    prompter: Prompter,
    messages: MessageCatalog | None = None,
) -> GatewayChannel:
    """Wire up a complete gateway behind a channel.

    Returns:
        GatewayChannel ready to handle requests.

    Example:
        >>> channel = create_channel(GatewayConfig.from_env(), surface, prompter)
        >>> await channel.handle(GatewayRequest(kind="get_document", document_id="abc"))
    """
    store = CredentialStore(config.credentials_path)
    auth = AuthFlow(config, store, surface)
    prompts = GatewayPrompts(prompter, surface, config, messages)
    gateway = RequestGateway(config, auth, store, prompts)
    return GatewayChannel(gateway, DocumentOps(gateway))


__all__ = [
    "__version__",
    "AuthFlow",
    "CredentialStore",
    "DocumentOps",
    "GatewayChannel",
    "GatewayConfig",
    "GatewayPrompts",
    "GatewayRequest",
    "GatewayResponse",
    "RequestGateway",
    "create_channel",
]
