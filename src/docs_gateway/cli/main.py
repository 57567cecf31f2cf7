"""Command-line interface for docs-gateway."""

import asyncio
import json
import sys
from collections.abc import Callable
from typing import Any

import click

from docs_gateway.__version__ import __version__
from docs_gateway.auth import AuthFlow, CredentialStatus, CredentialStore
from docs_gateway.channel import GatewayChannel, GatewayRequest, GatewayResponse
from docs_gateway.config import GatewayConfig
from docs_gateway.errors import AuthError
from docs_gateway.gateway import DocumentOps, GatewayPrompts, RequestGateway


class TerminalSurface:
    """Browser surface for a terminal session.

    Pages are launched in the system browser. For the authorization page the
    user pastes back the URL the browser was redirected to; an empty answer
    counts as closing the window.
    """

    def __init__(self, config: GatewayConfig) -> None:
        self.config = config
        self.flow: AuthFlow | None = None
        self._tasks: set[asyncio.Task] = set()

    def open(self, url: str, on_close: Callable[[], None] | None = None) -> str:
        click.echo(f"If the browser doesn't open, visit: {url}", err=True)
        click.launch(url)
        if self.flow is not None and url.startswith(self.config.authorize_url):
            task = asyncio.get_running_loop().create_task(
                self._await_redirect(self.flow, url, on_close)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return url

    async def _await_redirect(
        self, flow: AuthFlow, handle: str, on_close: Callable[[], None] | None
    ) -> None:
        loop = asyncio.get_running_loop()
        redirect_url = await loop.run_in_executor(
            None,
            lambda: click.prompt(
                "Paste the URL you were redirected to (empty to cancel)",
                default="",
                show_default=False,
                err=True,
            ),
        )
        if not redirect_url.strip():
            if on_close is not None:
                on_close()
            return
        await flow.complete_authorization(redirect_url.strip(), handle)

    def close(self, handle: Any) -> None:
        pass

    def send_to_back(self) -> None:
        pass


class TerminalPrompter:
    """Shows confirmation dialogs as numbered choices on the terminal."""

    async def confirm(
        self,
        title: str,
        message: str,
        button1_text: str | None = None,
        button2_text: str | None = None,
        button3_text: str | None = None,
        ui_context: Any = None,
    ) -> int:
        labels = {1: button1_text or "OK", 2: "Cancel" if button2_text is None else button2_text}
        if button3_text:
            labels[3] = button3_text
        buttons = {number: label for number, label in labels.items() if label}

        def ask() -> str:
            click.echo(f"\n{title}\n\n{message}\n", err=True)
            for number, label in buttons.items():
                click.echo(f"  [{number}] {label}", err=True)
            choice: str = click.prompt(
                "Choose",
                type=click.Choice([str(n) for n in buttons]),
                default=str(next(iter(buttons))),
                err=True,
            )
            return choice

        loop = asyncio.get_running_loop()
        return int(await loop.run_in_executor(None, ask))


def build_channel(config: GatewayConfig) -> GatewayChannel:
    """Wire a gateway to the terminal surface and prompter."""
    surface = TerminalSurface(config)
    store = CredentialStore(config.credentials_path)
    auth = AuthFlow(config, store, surface)
    surface.flow = auth
    prompts = GatewayPrompts(TerminalPrompter(), surface, config)
    gateway = RequestGateway(config, auth, store, prompts)
    return GatewayChannel(gateway, DocumentOps(gateway))


def _require_client_id(config: GatewayConfig) -> None:
    if not config.client_id:
        click.echo("❌ Error: OAuth client ID required")
        click.echo("")
        click.echo("Set the environment variable:")
        click.echo("  export DOCS_GATEWAY_CLIENT_ID='your-client-id'")
        sys.exit(1)


def _parse_json(value: str, what: str) -> Any:
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"{what} must be JSON: {e}") from e


def _run(config: GatewayConfig, request: GatewayRequest) -> None:
    async def run() -> GatewayResponse:
        channel = build_channel(config)
        try:
            return await channel.handle(request)
        finally:
            await channel.close()

    response = asyncio.run(run())
    if response.handled:
        sys.exit(1)
    if not response.ok:
        click.echo(f"❌ {response.error}", err=True)
        sys.exit(1)
    click.echo(json.dumps(response.result, indent=2))


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def main(ctx: click.Context) -> None:
    """Docs Gateway - authorized calls against a tab-scoped document API."""
    ctx.obj = GatewayConfig.from_env()


@main.command()
@click.pass_obj
def auth(config: GatewayConfig) -> None:
    """Authorize access to your documents.

    Opens the consent page in the browser, then asks for the URL the
    browser ended up on.
    """
    _require_client_id(config)

    async def authorize() -> None:
        channel = build_channel(config)
        try:
            await channel.gateway.auth.get_headers()
        finally:
            await channel.close()

    click.echo("Starting authorization...")
    try:
        asyncio.run(authorize())
    except AuthError as e:
        click.echo(f"❌ Authorization failed: {e}")
        sys.exit(1)

    credentials = CredentialStore(config.credentials_path).get()
    click.echo("✓ Authorization successful!")
    if credentials.last_email:
        click.echo(f"Account: {credentials.last_email}")


@main.command()
@click.pass_obj
def status(config: GatewayConfig) -> None:
    """Show the stored credential status."""
    store = CredentialStore(config.credentials_path)
    state = store.get_status()

    click.echo(f"Credentials file: {store.path}")
    if state == CredentialStatus.MISSING:
        click.echo("  ❌ Not authorized")
        click.echo("")
        click.echo("Run 'docs-gateway auth' to authorize.")
        sys.exit(1)
    elif state == CredentialStatus.INVALID:
        click.echo("  ❌ Credentials file corrupted")
        click.echo("")
        click.echo("Run 'docs-gateway auth' to authorize again.")
        sys.exit(1)

    credentials = store.get()
    if state == CredentialStatus.EXPIRED:
        click.echo("  ⚠️  Token expired (will reauthorize on next use)")
    else:
        click.echo("  ✓ Authorized")
        if credentials.expires_at:
            click.echo(
                f"  Token expires: {credentials.expires_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"
            )
    if credentials.last_email:
        click.echo(f"  Account: {credentials.last_email}")


@main.command()
@click.pass_obj
def logout(config: GatewayConfig) -> None:
    """Forget the stored token and account."""
    CredentialStore(config.credentials_path).clear()
    click.echo("✓ Credentials cleared")


@main.command("get-document")
@click.argument("document_id")
@click.option("--tab", "tab_id", default=None, help="Tab to return (default: first tab)")
@click.pass_obj
def get_document(config: GatewayConfig, document_id: str, tab_id: str | None) -> None:
    """Print a document (or one of its tabs) as JSON."""
    _require_client_id(config)
    _run(config, GatewayRequest(kind="get_document", document_id=document_id, tab_id=tab_id))


@main.command("batch-update")
@click.argument("document_id")
@click.argument("body")
@click.option("--tab", "tab_id", default=None, help="Tab every request should target")
@click.pass_obj
def batch_update(config: GatewayConfig, document_id: str, body: str, tab_id: str | None) -> None:
    """Apply a batch-update BODY (JSON with a "requests" list)."""
    _require_client_id(config)
    parsed = _parse_json(body, "BODY")
    if not isinstance(parsed, dict):
        raise click.BadParameter("BODY must be a JSON object")
    _run(
        config,
        GatewayRequest(kind="batch_update", document_id=document_id, tab_id=tab_id, body=parsed),
    )


@main.command()
@click.argument("document_id")
@click.argument("method")
@click.argument("args", required=False, default="[]")
@click.option("--tab", "tab_id", default=None, help="Tab the method runs against")
@click.pass_obj
def call(
    config: GatewayConfig, document_id: str, method: str, args: str, tab_id: str | None
) -> None:
    """Run a remote METHOD with ARGS (a JSON list) against a document."""
    _require_client_id(config)
    if not config.api_url:
        click.echo("❌ Error: DOCS_GATEWAY_API_URL is not set")
        sys.exit(1)
    parsed = _parse_json(args, "ARGS")
    if not isinstance(parsed, list):
        raise click.BadParameter("ARGS must be a JSON list")
    _run(
        config,
        GatewayRequest(
            kind="call", document_id=document_id, tab_id=tab_id, method=method, args=parsed
        ),
    )


if __name__ == "__main__":
    main()
