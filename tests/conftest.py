"""Shared pytest fixtures for docs-gateway tests.

This module provides fake collaborators (browser surface, prompter), a
fake remote API served through httpx.MockTransport, and wired-up gateway
objects using temporary credential storage.
"""

import asyncio
import json
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx
import pytest

from docs_gateway.auth import AuthFlow, CredentialStore
from docs_gateway.config import GatewayConfig
from docs_gateway.gateway import DocumentOps, GatewayPrompts, RequestGateway

CLIENT_ID = "test-client-id"
API_URL = "https://script.example.com/macros/exec"
TOKEN_INFO_URL = "https://www.googleapis.com/oauth2/v3/tokeninfo"
DOCS_API_BASE = "https://docs.googleapis.com/v1"
GRANTED_SCOPE = "https://www.googleapis.com/auth/documents email"


def redirect_url(**params: str) -> str:
    """Build an authorization redirect URL with ``params`` in the fragment."""
    fragment = str(httpx.QueryParams(params))
    return f"http://127.0.0.1:8789/callback#{fragment}"


def granted_redirect(access_token: str = "new_access_token", expires_in: int = 3600) -> str:
    return redirect_url(
        access_token=access_token,
        token_type="Bearer",
        expires_in=str(expires_in),
        scope=GRANTED_SCOPE,
        state="google-docs-auth-callback",
    )


def rpc_result(response: Any = None, **extra: Any) -> dict[str, Any]:
    """Dispatcher envelope for a successful call."""
    return {"response": {"result": {"response": response, **extra}}}


def rpc_error(error_message: str, message: str = "Exception") -> dict[str, Any]:
    """Dispatcher envelope for a failed call."""
    return {
        "error": {
            "code": 3,
            "message": message,
            "details": [
                {
                    "errorMessage": error_message,
                    "errorType": "ScriptError",
                    "scriptStackTraceElements": [{"function": "callMethod", "lineNumber": 12}],
                }
            ],
        }
    }


# =============================================================================
# Fake Remote API
# =============================================================================


class FakeApi:
    """Serves canned responses by HTTP method and URL prefix.

    Each route holds a queue of responses; the last one is repeated once
    the others are used up. Every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: list[tuple[str, str, list[httpx.Response]]] = []

    def add(self, method: str, url_prefix: str, *responses: tuple[int, Any]) -> None:
        queue = []
        for status, body in responses:
            if isinstance(body, str):
                queue.append(httpx.Response(status, text=body))
            else:
                queue.append(httpx.Response(status, json=body))
        self._routes.append((method, url_prefix, queue))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for method, prefix, queue in self._routes:
            if request.method == method and str(request.url).startswith(prefix):
                return queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(404, text=f"No route for {request.method} {request.url}")

    def requests_to(self, url_prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(url_prefix)]

    def dispatched_methods(self) -> list[str]:
        """Remote method names sent to the dispatcher, in order."""
        return [json.loads(r.content)["parameters"][1] for r in self.requests_to(API_URL)]


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def http_client(fake_api: FakeApi) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler))


# =============================================================================
# Fake Collaborators
# =============================================================================


class FakeSurface:
    """Records opened windows.

    If ``redirect`` is set, opening the authorization page completes the
    flow with that redirect URL on the next loop iteration.
    """

    def __init__(self) -> None:
        self.opened: list[str] = []
        self.closed: list[Any] = []
        self.sent_to_back = 0
        self.on_close: Callable[[], None] | None = None
        self.flow: AuthFlow | None = None
        self.redirect: str | None = None
        self.tasks: list[asyncio.Task] = []

    def open(self, url: str, on_close: Callable[[], None] | None = None) -> str:
        self.opened.append(url)
        handle = f"window-{len(self.opened)}"
        if on_close is not None:
            self.on_close = on_close
            if self.flow is not None and self.redirect is not None:
                task = asyncio.get_running_loop().create_task(
                    self.flow.complete_authorization(self.redirect, handle)
                )
                self.tasks.append(task)
        return handle

    def close(self, handle: Any) -> None:
        self.closed.append(handle)

    def send_to_back(self) -> None:
        self.sent_to_back += 1


class FakePrompter:
    """Answers dialogs from a queue of button numbers (default 1)."""

    def __init__(self) -> None:
        self.answers: list[int] = []
        self.calls: list[dict[str, Any]] = []

    async def confirm(
        self,
        title: str,
        message: str,
        button1_text: str | None = None,
        button2_text: str | None = None,
        button3_text: str | None = None,
        ui_context: Any = None,
    ) -> int:
        self.calls.append(
            {
                "title": title,
                "message": message,
                "button1_text": button1_text,
                "button2_text": button2_text,
                "button3_text": button3_text,
                "ui_context": ui_context,
            }
        )
        return self.answers.pop(0) if self.answers else 1


@pytest.fixture
def surface() -> FakeSurface:
    return FakeSurface()


@pytest.fixture
def prompter() -> FakePrompter:
    return FakePrompter()


# =============================================================================
# Config and Storage
# =============================================================================


@pytest.fixture
def credentials_path(tmp_path: Path) -> Path:
    return tmp_path / ".docs-gateway" / "credentials.json"


@pytest.fixture
def config(credentials_path: Path) -> GatewayConfig:
    return GatewayConfig(
        client_id=CLIENT_ID,
        api_url=API_URL,
        token_info_url=TOKEN_INFO_URL,
        docs_api_base=DOCS_API_BASE,
        credentials_path=credentials_path,
    )


@pytest.fixture
def store(credentials_path: Path) -> CredentialStore:
    return CredentialStore(credentials_path)


@pytest.fixture
def authorized_store(store: CredentialStore) -> CredentialStore:
    """Store holding a valid cached token."""
    store.set(
        {"Authorization": "Bearer cached_token"},
        "user@example.com",
        datetime.now(timezone.utc) + timedelta(hours=1),
    )
    return store


# =============================================================================
# Wired Gateway
# =============================================================================


@pytest.fixture
def auth_flow(
    config: GatewayConfig,
    store: CredentialStore,
    surface: FakeSurface,
    http_client: httpx.AsyncClient,
) -> AuthFlow:
    flow = AuthFlow(config, store, surface, http_client=http_client)
    surface.flow = flow
    return flow


@pytest.fixture
def prompts(prompter: FakePrompter, surface: FakeSurface, config: GatewayConfig) -> GatewayPrompts:
    return GatewayPrompts(prompter, surface, config)


@pytest.fixture
def gateway(
    config: GatewayConfig,
    auth_flow: AuthFlow,
    store: CredentialStore,
    prompts: GatewayPrompts,
    http_client: httpx.AsyncClient,
) -> RequestGateway:
    return RequestGateway(config, auth_flow, store, prompts, http_client=http_client)


@pytest.fixture
def documents(gateway: RequestGateway) -> DocumentOps:
    return DocumentOps(gateway)


@pytest.fixture
def token_info_ok(fake_api: FakeApi) -> FakeApi:
    """Token-info endpoint confirming tokens issued to our client."""
    fake_api.add("GET", TOKEN_INFO_URL, (200, {"aud": CLIENT_ID, "email": "user@example.com"}))
    return fake_api
