"""Whole-document reads and batch updates against the Docs REST API."""

import logging
from typing import Any

import httpx

from docs_gateway.errors import AuthExpiredError, TransportError
from docs_gateway.gateway.client import RequestGateway
from docs_gateway.gateway.tab_scoping import add_tab_scope

logger = logging.getLogger(__name__)

DOCUMENT_TIMEOUT = 60.0


class DocumentOps:
    """Reads and updates documents, one tab at a time.

    Unlike RequestGateway.call, responses are not inspected for
    server-reported errors; callers get the parsed JSON as returned.
    """

    def __init__(self, gateway: RequestGateway) -> None:
        self.gateway = gateway

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> Any:
        headers = await self.gateway.auth.get_headers()
        headers["Content-Type"] = "application/json"
        client = await self.gateway.get_http_client()

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json_data,
                headers=headers,
                timeout=DOCUMENT_TIMEOUT,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 403:
                self.gateway.store.clear()
                raise AuthExpiredError(
                    f"{status}: Authorization failed. Try again.\n{e.response.text}"
                ) from e
            raise TransportError(status, e.response.text) from e
        except httpx.HTTPError as e:
            raise TransportError(0, str(e)) from e

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(response.status_code, response.text) from e

    async def get_document(self, doc_id: str, tab_id: str | None = None) -> dict[str, Any]:
        """Fetch a document, narrowed to one tab if it has tabs.

        Args:
            doc_id: Document ID.
            tab_id: Tab to return. Defaults to the first tab.

        Returns:
            The tab's document content with documentId and tabId set, or the
            document as returned if it has no tabs or the tab is missing.

        Raises:
            AuthExpiredError: If the API refused the credentials (HTTP 403).
            TransportError: If the request failed otherwise.
        """
        url = f"{self.gateway.config.docs_api_base}/documents/{doc_id}"
        document: dict[str, Any] = await self._request(
            "GET", url, params={"includeTabsContent": "true"}
        )

        tabs = document.get("tabs")
        if not tabs:
            return document

        for tab in tabs:
            if tab_id is None or tab.get("tabProperties", {}).get("tabId") == tab_id:
                document_tab: dict[str, Any] = tab.get("documentTab", {})
                document_tab["documentId"] = doc_id
                document_tab["tabId"] = tab_id
                return document_tab

        logger.warning(f"Tab {tab_id} not found in document {doc_id}, returning all tabs")
        return document

    async def batch_update_document(
        self,
        doc_id: str,
        tab_id: str | None,
        body: dict[str, Any],
    ) -> Any:
        """Apply a batch of update requests, scoped to a tab if given.

        Args:
            doc_id: Document ID.
            tab_id: Tab every request should target, or None.
            body: ``{"requests": [...]}``. Requests are modified in place.

        Returns:
            The API response, unmodified.

        Raises:
            AuthExpiredError: If the API refused the credentials (HTTP 403).
            TransportError: If the request failed otherwise.
        """
        if tab_id:
            for request in body.get("requests", []):
                add_tab_scope(request, tab_id)

        url = f"{self.gateway.config.docs_api_base}/documents/{doc_id}:batchUpdate"
        return await self._request("POST", url, json_data=body)
