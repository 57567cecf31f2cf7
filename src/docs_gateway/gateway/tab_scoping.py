"""Tab scoping for batch-update requests.

The Docs API expects the target tab at different depths depending on the
request type: some take a ``tabsCriteria`` wrapper, some a top-level
``tabId``, and any ``location``/``range`` inside the request payload needs
its own ``tabId``.
"""

from enum import Enum
from typing import Any


class TabScope(str, Enum):
    """Where a request carries its tab."""

    CRITERIA = "criteria"
    DIRECT = "direct"
    NONE = "none"


TAB_SCOPE_BY_REQUEST: dict[str, TabScope] = {
    "replaceNamedRangeContent": TabScope.CRITERIA,
    "replaceAllText": TabScope.CRITERIA,
    "deleteNamedRange": TabScope.CRITERIA,
    "deletePositionedObject": TabScope.DIRECT,
    "replaceImage": TabScope.DIRECT,
    "updateDocumentStyle": TabScope.DIRECT,
    "deleteHeader": TabScope.DIRECT,
    "deleteFooter": TabScope.DIRECT,
    "location": TabScope.DIRECT,
    "range": TabScope.DIRECT,
}

# Payload fields that always get their own tabId
NESTED_TAB_FIELDS = frozenset({"location", "range"})


def scope_for(request_name: str) -> TabScope:
    """Look up how a request type is scoped to a tab."""
    return TAB_SCOPE_BY_REQUEST.get(request_name, TabScope.NONE)


def add_tab_scope(request: dict[str, Any], tab_id: str) -> dict[str, Any]:
    """Scope a single batch-update request to ``tab_id``, in place.

    Args:
        request: Request object whose only key is the request type,
            e.g. ``{"insertText": {"location": {...}, "text": "..."}}``.
        tab_id: Tab to target.

    Returns:
        The same request object.

    Raises:
        ValueError: If the request is empty.
    """
    if not request:
        raise ValueError("Cannot scope an empty request")

    name = next(iter(request))
    scope = scope_for(name)
    if scope is TabScope.CRITERIA:
        request["tabsCriteria"] = {"tabIds": [tab_id]}
    elif scope is TabScope.DIRECT:
        request["tabId"] = tab_id

    payload = request[name]
    if isinstance(payload, dict):
        for field in NESTED_TAB_FIELDS:
            nested = payload.get(field)
            if isinstance(nested, dict):
                nested["tabId"] = tab_id

    return request
