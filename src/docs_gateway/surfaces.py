"""Interfaces for the collaborators docs-gateway drives but does not own.

The editing front end supplies a browser surface (for the authorization
window and help links), a prompter (for confirmation dialogs) and
optionally a message catalog for localized dialog text.
"""

from collections.abc import Callable
from typing import Any, Protocol


class BrowserSurface(Protocol):
    """Opens and closes browser windows or tabs."""

    def open(self, url: str, on_close: Callable[[], None] | None = None) -> Any:
        """Open ``url`` and return a handle for it.

        ``on_close`` is invoked if the user closes the window themselves.
        """
        ...

    def close(self, handle: Any) -> None:
        """Close a window previously returned by open()."""
        ...

    def send_to_back(self) -> None:
        """Move progress windows behind the authorization window."""
        ...


class Prompter(Protocol):
    """Shows a titled confirmation dialog with up to three buttons."""

    async def confirm(
        self,
        title: str,
        message: str,
        button1_text: str | None = None,
        button2_text: str | None = None,
        button3_text: str | None = None,
        ui_context: Any = None,
    ) -> int:
        """Show the dialog and return the chosen button number (1-3).

        An empty string hides a button; None keeps the prompter's default.
        """
        ...


DEFAULT_MESSAGES: dict[str, str] = {
    "documentLocked": (
        "The document is currently locked by {client}. If another {client} "
        "operation is running, wait for it to finish and try again."
    ),
    "documentLocked_moreInfo": (
        "If {client} was interrupted while editing the document, the lock may "
        "not have been released. Unlock the document now? Only do this if no "
        "other {client} operation is in progress."
    ),
    "authScopeError": (
        "{client} needs permission to edit your documents. Authorize again and "
        "make sure all requested permissions are granted."
    ),
    "documentPermissionError": (
        "The account you authorized {client} with cannot edit this document. "
        "Authorize again with an account that has edit access."
    ),
    "needHelp": "Need Help?",
    "moreInfo": "More Information",
    "yes": "Yes",
    "no": "No",
}


class MessageCatalog:
    """Looks up dialog text by key, with English defaults."""

    def __init__(self, messages: dict[str, str] | None = None) -> None:
        self.messages = {**DEFAULT_MESSAGES, **(messages or {})}

    def get(self, key: str, client: str = "") -> str:
        """Return the message for ``key`` with ``{client}`` filled in.

        Unknown keys are returned as-is.
        """
        template = self.messages.get(key, key)
        return template.format(client=client)
