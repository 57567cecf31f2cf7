"""User-facing dialogs for recoverable gateway failures.

Each dialog is titled with the client name and offers a third button for
more information. The locked-document dialog leads to a force-unlock
question; the account and permission dialogs open the help page.
"""

import logging
from typing import Any

from docs_gateway.config import GatewayConfig
from docs_gateway.surfaces import BrowserSurface, MessageCatalog, Prompter

logger = logging.getLogger(__name__)

BUTTON_1 = 1
BUTTON_3 = 3


class GatewayPrompts:
    """Shows the locked-document, wrong-account and missing-permission dialogs."""

    def __init__(
        self,
        prompter: Prompter,
        surface: BrowserSurface,
        config: GatewayConfig,
        messages: MessageCatalog | None = None,
    ) -> None:
        self.prompter = prompter
        self.surface = surface
        self.config = config
        self.messages = messages or MessageCatalog()

    def _text(self, key: str) -> str:
        return self.messages.get(key, client=self.config.client_name)

    async def confirm_force_unlock(self, ui_context: Any = None) -> bool:
        """Ask whether a locked document should be forcibly unlocked.

        The unlock question is only asked if the user picks "Need help" on
        the first dialog.

        Returns:
            True if the user confirmed the unlock.
        """
        button = await self.prompter.confirm(
            title=self.config.client_name,
            message=self._text("documentLocked"),
            button2_text="",
            button3_text=self._text("needHelp"),
            ui_context=ui_context,
        )
        if button != BUTTON_3:
            return False

        button = await self.prompter.confirm(
            title=self.config.client_name,
            message=self._text("documentLocked_moreInfo"),
            button1_text=self._text("yes"),
            button2_text=self._text("no"),
            ui_context=ui_context,
        )
        return button == BUTTON_1

    async def show_wrong_account(self, ui_context: Any = None) -> None:
        """Tell the user the authorized account cannot access the document."""
        await self._show_with_more_info("documentPermissionError", ui_context)

    async def show_permissions_not_granted(self, ui_context: Any = None) -> None:
        """Tell the user the required permission was not granted."""
        await self._show_with_more_info("authScopeError", ui_context)

    async def _show_with_more_info(self, message_key: str, ui_context: Any) -> None:
        button = await self.prompter.confirm(
            title=self.config.client_name,
            message=self._text(message_key),
            button2_text="",
            button3_text=self._text("moreInfo"),
            ui_context=ui_context,
        )
        if button == BUTTON_3:
            logger.debug(f"Opening help page {self.config.help_url}")
            self.surface.open(self.config.help_url)
