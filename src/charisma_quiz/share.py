"""
Share action and sales redirect

Sharing prefers a native share capability and falls back to copying the
link to the clipboard, followed by a short "link copied" confirmation.
"""

import asyncio
import inspect
import logging
import shutil
import subprocess
import webbrowser
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

from .config import config

logger = logging.getLogger(__name__)


class ShareError(Exception):
    """The link could not be shared or copied."""
    pass


class ShareOutcome(str, Enum):
    """How a share attempt ended."""
    SHARED = "shared"
    COPIED = "copied"
    FAILED = "failed"


@dataclass(frozen=True)
class SharePayload:
    """What a native share sheet receives."""
    title: str
    text: str
    url: str


NativeShare = Callable[[SharePayload], Union[None, Awaitable[None]]]
Clipboard = Callable[[str], Union[None, Awaitable[None]]]

# Clipboard commands tried in order, first one on PATH wins
CLIPBOARD_COMMANDS = [
    ["pbcopy"],
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["clip"],
]


def system_clipboard(text: str) -> None:
    """
    Copy text with the platform clipboard command.

    Raises:
        ShareError: If no clipboard command is available or it fails
    """
    for command in CLIPBOARD_COMMANDS:
        if shutil.which(command[0]) is None:
            continue
        try:
            subprocess.run(command, input=text.encode("utf-8"), check=True, timeout=5)
        except (OSError, subprocess.SubprocessError) as e:
            raise ShareError(f"{command[0]} failed: {e}") from e
        return
    raise ShareError("No clipboard command found")


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class ShareService:
    """
    Shares the quiz page address.

    Paths: native share succeeds -> SHARED; native share cancelled or
    failing -> clipboard; no native share -> clipboard. A successful copy
    sets `link_copied` for `confirmation_seconds`.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        title: Optional[str] = None,
        text: Optional[str] = None,
        native_share: Optional[NativeShare] = None,
        copy_to_clipboard: Optional[Clipboard] = None,
        confirmation_seconds: Optional[float] = None,
    ):
        self.url = url or config.funnel.share_url
        self.title = title if title is not None else config.funnel.share_title
        self.text = text if text is not None else config.funnel.share_text
        self.native_share = native_share
        self.copy_to_clipboard = copy_to_clipboard or system_clipboard
        self.confirmation_seconds = (
            config.funnel.confirmation_seconds if confirmation_seconds is None else confirmation_seconds
        )
        self._link_copied = False
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    @property
    def link_copied(self) -> bool:
        """Whether the copy confirmation is currently showing."""
        return self._link_copied

    @property
    def payload(self) -> SharePayload:
        return SharePayload(title=self.title, text=self.text, url=self.url)

    async def share(self) -> ShareOutcome:
        """Share the page address, falling back to the clipboard."""
        if not self.url:
            logger.warning("No share URL configured, set SHARE_URL")
            return ShareOutcome.FAILED

        if self.native_share is not None:
            try:
                await _resolve(self.native_share(self.payload))
                logger.debug("Shared %s natively", self.url)
                return ShareOutcome.SHARED
            except Exception as e:
                # A cancelled share sheet surfaces as an error too
                logger.info("Native share did not complete (%s), copying link instead", e)

        return await self._copy()

    async def _copy(self) -> ShareOutcome:
        try:
            await _resolve(self.copy_to_clipboard(self.url))
        except Exception as e:
            logger.warning("Could not copy share link: %s", e)
            return ShareOutcome.FAILED

        self._show_confirmation()
        return ShareOutcome.COPIED

    def _show_confirmation(self):
        self._link_copied = True
        if self._reset_handle is not None:
            self._reset_handle.cancel()
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(self.confirmation_seconds, self._hide_confirmation)

    def _hide_confirmation(self):
        self._link_copied = False
        self._reset_handle = None


def open_sales_page(
    url: Optional[str] = None,
    opener: Callable[[str], bool] = webbrowser.open_new_tab,
) -> bool:
    """
    Open the sales page in a new browser tab.

    Returns:
        Whether a browser reported opening it
    """
    url = url or config.funnel.sales_url
    logger.debug("Opening sales page %s", url)
    return bool(opener(url))
