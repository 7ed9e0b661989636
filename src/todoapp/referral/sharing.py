"""Sharing and clipboard helpers for referral codes."""

import webbrowser
from typing import Callable
from urllib.parse import quote

import pyperclip

from todoapp.exceptions import ShareError
from todoapp.logging_config import get_logger
from todoapp.settings import settings

logger = get_logger(__name__)


def build_share_message(code: str) -> str:
    return settings.share_message_template.format(code=code)


def build_share_url(code: str) -> str:
    """Build the message composition link carrying the referral code."""
    return settings.share_url_template.format(text=quote(build_share_message(code), safe=""))


def share_referral_code(code: str, opener: Callable[[str], bool] | None = None) -> str:
    """Open the messaging app with a pre-filled referral message.

    Args:
        code: Referral code to share
        opener: Callable that opens a URL and reports success (webbrowser.open by default)

    Returns:
        The URL that was opened

    Raises:
        ShareError: If no application accepted the link
    """
    opener = opener or webbrowser.open
    url = build_share_url(code)

    try:
        opened = opener(url)
    except webbrowser.Error as e:
        raise ShareError(f"Could not open share link: {e}", error_code="share_unavailable")

    if not opened:
        raise ShareError("No application is available to share the code", error_code="share_unavailable")

    logger.info("referral_code_shared", code=code)
    return url


def copy_to_clipboard(code: str) -> None:
    """Copy the referral code to the clipboard.

    Success is assumed; a missing clipboard backend is only logged.
    """
    try:
        pyperclip.copy(code)
    except pyperclip.PyperclipException as e:
        logger.warning("clipboard_copy_failed", error=str(e))
        return
    logger.debug("referral_code_copied")
