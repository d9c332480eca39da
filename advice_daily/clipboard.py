"""System clipboard access."""

from __future__ import annotations

import logging
from typing import Callable, Optional

import pyperclip

from .errors import CopyFailedError
from .models import Advice

logger = logging.getLogger(__name__)


def format_for_clipboard(advice: Advice) -> str:
    return f'"{advice.text}"'


def copy_advice(
    advice: Advice, writer: Optional[Callable[[str], None]] = None
) -> str:
    """Write the quoted advice text to the clipboard and return it."""
    text = format_for_clipboard(advice)
    try:
        (writer or pyperclip.copy)(text)
    except (pyperclip.PyperclipException, OSError) as exc:
        logger.warning("Failed to copy advice to clipboard: %s", exc)
        raise CopyFailedError(str(exc)) from exc
    logger.debug("Copied advice %s to clipboard", advice.id)
    return text
