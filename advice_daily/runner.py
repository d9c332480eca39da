"""High-level orchestration for the advice_daily application."""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Optional

from . import db
from .daily_cache import DailyCache
from .fetcher import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, FetchController
from .models import Advice
from .renderers import build_screen_text
from .screen import AdviceScreen

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    """Runtime options for executing the application."""

    database_connection_string: str
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    refresh: bool = False
    copy: bool = False
    show_cache: bool = False


@dataclass
class RunResult:
    """Returned data after executing the app."""

    output_text: str
    advice: Optional[Advice]


def build_screen(
    config: RunConfig, clipboard_writer: Optional[Callable[[str], None]] = None
) -> AdviceScreen:
    """Wire the store, daily cache and fetch controller into a screen."""
    engine = db.init_engine(config.database_connection_string)
    if engine is None:
        raise ValueError("A database connection string is required.")
    cache = DailyCache(db.get_session_factory(engine))
    controller = FetchController(endpoint=config.endpoint, timeout=config.timeout)
    return AdviceScreen(cache, controller, clipboard_writer=clipboard_writer)


def _describe_cache(screen: AdviceScreen) -> str:
    entry = screen.cache.entry()
    if entry is None:
        return "Daily cache is empty."
    label = f"slip {entry.advice.id}" if entry.advice.id else "no slip id"
    return f"Daily cache: {entry.date_stamp} ({label}) {entry.advice.text}"


def execute(
    config: RunConfig, screen: Optional[AdviceScreen] = None
) -> RunResult:
    """Load (or refresh) the advice, optionally copy it, and render the screen."""
    screen = screen or build_screen(config)
    try:
        if config.show_cache:
            return RunResult(output_text=_describe_cache(screen), advice=None)

        if config.refresh:
            screen.refresh()
        else:
            screen.load()

        if config.copy:
            screen.copy()

        output_text = build_screen_text(screen.snapshot())
        return RunResult(output_text=output_text, advice=screen.advice)
    finally:
        screen.close()


def _wait_for_fetch(
    screen: AdviceScreen,
    pending: Optional[Future],
    write: Callable[[str], None],
) -> None:
    """Show the loading screen while ``pending`` is in flight, then wait for it."""
    if pending is None:
        return
    if screen.loading:
        write(build_screen_text(screen.snapshot(), interactive=False))
    pending.result()


def run_interactive(
    screen: AdviceScreen,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = print,
) -> None:
    """Prompt loop: r refreshes, c copies, q quits."""
    try:
        _wait_for_fetch(screen, screen.begin_load(), write)
        while True:
            write(build_screen_text(screen.snapshot(), interactive=True))
            try:
                choice = read("> ").strip().lower()
            except EOFError:
                break

            if choice in ("q", "quit"):
                break
            if choice in ("r", "refresh"):
                _wait_for_fetch(screen, screen.begin_refresh(), write)
            elif choice in ("c", "copy"):
                screen.copy()
            elif choice:
                logger.debug("Ignoring unknown command %r", choice)
    finally:
        screen.close()
