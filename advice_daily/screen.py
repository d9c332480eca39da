"""State container for the advice-of-the-day screen."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .clipboard import copy_advice
from .daily_cache import DailyCache
from .errors import CopyFailedError
from .fetcher import FetchController
from .models import Advice, ErrorKind, FetchOutcome, Notification

logger = logging.getLogger(__name__)

ERROR_DISPLAY = timedelta(milliseconds=3000)
SUCCESS_DISPLAY = timedelta(milliseconds=2000)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScreenState:
    """Immutable view of the screen used for rendering."""

    advice: Optional[Advice]
    loading: bool
    notification: Optional[Notification]


class AdviceScreen:
    """Owns displayed advice and notifications; drives cache, fetch and copy."""

    def __init__(
        self,
        cache: DailyCache,
        controller: FetchController,
        clipboard_writer: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.cache = cache
        self.controller = controller
        self.controller.cache = cache
        self.controller.on_success = self._show_advice
        self.controller.on_failure = self._show_error
        self._clipboard_writer = clipboard_writer
        self._clock = clock
        self._lock = threading.Lock()
        self._advice: Optional[Advice] = None
        self._notification: Optional[Notification] = None

    @property
    def advice(self) -> Optional[Advice]:
        with self._lock:
            return self._advice

    @property
    def loading(self) -> bool:
        return self.controller.busy

    @property
    def notification(self) -> Optional[Notification]:
        with self._lock:
            if self._notification and not self._notification.is_active(self._clock()):
                self._notification = None
            return self._notification

    def snapshot(self) -> ScreenState:
        return ScreenState(
            advice=self.advice, loading=self.loading, notification=self.notification
        )

    def load(self) -> Optional[FetchOutcome]:
        """Show today's cached advice, fetching a new one on a miss."""
        pending = self.begin_load()
        return pending.result() if pending is not None else None

    def begin_load(self) -> Optional[Future]:
        """Non-blocking load; returns the fetch future, or None on a cache hit."""
        cached = self.cache.load()
        if cached is not None:
            self._show_advice(cached)
            return None
        return self.begin_fetch()

    def fetch(self) -> FetchOutcome:
        return self.begin_fetch().result()

    def begin_fetch(self) -> Future:
        self.dismiss()
        return self.controller.start()

    def refresh(self) -> FetchOutcome:
        """Fetch a new advice regardless of what is cached for today."""
        return self.begin_refresh().result()

    def begin_refresh(self) -> Future:
        logger.info("Refreshing advice")
        self.cache.invalidate()
        return self.begin_fetch()

    def copy(self) -> bool:
        advice = self.advice
        if advice is None:
            return False
        try:
            copy_advice(advice, writer=self._clipboard_writer)
        except CopyFailedError as exc:
            self._show_error(exc.kind)
            return False
        self._notify("Copied", "success", SUCCESS_DISPLAY)
        return True

    def dismiss(self) -> None:
        with self._lock:
            self._notification = None

    def close(self) -> None:
        self.controller.close()

    def _show_advice(self, advice: Advice) -> None:
        with self._lock:
            self._advice = advice

    def _show_error(self, kind: ErrorKind) -> None:
        logger.info("Showing error notification: %s", kind.message)
        self._notify(kind.message, "error", ERROR_DISPLAY)

    def _notify(self, message: str, severity: str, duration: timedelta) -> None:
        with self._lock:
            self._notification = Notification(
                message=message, severity=severity, expires_at=self._clock() + duration
            )
