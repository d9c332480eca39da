"""Advice retrieval and the single in-flight fetch controller."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from typing import Any, Callable, Optional

import requests

from .daily_cache import DailyCache
from .errors import AdviceError, EmptyResultError, NetworkError
from .models import Advice, ErrorKind, FetchOutcome, FetchState

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://api.adviceslip.com/advice"
DEFAULT_TIMEOUT = 10.0

REQUEST_HEADERS = {
    "Accept": "application/json",
    "Cache-Control": "no-store",
    "Pragma": "no-cache",
}


def build_request_url(endpoint: str, now_ms: Optional[int] = None) -> str:
    """Append the ``ts`` cache-busting parameter to ``endpoint``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    separator = "&" if "?" in endpoint else "?"
    return f"{endpoint}{separator}ts={now_ms}"


def parse_advice_response(data: Any) -> Advice:
    """Extract ``slip.advice`` and ``slip.id`` from a decoded response body."""
    slip = data.get("slip") if isinstance(data, dict) else None
    if not isinstance(slip, dict):
        raise EmptyResultError("Response has no slip object")

    text = slip.get("advice")
    if not isinstance(text, str) or not text:
        raise EmptyResultError("Response slip has no advice text")

    slip_id = slip.get("id")
    if isinstance(slip_id, bool) or not isinstance(slip_id, int):
        slip_id = None
    return Advice(text=text, id=slip_id)


def fetch_advice(
    endpoint: str = DEFAULT_ENDPOINT,
    session: Optional[requests.Session] = None,
    timeout: float = DEFAULT_TIMEOUT,
    now_ms: Optional[int] = None,
) -> Advice:
    """Fetch one advice slip, raising NetworkError or EmptyResultError."""
    url = build_request_url(endpoint, now_ms)
    http = session if session is not None else requests
    logger.info("Fetching advice from %s", url)
    try:
        response = http.get(url, headers=dict(REQUEST_HEADERS), timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as exc:
        logger.warning("Failed to fetch advice from %s: %s", url, exc)
        raise NetworkError(str(exc)) from exc
    except ValueError as exc:
        logger.warning("Advice response from %s is not valid JSON: %s", url, exc)
        raise NetworkError(str(exc)) from exc

    advice = parse_advice_response(data)
    logger.info("Received advice slip %s", advice.id)
    return advice


class CancelToken:
    """Cancellation signal owned by exactly one fetch."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class FetchController:
    """Runs at most one logical advice fetch at a time.

    Starting a fetch cancels the outstanding one. A cancelled fetch settles
    as ``FetchState.CANCELLED`` and never fires callbacks, even when its HTTP
    response eventually arrives. Settlements run one at a time, so a fetch
    superseded while storing its advice is always overwritten by the newer one.
    """

    def __init__(
        self,
        cache: Optional[DailyCache] = None,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
        on_success: Optional[Callable[[Advice], None]] = None,
        on_failure: Optional[Callable[[ErrorKind], None]] = None,
        max_workers: int = 4,
    ):
        self.cache = cache
        self.endpoint = endpoint
        self.timeout = timeout
        self.on_success = on_success
        self.on_failure = on_failure
        self._session = session if session is not None else requests.Session()
        self._owns_session = session is None
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="advice-fetch"
        )
        self._lock = threading.Lock()
        # Serializes settlement side effects so an older fetch never writes last.
        self._settle_lock = threading.Lock()
        self._token: Optional[CancelToken] = None
        self._state = FetchState.IDLE
        self._busy = False

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    @property
    def state(self) -> FetchState:
        with self._lock:
            return self._state

    def start(self, endpoint: Optional[str] = None) -> concurrent.futures.Future:
        """Dispatch a fetch and return a future resolving to its FetchOutcome."""
        token = CancelToken()
        with self._lock:
            if self._token is not None:
                logger.debug("Cancelling outstanding advice fetch")
                self._token.cancel()
            self._token = token
            self._state = FetchState.LOADING
            self._busy = True
        return self._executor.submit(self._run, token, endpoint or self.endpoint)

    def fetch(self, endpoint: Optional[str] = None) -> FetchOutcome:
        return self.start(endpoint).result()

    def cancel(self) -> None:
        """Abort the outstanding fetch, if any."""
        with self._lock:
            if self._token is None:
                return
            self._token.cancel()
            self._token = None
            self._state = FetchState.CANCELLED
            self._busy = False
        logger.debug("Advice fetch cancelled")

    def close(self) -> None:
        self.cancel()
        self._executor.shutdown(wait=False)
        if self._owns_session:
            self._session.close()

    def _settle(self, token: CancelToken, state: FetchState) -> bool:
        """Record the settlement of ``token``; False if it was cancelled."""
        with self._lock:
            if token.cancelled:
                return False
            self._token = None
            self._state = state
            self._busy = False
            return True

    def _run(self, token: CancelToken, endpoint: str) -> FetchOutcome:
        cancelled = FetchOutcome(state=FetchState.CANCELLED)
        if token.cancelled:
            return cancelled

        try:
            advice = fetch_advice(endpoint, session=self._session, timeout=self.timeout)
        except AdviceError as exc:
            with self._settle_lock:
                if not self._settle(token, FetchState.FAILURE):
                    logger.debug("Ignoring failure of a cancelled fetch: %s", exc)
                    return cancelled
                if self.on_failure is not None:
                    self.on_failure(exc.kind)
            return FetchOutcome(state=FetchState.FAILURE, error=exc.kind)

        with self._settle_lock:
            if token.cancelled:
                logger.debug("Ignoring response of a cancelled fetch")
                return cancelled

            # The token stays current (and busy stays set) until the write lands.
            if self.cache is not None:
                try:
                    self.cache.save(advice)
                except Exception:
                    logger.exception("Failed to store advice of the day")

            if not self._settle(token, FetchState.SUCCESS):
                logger.debug("Fetch was superseded while storing its advice")
                return cancelled
            if self.on_success is not None:
                self.on_success(advice)
        return FetchOutcome(state=FetchState.SUCCESS, advice=advice)
