import threading
from datetime import date

import pytest
import requests

from advice_daily import db
from advice_daily.daily_cache import DailyCache


class FakeResponse:
    def __init__(self, body=None, status_code=200):
        self._body = body
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSession:
    """Records requests and replays queued responses or exceptions."""

    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        result = self._responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        pass


def slip(text, slip_id=1):
    return FakeResponse({"slip": {"advice": text, "id": slip_id}})


@pytest.fixture
def session_factory():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = db.init_engine("sqlite:///:memory:")
    return db.get_session_factory(engine)


@pytest.fixture
def today():
    """Mutable calendar date used by the cache clock."""
    return {"value": date(2024, 5, 1)}


@pytest.fixture
def cache(session_factory, today):
    return DailyCache(session_factory, today=lambda: today["value"])


class BlockingSession:
    """First request blocks until released; later ones answer immediately."""

    def __init__(self, first, rest):
        self.first = first
        self.rest = rest
        self.started = threading.Event()
        self.release = threading.Event()
        self._count = 0
        self._lock = threading.Lock()

    def get(self, url, headers=None, timeout=None):
        with self._lock:
            self._count += 1
            index = self._count
        if index == 1:
            self.started.set()
            self.release.wait(5)
            result = self.first
        else:
            result = self.rest
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        pass

