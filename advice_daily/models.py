"""Shared data models for advice_daily."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Advice:
    """A single advice slip as shown on screen."""

    text: str
    id: Optional[int] = None

    def to_json(self) -> str:
        return json.dumps({"text": self.text, "id": self.id}, ensure_ascii=False)


@dataclass(frozen=True)
class DailyCacheEntry:
    """Persisted advice of the day and the calendar date it was stored on."""

    date_stamp: str
    advice: Advice


class ErrorKind(enum.Enum):
    """User-visible error categories and their notification text."""

    NETWORK_ERROR = "Network error"
    EMPTY_RESULT = "No advice found"
    COPY_FAILED = "Copy failed"

    @property
    def message(self) -> str:
        return self.value


class FetchState(enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class FetchOutcome:
    """Settlement of a single fetch."""

    state: FetchState
    advice: Optional[Advice] = None
    error: Optional[ErrorKind] = None


@dataclass(frozen=True)
class Notification:
    """Transient message that dismisses itself at ``expires_at``."""

    message: str
    severity: str
    expires_at: datetime

    def is_active(self, now: datetime) -> bool:
        return now < self.expires_at
