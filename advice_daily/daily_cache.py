"""Advice-of-the-day persistence on top of the key-value store."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlalchemy.orm import Session, sessionmaker

from . import db
from .models import Advice, DailyCacheEntry

logger = logging.getLogger(__name__)

STORAGE_ADVICE = "advice.daily"
STORAGE_DATE = "advice.date"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_advice_payload(raw: Optional[str]) -> Optional[Advice]:
    """Deserialize a stored payload, returning None for anything unusable."""
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        logger.debug("Stored advice payload is not valid JSON")
        return None

    if not isinstance(parsed, dict):
        return None
    text = parsed.get("text")
    if not isinstance(text, str) or not text:
        return None

    slip_id = parsed.get("id")
    if isinstance(slip_id, bool) or not isinstance(slip_id, int):
        slip_id = None
    return Advice(text=text, id=slip_id)


class DailyCache:
    """Advice of the day keyed on the current calendar date."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        today: Callable[[], date] = utc_today,
    ):
        self._session_factory = session_factory
        self._today = today

    def _today_stamp(self) -> str:
        return self._today().isoformat()

    def load(self) -> Optional[Advice]:
        """Return today's advice, or None on any kind of miss."""
        with self._session_factory() as session:
            stamp = db.get_value(session, STORAGE_DATE)
            raw = db.get_value(session, STORAGE_ADVICE)

        today = self._today_stamp()
        if stamp != today:
            logger.debug("Daily cache miss: stored date %r, today %s", stamp, today)
            return None

        advice = parse_advice_payload(raw)
        if advice is None:
            logger.debug("Daily cache miss: unusable advice payload")
            return None

        logger.info("Daily cache hit for %s", today)
        return advice

    def save(self, advice: Advice) -> None:
        with self._session_factory() as session:
            db.set_value(session, STORAGE_ADVICE, advice.to_json())
            db.set_value(session, STORAGE_DATE, self._today_stamp())
        logger.debug("Stored advice %s as advice of the day", advice.id)

    def invalidate(self) -> None:
        """Forget the date stamp so the next load misses. The payload stays."""
        with self._session_factory() as session:
            db.delete_value(session, STORAGE_DATE)
        logger.debug("Daily cache invalidated")

    def entry(self) -> Optional[DailyCacheEntry]:
        """Return whatever is stored, without the date check."""
        with self._session_factory() as session:
            stamp = db.get_value(session, STORAGE_DATE)
            raw = db.get_value(session, STORAGE_ADVICE)
        advice = parse_advice_payload(raw)
        if stamp is None or advice is None:
            return None
        return DailyCacheEntry(date_stamp=stamp, advice=advice)
