from datetime import date

from advice_daily import db
from advice_daily.daily_cache import (
    STORAGE_ADVICE,
    STORAGE_DATE,
    parse_advice_payload,
)
from advice_daily.models import Advice, DailyCacheEntry


def _store(session_factory, key, value):
    with session_factory() as session:
        db.set_value(session, key, value)


def test_load_misses_when_nothing_is_stored(cache):
    assert cache.load() is None


def test_save_then_load_same_day_returns_advice(cache):
    advice = Advice(text="Be kind.", id=42)
    cache.save(advice)

    assert cache.load() == advice


def test_save_writes_payload_and_date(cache, session_factory):
    cache.save(Advice(text="Be kind.", id=42))

    with session_factory() as session:
        assert db.get_value(session, STORAGE_DATE) == "2024-05-01"
        assert db.get_value(session, STORAGE_ADVICE) == '{"text": "Be kind.", "id": 42}'


def test_load_misses_on_another_day(cache, today):
    cache.save(Advice(text="Be kind.", id=42))
    today["value"] = date(2024, 5, 2)

    assert cache.load() is None


def test_invalidate_forces_miss_and_keeps_payload(cache, session_factory):
    cache.save(Advice(text="Be kind.", id=42))
    cache.invalidate()

    assert cache.load() is None
    with session_factory() as session:
        assert db.get_value(session, STORAGE_DATE) is None
        assert db.get_value(session, STORAGE_ADVICE) is not None


def test_invalidate_on_empty_cache(cache):
    cache.invalidate()
    assert cache.load() is None


def test_load_treats_malformed_payload_as_miss(cache, session_factory):
    _store(session_factory, STORAGE_DATE, "2024-05-01")

    for raw in ("not json", "[]", '"text"', '{"id": 3}', '{"text": ""}', '{"text": 5}'):
        _store(session_factory, STORAGE_ADVICE, raw)
        assert cache.load() is None, raw


def test_load_hit_without_id(cache, session_factory):
    _store(session_factory, STORAGE_DATE, "2024-05-01")
    _store(session_factory, STORAGE_ADVICE, '{"text": "Drink water."}')

    assert cache.load() == Advice(text="Drink water.", id=None)


def test_entry_ignores_date_check(cache, today):
    assert cache.entry() is None

    cache.save(Advice(text="Be kind.", id=42))
    today["value"] = date(2024, 6, 1)

    assert cache.entry() == DailyCacheEntry(
        date_stamp="2024-05-01", advice=Advice(text="Be kind.", id=42)
    )


def test_parse_advice_payload_drops_non_integer_id():
    assert parse_advice_payload('{"text": "a", "id": "7"}') == Advice(text="a")
    assert parse_advice_payload('{"text": "a", "id": true}') == Advice(text="a")
    assert parse_advice_payload(None) is None
