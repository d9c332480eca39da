from datetime import datetime, timezone

from advice_daily.models import Advice, Notification
from advice_daily.renderers import build_screen_text
from advice_daily.screen import ScreenState


def test_renders_advice_with_slip_label():
    text = build_screen_text(
        ScreenState(advice=Advice(text="Be kind.", id=42), loading=False, notification=None)
    )

    assert text.startswith("Advice of the Day\n")
    assert "Slip 42" in text
    assert "“Be kind.”" in text
    assert "Refresh" not in text


def test_renders_today_label_without_id():
    text = build_screen_text(
        ScreenState(advice=Advice(text="Rest."), loading=False, notification=None)
    )

    assert "Today" in text
    assert "Slip" not in text


def test_renders_loading_instead_of_advice():
    text = build_screen_text(
        ScreenState(advice=Advice(text="Old", id=1), loading=True, notification=None)
    )

    assert "Fetching advice" in text
    assert "Old" not in text


def test_renders_notification_and_commands():
    notification = Notification(
        message="Network error",
        severity="error",
        expires_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    text = build_screen_text(
        ScreenState(advice=None, loading=False, notification=notification),
        interactive=True,
    )

    assert "[error] Network error" in text
    assert "[r] Refresh  [c] Copy  [q] Quit" in text


def test_advice_text_is_not_escaped():
    text = build_screen_text(
        ScreenState(advice=Advice(text="Don't <panic> & breathe"), loading=False, notification=None)
    )

    assert "Don't <panic> & breathe" in text
