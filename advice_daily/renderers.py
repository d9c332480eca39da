"""Rendering helpers for the terminal screen."""

from __future__ import annotations

from .screen import ScreenState
from .templating import get_environment

TITLE = "Advice of the Day"


def build_screen_text(state: ScreenState, interactive: bool = False) -> str:
    """Render the screen state using the plain-text Jinja2 template."""
    env = get_environment()
    template = env.get_template("screen.txt.j2")
    return template.render(
        title=TITLE,
        advice=state.advice,
        loading=state.loading,
        notification=state.notification,
        interactive=interactive,
    )
