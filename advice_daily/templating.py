"""Jinja2 environment for advice_daily templates."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

_ENV: Environment | None = None


def _slip_label(advice_id: int | None) -> str:
    """Label shown above the advice text."""
    return f"Slip {advice_id}" if advice_id else "Today"


def get_environment() -> Environment:
    """Return a cached Jinja environment configured for package templates."""
    global _ENV
    if _ENV is None:
        template_dir = Path(__file__).resolve().parent / "templates"
        loader = FileSystemLoader(str(template_dir))
        _ENV = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        _ENV.filters["slip_label"] = _slip_label
    return _ENV
