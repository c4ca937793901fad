"""Common Jinja helpers and filters for the quiz templates."""

from __future__ import annotations

import html
from typing import Any

import markdown


def render_markdown(text: str | None) -> str:
    """Render model-written text (reasoning, feedback) as HTML, escaping raw markup first."""
    if not text:
        return ""
    return markdown.markdown(html.escape(text.strip()))


def percent(value: float | int | None) -> str:
    if value is None:
        return "-"
    return f"{value:g}%"


def register_template_filters(env: Any) -> None:
    """Attach shared filters to a Jinja environment exactly once."""
    env.filters.setdefault("markdown", render_markdown)
    env.filters.setdefault("percent", percent)
