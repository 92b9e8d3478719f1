"""Jinja2 filters used by the page templates."""

from __future__ import annotations

from datetime import datetime

from markupsafe import Markup

from space_travelling.models.post import RichTextBlock
from space_travelling.services.richtext import as_html

_MONTHS_PT_BR = ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez")
TITLE_PREVIEW_LENGTH = 15


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def format_date(value: str | None, *, with_time: bool = False) -> str:
    """Format an API timestamp as ``25 mar 2021`` (or ``25 mar 2021, às 19:25``)."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    text = f"{moment.day:02d} {_MONTHS_PT_BR[moment.month - 1]} {moment.year}"
    if with_time:
        text += f", às {moment.hour:02d}:{moment.minute:02d}"
    return text


def truncate_title(title: str) -> str:
    return title[:TITLE_PREVIEW_LENGTH] + "..."


def rich_text(blocks: list[RichTextBlock]) -> Markup:
    return as_html(blocks)


FILTERS = {
    "format_date": format_date,
    "truncate_title": truncate_title,
    "rich_text": rich_text,
}
