"""Estimated reading time for a post's content."""

from __future__ import annotations

import math
from collections.abc import Iterable

from space_travelling.models.post import ContentSection
from space_travelling.services.richtext import as_text

WORDS_PER_MINUTE = 200


def count_words(text: str) -> int:
    return len(text.split())


def estimate_reading_time(content: Iterable[ContentSection]) -> int:
    """Return the estimated minutes to read ``content``.

    Words are counted across every section's heading and flattened body, then
    divided by ``WORDS_PER_MINUTE`` and rounded up. Empty content reads in 0 minutes.
    """
    total_words = 0
    for section in content:
        total_words += count_words(section.heading)
        total_words += count_words(as_text(section.body))
    return math.ceil(total_words / WORDS_PER_MINUTE)
