"""Query predicate and ordering expressions for ``documents/search``.

Predicates are rendered in the API's own syntax, e.g. ``[at(document.type, "posts")]``,
and a query wraps one or more predicates in an outer pair of brackets.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence


def _encode(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Sequence) and not isinstance(value, str):
        return "[" + ", ".join(_encode(item) for item in value) + "]"
    return json.dumps(str(value))


def at(path: str, value: object) -> str:
    """Match documents whose ``path`` equals ``value``."""
    return f"[at({path}, {_encode(value)})]"


def build_query(predicates: str | Iterable[str]) -> str:
    if isinstance(predicates, str):
        predicates = [predicates]
    return "[" + "".join(predicates) + "]"


def ordering(field: str, *, descending: bool = False) -> str:
    """Render an ordering expression such as ``[document.first_publication_date desc]``."""
    return f"[{field} desc]" if descending else f"[{field}]"
