"""Structured rich text — flattening to plain text and rendering to HTML.

Blocks follow the content API's structured-text shape: a ``type`` (``paragraph``,
``heading1``..``heading6``, ``preformatted``, ``list-item``, ``o-list-item``,
``image``, ``embed``), the block ``text`` and inline ``spans`` that mark
``strong``, ``em``, ``hyperlink`` or ``label`` ranges of that text.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from itertools import groupby

from markupsafe import Markup, escape

from space_travelling.models.post import Document, RichTextBlock, RichTextSpan
from space_travelling.services.preview import link_resolver

_HEADINGS = {f"heading{level}": f"h{level}" for level in range(1, 7)}
_LIST_TAGS = {"list-item": "ul", "o-list-item": "ol"}
_FORBIDDEN_PROTOCOLS = ("javascript:", "data:", "vbscript:")


def as_text(blocks: Iterable[RichTextBlock], separator: str = " ") -> str:
    """Join the text of every block. Image and embed blocks contribute nothing."""
    return separator.join(block.text for block in blocks if block.text)


def _link_href(span: RichTextSpan) -> str | None:
    data = span.data or {}
    if data.get("link_type") == "Document":
        return link_resolver(
            Document(id=data.get("id", ""), uid=data.get("uid"), type=data.get("type", ""))
        )
    url = str(data.get("url") or "")
    if not url or url.strip().lower().startswith(_FORBIDDEN_PROTOCOLS):
        return None
    return url


def _open_tag(span: RichTextSpan) -> tuple[str, str]:
    if span.type == "strong":
        return "<strong>", "</strong>"
    if span.type == "em":
        return "<em>", "</em>"
    if span.type == "hyperlink":
        href = _link_href(span)
        if href is None:
            return "", ""
        if (span.data or {}).get("target") == "_blank":
            return (
                f'<a href="{escape(href)}" target="_blank" rel="noopener noreferrer">',
                "</a>",
            )
        return f'<a href="{escape(href)}">', "</a>"
    if span.type == "label":
        label = (span.data or {}).get("label", "")
        return f'<span class="{escape(label)}">', "</span>"
    return "", ""


def _render_spans(text: str, spans: Sequence[RichTextSpan]) -> str:
    """Render ``text`` with its spans applied.

    Each segment between span boundaries is wrapped in every span covering it,
    which keeps overlapping spans well nested.
    """
    if not spans:
        return str(escape(text)).replace("\n", "<br />")

    edges = {0, len(text)} | {s.start for s in spans} | {s.end for s in spans}
    boundaries = sorted(edge for edge in edges if 0 <= edge <= len(text))
    parts: list[str] = []
    for start, end in zip(boundaries, boundaries[1:]):
        if start >= end:
            continue
        segment = str(escape(text[start:end])).replace("\n", "<br />")
        active = [s for s in spans if s.start <= start and s.end >= end]
        for span in reversed(active):
            opening, closing = _open_tag(span)
            segment = f"{opening}{segment}{closing}"
        parts.append(segment)
    return "".join(parts)


def _render_block(block: RichTextBlock) -> str:
    if block.type in _HEADINGS:
        tag = _HEADINGS[block.type]
        return f"<{tag}>{_render_spans(block.text, block.spans)}</{tag}>"
    if block.type == "paragraph":
        return f"<p>{_render_spans(block.text, block.spans)}</p>"
    if block.type == "preformatted":
        return f"<pre>{escape(block.text)}</pre>"
    if block.type in _LIST_TAGS:
        return f"<li>{_render_spans(block.text, block.spans)}</li>"
    if block.type == "image":
        if not block.url:
            return ""
        return f'<p class="block-img"><img src="{escape(block.url)}" alt="{escape(block.alt or "")}" /></p>'
    if block.type == "embed":
        oembed = block.oembed or {}
        embed_html = oembed.get("html")
        if not embed_html:
            return ""
        return (
            f'<div data-oembed="{escape(oembed.get("embed_url", ""))}" '
            f'data-oembed-type="{escape(oembed.get("type", ""))}">{embed_html}</div>'
        )
    return f"<p>{_render_spans(block.text, block.spans)}</p>"


def as_html(blocks: Iterable[RichTextBlock]) -> Markup:
    """Render blocks to HTML. Consecutive list items are grouped into one list."""
    parts: list[str] = []
    for block_type, group in groupby(blocks, key=lambda block: block.type):
        if block_type in _LIST_TAGS:
            tag = _LIST_TAGS[block_type]
            items = "".join(_render_block(block) for block in group)
            parts.append(f"<{tag}>{items}</{tag}>")
        else:
            parts.extend(_render_block(block) for block in group)
    return Markup("".join(parts))
