"""Editor preview — link resolution and the preview session carried in signed cookies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi import Request

    from space_travelling.models.post import Document
    from space_travelling.prismic.client import ContentClient

logger = logging.getLogger(__name__)

PREVIEW_SESSION_KEY = "preview"
POST_DOCUMENT_TYPE = "posts"


def link_resolver(document: Document) -> str:
    """Map a content document to its route on this site."""
    if document.type == POST_DOCUMENT_TYPE and document.uid:
        return f"/post/{document.uid}"
    return "/"


def _session(request: Request) -> dict[str, Any] | None:
    return request.session if "session" in request.scope else None


def get_preview_ref(request: Request) -> str | None:
    """Return the preview ref stored in the request's session, if any."""
    session = _session(request)
    if not session:
        return None
    preview = session.get(PREVIEW_SESSION_KEY)
    if isinstance(preview, dict):
        ref = preview.get("ref")
        return ref if isinstance(ref, str) and ref else None
    return None


def set_preview_ref(request: Request, ref: str) -> None:
    session = _session(request)
    if session is None:
        raise RuntimeError("SessionMiddleware is required for preview mode")
    session[PREVIEW_SESSION_KEY] = {"ref": ref}


def clear_preview(request: Request) -> bool:
    """Drop the preview session. Returns True if one was active."""
    session = _session(request)
    if not session:
        return False
    return session.pop(PREVIEW_SESSION_KEY, None) is not None


async def resolve_preview(client: ContentClient, token: str | None, document_id: str | None) -> str | None:
    """Validate ``token`` against ``document_id`` and return the destination path.

    Returns None when the preview is rejected.
    """
    if not token or not document_id:
        logger.info("Preview rejected — missing token or documentId")
        return None
    redirect_url = await client.get_preview_resolver(token, document_id).resolve(link_resolver, "/")
    if not redirect_url:
        logger.info("Preview rejected — document=%s", document_id)
        return None
    logger.info("Preview resolved — document=%s destination=%s", document_id, redirect_url)
    return redirect_url
