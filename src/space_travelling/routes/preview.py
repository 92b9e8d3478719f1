"""Preview routes — enter and exit editor preview mode."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from space_travelling.services.preview import clear_preview, resolve_preview, set_preview_ref

router = APIRouter(prefix="/api", tags=["preview"])

logger = logging.getLogger(__name__)


@router.get("/preview")
async def preview(
    request: Request,
    token: Annotated[str | None, Query()] = None,
    document_id: Annotated[str | None, Query(alias="documentId")] = None,
) -> Response:
    """Validate an editor's preview token and redirect to the previewed page."""
    client = request.app.state.builder.client()
    redirect_url = await resolve_preview(client, token, document_id)
    if not redirect_url or not token:
        return JSONResponse({"message": "Invalid token"}, status_code=401)

    set_preview_ref(request, token)
    return RedirectResponse(redirect_url, status_code=302)


@router.get("/exit-preview")
async def exit_preview(request: Request) -> RedirectResponse:
    """Leave preview mode and return to the home page."""
    if clear_preview(request):
        logger.info("Preview session cleared")
    return RedirectResponse("/", status_code=302)
