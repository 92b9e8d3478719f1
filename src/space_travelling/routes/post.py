"""Post detail route."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from space_travelling.models.post import Redirect

router = APIRouter(tags=["post"])


@router.get("/post/{slug}", response_class=HTMLResponse)
async def post_detail(request: Request, slug: str) -> Response:
    """Render a post, the loading placeholder while it generates, or redirect home."""
    builder = request.app.state.builder
    templates = request.app.state.templates
    result = await builder.post(slug, request)

    if result is None:
        response = templates.TemplateResponse(request, "loading.html", {})
        response.headers["Cache-Control"] = "no-store"
        return response
    if isinstance(result, Redirect):
        return RedirectResponse(result.destination, status_code=result.status_code)

    response = templates.TemplateResponse(
        request,
        "post.html",
        {
            "post": result.post,
            "prev_post": result.prev_post,
            "next_post": result.next_post,
            "reading_time": result.reading_time,
            "preview": result.preview,
        },
    )
    response.headers["Cache-Control"] = builder.cache_control(preview=result.preview)
    return response
