"""Home route — paginated post list and the "load more" endpoint."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse

from space_travelling.errors import ContentRequestError, InvalidCursorError
from space_travelling.services.posts import fetch_post_page

router = APIRouter(tags=["home"])


@router.get("/", response_class=HTMLResponse)
async def home(request: Request) -> HTMLResponse:
    """Render the first page of posts."""
    builder = request.app.state.builder
    props = await builder.home(request)
    response = request.app.state.templates.TemplateResponse(
        request,
        "home.html",
        {
            "posts": props.posts_pagination.results,
            "next_page": props.posts_pagination.next_page,
            "preview": props.preview,
        },
    )
    response.headers["Cache-Control"] = builder.cache_control(preview=props.preview)
    return response


@router.get("/api/posts")
async def more_posts(request: Request, cursor: Annotated[str, Query(min_length=1)]) -> JSONResponse:
    """Follow a pagination cursor and return the next page of posts."""
    client = request.app.state.builder.client(request)
    try:
        page = await fetch_post_page(client, cursor)
    except (InvalidCursorError, ContentRequestError):
        return JSONResponse({"message": "Invalid cursor"}, status_code=400)
    return JSONResponse(page.model_dump(mode="json"))
