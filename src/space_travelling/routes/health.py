"""Health route — liveness and page cache statistics."""

from __future__ import annotations

from fastapi import APIRouter, Request

from space_travelling import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    builder = request.app.state.builder
    return {
        "status": "ok",
        "version": __version__,
        "cached_pages": len(builder.cache),
    }
