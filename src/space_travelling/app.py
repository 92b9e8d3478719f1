"""FastAPI application factory and lifespan."""

from __future__ import annotations

import logging
import secrets
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.middleware.sessions import SessionMiddleware

from space_travelling.config import load_settings
from space_travelling.errors import SpaceTravellingError, UpstreamUnavailableError
from space_travelling.logging import configure_logging
from space_travelling.pages.filters import FILTERS
from space_travelling.pages.site import SiteBuilder
from space_travelling.routes import health, home, post, preview

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from starlette.responses import Response

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"
SESSION_COOKIE = "space_travelling_session"


def create_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters.update(FILTERS)
    return templates


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = app.state.settings
    http = httpx.AsyncClient(timeout=settings.prismic.timeout_seconds)
    app.state.http = http
    app.state.builder = SiteBuilder(settings, http)

    if settings.site.prebuild_pages:
        try:
            await app.state.builder.prebuild()
        except SpaceTravellingError:
            logger.exception("Prebuild failed — pages will be generated on demand")

    logger.info("Space Travelling started — env=%s", settings.app.env)
    yield

    await http.aclose()
    logger.info("Space Travelling shutdown complete")


async def upstream_unavailable_handler(request: Request, exc: UpstreamUnavailableError) -> Response:
    logger.error("Content API unavailable — path=%s error=%s", request.url.path, exc)
    if request.url.path.startswith("/api/"):
        return JSONResponse({"message": "Content API unavailable"}, status_code=503)
    return request.app.state.templates.TemplateResponse(
        request,
        "error.html",
        {"message": "O conteúdo está indisponível no momento."},
        status_code=503,
    )


def create_app() -> FastAPI:
    """Build the application. Missing configuration is fatal here."""
    settings = load_settings()
    configure_logging(settings.app.log_level)
    settings.validate()

    app = FastAPI(
        title="Space Travelling",
        lifespan=lifespan,
        docs_url="/docs" if settings.app.is_development else None,
        redoc_url=None,
    )
    app.state.settings = settings
    app.state.templates = create_templates()

    secret_key = settings.app.secret_key
    if not secret_key:
        logger.warning("SECRET_KEY is not set — using an ephemeral key, preview sessions will not survive restarts")
        secret_key = secrets.token_urlsafe(32)
    app.add_middleware(
        SessionMiddleware,
        secret_key=secret_key,
        session_cookie=SESSION_COOKIE,
        same_site="lax",
        https_only=not settings.app.is_development,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        started_at = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - started_at) * 1000
        log = logger.warning if duration_ms >= settings.app.slow_request_ms else logger.info
        log(
            "%s %s %d duration_ms=%.0f",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    app.add_exception_handler(UpstreamUnavailableError, upstream_unavailable_handler)
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(home.router)
    app.include_router(post.router)
    app.include_router(preview.router)
    app.include_router(health.router)
    return app


def main() -> None:
    """Entry point for the web process."""
    import uvicorn  # noqa: PLC0415

    settings = load_settings()
    uvicorn.run(
        "space_travelling.app:create_app",
        factory=True,
        host=settings.app.host,
        port=settings.app.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
