"""Site builder — generates page props through the cache, or live in preview mode."""

from __future__ import annotations

import logging
import time
from functools import partial
from typing import TYPE_CHECKING

from space_travelling.errors import ContentRequestError
from space_travelling.models.post import Redirect
from space_travelling.pages.cache import PageCache
from space_travelling.prismic.client import create_content_client
from space_travelling.services.posts import get_home_props, get_post_props, get_static_paths
from space_travelling.services.preview import clear_preview

if TYPE_CHECKING:
    import httpx
    from fastapi import Request

    from space_travelling.config import Settings
    from space_travelling.models.post import HomeProps, PostProps
    from space_travelling.prismic.client import ContentClient

logger = logging.getLogger(__name__)

HOME_KEY = "/"
PREVIEW_CACHE_CONTROL = "private, no-cache, no-store, max-age=0, must-revalidate"


def post_key(slug: str) -> str:
    return f"/post/{slug}"


class SiteBuilder:
    """Owns the page cache and produces props for the list and detail pages.

    Published pages go through the cache. Requests carrying a preview session
    are generated on every request against the preview ref and never cached.
    A preview ref the content API no longer accepts ends the preview session
    and the published page is served instead.
    """

    def __init__(self, settings: Settings, http: httpx.AsyncClient, cache: PageCache | None = None) -> None:
        self._settings = settings
        self._http = http
        self.cache = cache or PageCache(
            settings.site.revalidate_seconds,
            max_entries=settings.site.max_cached_pages,
        )

    def client(self, request: Request | None = None) -> ContentClient:
        return create_content_client(self._settings.prismic, request, http=self._http)

    def cache_control(self, *, preview: bool) -> str:
        if preview:
            return PREVIEW_CACHE_CONTROL
        return f"s-maxage={self._settings.site.revalidate_seconds}, stale-while-revalidate"

    def _end_preview(self, request: Request | None, exc: ContentRequestError) -> None:
        logger.warning("Preview ref rejected, leaving preview — status=%d", exc.status_code)
        if request is not None:
            clear_preview(request)

    async def home(self, request: Request | None = None) -> HomeProps:
        page_size = self._settings.site.page_size
        client = self.client(request)
        if client.default_ref:
            try:
                return await get_home_props(client, page_size=page_size, ref=client.default_ref, preview=True)
            except ContentRequestError as exc:
                self._end_preview(request, exc)

        result = await self.cache.get(
            HOME_KEY,
            partial(get_home_props, self.client(), page_size=page_size),
        )
        return result.value

    async def post(self, slug: str, request: Request | None = None) -> PostProps | Redirect | None:
        """Return detail props, a redirect, or None while a fallback page is still generating."""
        client = self.client(request)
        if client.default_ref:
            try:
                return await get_post_props(client, slug, ref=client.default_ref, preview=True)
            except ContentRequestError as exc:
                self._end_preview(request, exc)

        key = post_key(slug)
        result = await self.cache.get(
            key,
            partial(get_post_props, self.client(), slug),
            fallback_wait=self._settings.site.fallback_wait_seconds,
        )
        if result.pending:
            return None
        # Unknown slugs are not kept, so arbitrary paths cannot fill the cache.
        if isinstance(result.value, Redirect):
            self.cache.invalidate(key)
        return result.value

    async def prebuild(self) -> int:
        """Generate the home page and every known post page. Returns the page count."""
        started_at = time.monotonic()
        client = self.client()
        await self.cache.generate(
            HOME_KEY,
            partial(get_home_props, client, page_size=self._settings.site.page_size),
        )
        paths = await get_static_paths(client)
        for path in paths:
            slug = path.removeprefix("/post/")
            await self.cache.generate(path, partial(get_post_props, self.client(), slug))
        logger.info(
            "Prebuild complete — pages=%d duration_ms=%.0f",
            len(paths) + 1,
            (time.monotonic() - started_at) * 1000,
        )
        return len(paths) + 1
