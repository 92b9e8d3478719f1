"""Async Prismic REST client and its factory."""

from __future__ import annotations

import asyncio
import logging
import secrets
from typing import TYPE_CHECKING, Any

import httpx

from space_travelling.errors import (
    ContentRequestError,
    InvalidCursorError,
    UpstreamUnavailableError,
)
from space_travelling.models.post import Document, SearchResponse
from space_travelling.prismic.predicates import at, build_query
from space_travelling.services.preview import get_preview_ref

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from fastapi import Request

    from space_travelling.config import PrismicConfig

logger = logging.getLogger(__name__)

_BASE_RETRY_DELAY_SECONDS = 0.25
_MAX_RETRY_DELAY_SECONDS = 4.0
_JITTER_SCALE = 1000
_SERVER_ERROR = 500


def _compute_retry_delay_seconds(attempt: int) -> float:
    """Return bounded exponential backoff delay with jitter."""
    base_delay = _BASE_RETRY_DELAY_SECONDS * (2 ** min(attempt, 10))
    jitter_ratio = secrets.randbelow(_JITTER_SCALE) / _JITTER_SCALE
    return min(
        _MAX_RETRY_DELAY_SECONDS,
        base_delay + (base_delay * jitter_ratio),
    )


class ContentClient:
    """Read-only client for a single Prismic repository.

    The access token is appended to every request and never logged. A default
    ``ref`` (the preview ref carried by an editor's session) applies to every
    query that does not pass its own.
    """

    def __init__(
        self,
        config: PrismicConfig,
        *,
        ref: str | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._endpoint = config.endpoint.rstrip("/")
        self._default_ref = ref
        self._http = http or httpx.AsyncClient(timeout=config.timeout_seconds)
        self._owns_http = http is None
        self._master_ref: str | None = None

    def __repr__(self) -> str:
        return f"ContentClient(endpoint={self._endpoint!r}, ref={self._default_ref!r})"

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def default_ref(self) -> str | None:
        return self._default_ref

    async def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> ContentClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET ``url`` with retries on transport errors and 5xx responses."""
        query = dict(params or {})
        if self._config.access_token:
            query["access_token"] = self._config.access_token
        request_url = httpx.URL(url).copy_merge_params(query)
        path = request_url.path

        last_error: str = ""
        last_status: int | None = None
        attempts = self._config.max_retries + 1
        for attempt in range(attempts):
            try:
                response = await self._http.get(request_url, timeout=self._config.timeout_seconds)
            except httpx.TransportError as exc:
                last_error = f"{type(exc).__name__}: {exc}"
                last_status = None
            else:
                if response.status_code >= _SERVER_ERROR:
                    last_error = f"HTTP {response.status_code}"
                    last_status = response.status_code
                elif response.is_error:
                    logger.info(
                        "Content API rejected request — path=%s status=%d",
                        path,
                        response.status_code,
                    )
                    raise ContentRequestError(
                        f"Content API returned HTTP {response.status_code} for {path}",
                        status_code=response.status_code,
                    )
                else:
                    return response.json()

            if attempt + 1 < attempts:
                delay = _compute_retry_delay_seconds(attempt)
                logger.warning(
                    "Content API request failed — path=%s error=%s; retrying in %.2fs (%d/%d)",
                    path,
                    last_error,
                    delay,
                    attempt + 1,
                    attempts - 1,
                )
                await asyncio.sleep(delay)

        logger.error("Content API unavailable — path=%s error=%s attempts=%d", path, last_error, attempts)
        raise UpstreamUnavailableError(
            f"Content API unavailable after {attempts} attempt(s): {last_error}",
            status_code=last_status,
        )

    async def get_master_ref(self) -> str:
        """Return the repository's published content ref."""
        if self._master_ref is None:
            api = await self._get_json(self._endpoint)
            for ref in api.get("refs", []):
                if ref.get("isMasterRef"):
                    self._master_ref = ref["ref"]
                    break
            else:
                raise UpstreamUnavailableError("Content API returned no master ref")
        return self._master_ref

    async def _resolve_ref(self, ref: str | None) -> str:
        return ref or self._default_ref or await self.get_master_ref()

    async def query(
        self,
        predicates: str | Iterable[str],
        *,
        page_size: int | None = None,
        page: int | None = None,
        orderings: str | None = None,
        after: str | None = None,
        ref: str | None = None,
    ) -> SearchResponse:
        """Run a ``documents/search`` query and return one page of results."""
        params: dict[str, Any] = {
            "ref": await self._resolve_ref(ref),
            "q": build_query(predicates),
        }
        if page_size is not None:
            params["pageSize"] = page_size
        if page is not None:
            params["page"] = page
        if orderings:
            params["orderings"] = orderings
        if after:
            params["after"] = after

        data = await self._get_json(f"{self._endpoint}/documents/search", params)
        response = SearchResponse.model_validate(data)
        logger.debug(
            "Query complete — q=%s page=%d results=%d next=%s",
            params["q"],
            response.page,
            len(response.results),
            response.next_page is not None,
        )
        return response

    async def query_all(
        self,
        predicates: str | Iterable[str],
        *,
        orderings: str | None = None,
        ref: str | None = None,
        page_size: int = 100,
    ) -> list[Document]:
        """Follow every result page of a query and return all documents."""
        if not isinstance(predicates, str):
            predicates = list(predicates)
        documents: list[Document] = []
        page = 1
        while True:
            response = await self.query(
                predicates, page_size=page_size, page=page, orderings=orderings, ref=ref
            )
            documents.extend(response.results)
            if response.next_page is None or page >= response.total_pages:
                return documents
            page += 1

    async def get_by_uid(self, document_type: str, uid: str, *, ref: str | None = None) -> Document | None:
        """Fetch a document by its type-scoped unique identifier."""
        response = await self.query(at(f"my.{document_type}.uid", uid), page_size=1, ref=ref)
        return response.results[0] if response.results else None

    async def get_by_id(self, document_id: str, *, ref: str | None = None) -> Document | None:
        response = await self.query(at("document.id", document_id), page_size=1, ref=ref)
        return response.results[0] if response.results else None

    def owns_cursor(self, cursor: str) -> bool:
        """Return True when ``cursor`` points at this client's endpoint."""
        return cursor.startswith(f"{self._endpoint}/")

    async def fetch_page(self, cursor: str) -> SearchResponse:
        """Fetch the page an opaque ``next_page`` cursor points to."""
        if not self.owns_cursor(cursor):
            raise InvalidCursorError("Cursor does not belong to the configured content API")
        data = await self._get_json(cursor)
        return SearchResponse.model_validate(data)

    def get_preview_resolver(self, token: str, document_id: str) -> PreviewResolver:
        return PreviewResolver(self, token, document_id)


class PreviewResolver:
    """Resolve an editor preview token to the site path of the previewed document."""

    def __init__(self, client: ContentClient, token: str, document_id: str) -> None:
        self._client = client
        self._token = token
        self._document_id = document_id

    async def resolve(self, link_resolver: Callable[[Document], str], default_url: str | None = None) -> str | None:
        """Return the resolved path, ``default_url`` when no document matched,
        or None when the content API refuses the preview ref.
        """
        if not self._token:
            return None
        if not self._document_id:
            return default_url
        try:
            document = await self._client.get_by_id(self._document_id, ref=self._token)
        except ContentRequestError:
            return None
        if document is None:
            return default_url
        return link_resolver(document)


def create_content_client(
    config: PrismicConfig,
    request: Request | None = None,
    *,
    http: httpx.AsyncClient | None = None,
) -> ContentClient:
    """Create a content client, scoped to the request's preview session when given one."""
    ref = None
    if request is not None:
        ref = get_preview_ref(request)
        if http is None:
            http = getattr(request.app.state, "http", None)
    logger.debug("Content client created — endpoint=%s preview=%s", config.endpoint, ref is not None)
    return ContentClient(config, ref=ref, http=http)


def public_cursor(cursor: str | None) -> str | None:
    """Drop the access token from a ``next_page`` cursor before it leaves the server.

    The client appends the token again whenever it follows the cursor.
    """
    if cursor is None:
        return None
    return str(httpx.URL(cursor).copy_remove_param("access_token"))
