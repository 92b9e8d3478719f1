"""Shared fixtures — an in-memory Prismic API served through ``httpx.MockTransport``."""

from __future__ import annotations

import math
import re
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from space_travelling.app import create_app
from space_travelling.config import AppConfig, PrismicConfig, Settings, SiteConfig
from space_travelling.prismic.client import ContentClient

ENDPOINT = "https://example.cdn.prismic.io/api/v2"
TOKEN = "secret-token"
MASTER_REF = "master-ref"
PREVIEW_REF = "preview-ref"

_AT = re.compile(r'at\(([\w.]+), "([^"]*)"\)')
_ORDERING = re.compile(r"\[document\.(\w+)( desc)?\]")


def make_post(
    doc_id: str,
    uid: str,
    *,
    title: str = "",
    subtitle: str = "",
    author: str = "",
    first: str | None = "2021-01-01T10:00:00+0000",
    last: str | None = None,
    content: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a raw ``posts`` document as the content API returns it."""
    return {
        "id": doc_id,
        "uid": uid,
        "type": "posts",
        "first_publication_date": first,
        "last_publication_date": last or first,
        "data": {
            "title": title or uid.upper(),
            "subtitle": subtitle,
            "author": author,
            "banner": {"url": f"https://images.example.com/{uid}.png"},
            "content": content or [],
        },
    }


def paragraph(text: str, spans: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    return {"type": "paragraph", "text": text, "spans": spans or []}


class FakePrismic:
    """Answers ``GET {endpoint}`` and ``documents/search`` over a fixed document set."""

    def __init__(
        self,
        documents: list[dict[str, Any]],
        *,
        preview_documents: list[dict[str, Any]] | None = None,
    ) -> None:
        self.refs = {
            MASTER_REF: documents,
            PREVIEW_REF: preview_documents if preview_documents is not None else documents,
        }
        self.requests: list[httpx.Request] = []
        self.failures: list[httpx.Response | Exception] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failures:
            failure = self.failures.pop(0)
            if isinstance(failure, Exception):
                raise failure
            return failure
        if request.url.params.get("access_token") != TOKEN:
            return httpx.Response(401, json={"message": "invalid access token"})
        if request.url.path == "/api/v2":
            return httpx.Response(
                200,
                json={"refs": [{"id": "master", "ref": MASTER_REF, "isMasterRef": True}]},
            )
        if request.url.path == "/api/v2/documents/search":
            return self._search(request.url.params)
        return httpx.Response(404)

    def search_requests(self) -> list[httpx.QueryParams]:
        return [r.url.params for r in self.requests if r.url.path.endswith("/documents/search")]

    def _search(self, params: httpx.QueryParams) -> httpx.Response:
        ref = params.get("ref")
        if ref not in self.refs:
            return httpx.Response(404, json={"message": "ref not found"})
        documents = list(self.refs[ref])

        for field, value in _AT.findall(params.get("q", "")):
            if field == "document.type":
                documents = [d for d in documents if d["type"] == value]
            elif field == "document.id":
                documents = [d for d in documents if d["id"] == value]
            elif field.endswith(".uid"):
                documents = [d for d in documents if d.get("uid") == value]

        ordering = _ORDERING.match(params.get("orderings", ""))
        if ordering:
            key, descending = ordering.group(1), bool(ordering.group(2))
            documents.sort(key=lambda d: d.get(key) or "", reverse=descending)

        after = params.get("after")
        if after:
            ids = [d["id"] for d in documents]
            documents = documents[ids.index(after) + 1 :] if after in ids else documents

        page_size = int(params.get("pageSize", 20))
        page = int(params.get("page", 1))
        total_pages = max(1, math.ceil(len(documents) / page_size))
        results = documents[(page - 1) * page_size : page * page_size]
        next_page = None
        if page < total_pages:
            next_page = str(
                httpx.URL(
                    f"{ENDPOINT}/documents/search",
                    params={**dict(params), "page": page + 1},
                )
            )
        return httpx.Response(
            200,
            json={
                "page": page,
                "results_per_page": page_size,
                "total_results_size": len(documents),
                "total_pages": total_pages,
                "next_page": next_page,
                "prev_page": None,
                "results": results,
            },
        )


@pytest.fixture
def posts() -> list[dict[str, Any]]:
    return [
        make_post("d1", "first-post", title="First", first="2021-01-01T10:00:00+0000"),
        make_post("d2", "second-post", title="Second", first="2021-02-01T10:00:00+0000"),
        make_post(
            "d3",
            "third-post",
            title="Third",
            first="2021-03-01T10:00:00+0000",
            last="2021-03-05T12:30:00+0000",
        ),
    ]


@pytest.fixture
def fake_prismic(posts: list[dict[str, Any]]) -> FakePrismic:
    return FakePrismic(posts)


@pytest.fixture
def prismic_config() -> PrismicConfig:
    return PrismicConfig(endpoint=ENDPOINT, access_token=TOKEN, timeout_seconds=1.0, max_retries=2)


@pytest.fixture
def settings(prismic_config: PrismicConfig) -> Settings:
    return Settings(
        prismic=prismic_config,
        site=SiteConfig(revalidate_seconds=1800, page_size=2, fallback_wait_seconds=1.0, prebuild_pages=False),
        app=AppConfig(env="development", log_level="INFO", secret_key="test-secret", slow_request_ms=800),
    )


@pytest.fixture
def http(fake_prismic: FakePrismic) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_prismic))


@pytest.fixture
def content_client(prismic_config: PrismicConfig, http: httpx.AsyncClient) -> ContentClient:
    return ContentClient(prismic_config, http=http)


@pytest.fixture
def post_factory():
    return make_post


@pytest.fixture
def paragraph_factory():
    return paragraph


@pytest.fixture
def prismic_factory():
    return FakePrismic


@pytest.fixture
def no_sleep():
    """Skip retry backoff delays."""
    with patch("space_travelling.prismic.client.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


@pytest.fixture
def site_client(settings: Settings, http: httpx.AsyncClient):
    """A running app wired to the fake content API."""
    with (
        patch("space_travelling.app.load_settings", return_value=settings),
        patch("space_travelling.app.configure_logging"),
        patch("space_travelling.app.httpx.AsyncClient", return_value=http),
    ):
        app = create_app()
        with TestClient(app) as client:
            yield client
