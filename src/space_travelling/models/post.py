"""Post documents as returned by the content API, plus the page props built from them."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RichTextSpan(BaseModel):
    """Inline formatting over ``[start, end)`` of a block's text."""

    start: int
    end: int
    type: str
    data: dict[str, Any] | None = None


class RichTextBlock(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    text: str = ""
    spans: list[RichTextSpan] = Field(default_factory=list)
    url: str | None = None
    alt: str | None = None
    oembed: dict[str, Any] | None = None


class ContentSection(BaseModel):
    heading: str = ""
    body: list[RichTextBlock] = Field(default_factory=list)


class Banner(BaseModel):
    url: str = ""


class Document(BaseModel):
    """A raw document from the content API. ``data`` is left untyped."""

    id: str
    uid: str | None = None
    type: str
    first_publication_date: str | None = None
    last_publication_date: str | None = None
    data: dict[str, Any] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    """One page of a ``documents/search`` query."""

    page: int = 1
    results_per_page: int = 0
    total_results_size: int = 0
    total_pages: int = 0
    next_page: str | None = None
    prev_page: str | None = None
    results: list[Document] = Field(default_factory=list)


class PostSummaryData(BaseModel):
    title: str = ""
    subtitle: str = ""
    author: str = ""


class PostSummary(BaseModel):
    """The fields of a post shown on the list page."""

    uid: str | None = None
    first_publication_date: str | None = None
    data: PostSummaryData = Field(default_factory=PostSummaryData)

    @classmethod
    def from_document(cls, document: Document) -> PostSummary:
        return cls(
            uid=document.uid,
            first_publication_date=document.first_publication_date,
            data=PostSummaryData(
                title=document.data.get("title") or "",
                subtitle=document.data.get("subtitle") or "",
                author=document.data.get("author") or "",
            ),
        )


class PostData(BaseModel):
    title: str = ""
    subtitle: str = ""
    author: str = ""
    banner: Banner = Field(default_factory=Banner)
    content: list[ContentSection] = Field(default_factory=list)


class Post(BaseModel):
    id: str
    uid: str
    first_publication_date: str | None = None
    last_publication_date: str | None = None
    data: PostData = Field(default_factory=PostData)

    @classmethod
    def from_document(cls, document: Document) -> Post:
        return cls(
            id=document.id,
            uid=document.uid or "",
            first_publication_date=document.first_publication_date,
            last_publication_date=document.last_publication_date,
            data=PostData.model_validate(
                {
                    "title": document.data.get("title") or "",
                    "subtitle": document.data.get("subtitle") or "",
                    "author": document.data.get("author") or "",
                    "banner": document.data.get("banner") or {},
                    "content": document.data.get("content") or [],
                }
            ),
        )

    @property
    def was_edited(self) -> bool:
        return self.first_publication_date != self.last_publication_date


class PostPagination(BaseModel):
    results: list[PostSummary] = Field(default_factory=list)
    next_page: str | None = None


class HomeProps(BaseModel):
    posts_pagination: PostPagination
    preview: bool = False


class PostProps(BaseModel):
    post: Post
    next_post: PostSummary | None = None
    prev_post: PostSummary | None = None
    reading_time: int = 0
    preview: bool = False


class Redirect(BaseModel):
    """Generation outcome that sends the visitor elsewhere instead of rendering."""

    destination: str
    permanent: bool = False

    @property
    def status_code(self) -> int:
        return 308 if self.permanent else 307
