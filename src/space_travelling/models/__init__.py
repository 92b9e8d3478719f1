"""Data models for content API documents and page props."""

from space_travelling.models.post import (
    Banner,
    ContentSection,
    Document,
    HomeProps,
    Post,
    PostData,
    PostPagination,
    PostProps,
    PostSummary,
    PostSummaryData,
    Redirect,
    RichTextBlock,
    RichTextSpan,
    SearchResponse,
)

__all__ = [
    "Banner",
    "ContentSection",
    "Document",
    "HomeProps",
    "Post",
    "PostData",
    "PostPagination",
    "PostProps",
    "PostSummary",
    "PostSummaryData",
    "Redirect",
    "RichTextBlock",
    "RichTextSpan",
    "SearchResponse",
]
