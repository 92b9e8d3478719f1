"""Post list and post detail page generation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from space_travelling.models.post import (
    HomeProps,
    Post,
    PostPagination,
    PostProps,
    PostSummary,
    Redirect,
    SearchResponse,
)
from space_travelling.prismic.client import public_cursor
from space_travelling.prismic.predicates import at, ordering
from space_travelling.services.preview import POST_DOCUMENT_TYPE
from space_travelling.services.reading_time import estimate_reading_time

if TYPE_CHECKING:
    from space_travelling.prismic.client import ContentClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 2
POSTS_PREDICATE = at("document.type", POST_DOCUMENT_TYPE)
LIST_ORDERING = ordering("document.last_publication_date", descending=True)
NEWER_FIRST = ordering("document.first_publication_date", descending=True)
OLDER_FIRST = ordering("document.first_publication_date")


def _to_pagination(response: SearchResponse) -> PostPagination:
    return PostPagination(
        results=[PostSummary.from_document(document) for document in response.results],
        next_page=public_cursor(response.next_page),
    )


async def get_home_props(
    client: ContentClient,
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
    ref: str | None = None,
    preview: bool = False,
) -> HomeProps:
    """Fetch the first page of posts, most recently published first."""
    response = await client.query(
        POSTS_PREDICATE,
        page_size=page_size,
        orderings=LIST_ORDERING,
        ref=ref,
    )
    pagination = _to_pagination(response)
    logger.info(
        "Home props generated — posts=%d has_more=%s preview=%s",
        len(pagination.results),
        pagination.next_page is not None,
        preview,
    )
    return HomeProps(posts_pagination=pagination, preview=preview)


async def fetch_post_page(client: ContentClient, cursor: str) -> PostPagination:
    """Follow a ``next_page`` cursor and project the page to post summaries."""
    return _to_pagination(await client.fetch_page(cursor))


@dataclass
class PostFeed:
    """Server-side model of the post list the browser grows with "load more".

    The page script follows the same cursor through ``GET /api/posts``; this
    class holds the list semantics it mirrors. Pages are appended in arrival
    order with no de-duplication by ``uid``.
    """

    posts: list[PostSummary] = field(default_factory=list)
    next_page: str | None = None

    @classmethod
    def from_pagination(cls, pagination: PostPagination) -> PostFeed:
        return cls(posts=list(pagination.results), next_page=pagination.next_page)

    @property
    def can_load_more(self) -> bool:
        return self.next_page is not None

    async def load_more(self, client: ContentClient) -> list[PostSummary]:
        """Fetch the next page, append it and advance the cursor.

        Posts and cursor are replaced together once the fetch resolves.
        Returns the newly appended posts.
        """
        if self.next_page is None:
            return []
        page = await fetch_post_page(client, self.next_page)
        self.posts, self.next_page = [*self.posts, *page.results], page.next_page
        return page.results


async def _adjacent_post(
    client: ContentClient, post: Post, orderings: str, ref: str | None
) -> PostSummary | None:
    response = await client.query(
        POSTS_PREDICATE,
        page_size=1,
        after=post.id,
        orderings=orderings,
        ref=ref,
    )
    if not response.results or not response.results[0].uid:
        return None
    return PostSummary.from_document(response.results[0])


async def get_post_props(
    client: ContentClient,
    slug: str,
    *,
    ref: str | None = None,
    preview: bool = False,
) -> PostProps | Redirect:
    """Build the detail page props for ``slug``, or a redirect home when it does not exist."""
    document = await client.get_by_uid(POST_DOCUMENT_TYPE, slug, ref=ref)
    if document is None or not document.data:
        logger.info("Post not found, redirecting home — slug=%s", slug)
        return Redirect(destination="/", permanent=False)

    post = Post.from_document(document)
    # Both neighbours are taken "after" this post's id; the descending query is
    # shown as the previous post, the ascending one as the next post.
    prev_post = await _adjacent_post(client, post, NEWER_FIRST, ref)
    next_post = await _adjacent_post(client, post, OLDER_FIRST, ref)
    reading_time = estimate_reading_time(post.data.content)

    logger.info(
        "Post props generated — slug=%s reading_time=%d prev=%s next=%s preview=%s",
        slug,
        reading_time,
        prev_post.uid if prev_post else None,
        next_post.uid if next_post else None,
        preview,
    )
    return PostProps(
        post=post,
        next_post=next_post,
        prev_post=prev_post,
        reading_time=reading_time,
        preview=preview,
    )


async def get_static_paths(client: ContentClient) -> list[str]:
    """Enumerate the detail page path of every published post."""
    documents = await client.query_all(POSTS_PREDICATE)
    paths = [f"/post/{document.uid}" for document in documents if document.uid]
    logger.info("Static paths enumerated — count=%d", len(paths))
    return paths
