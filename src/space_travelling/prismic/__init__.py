"""Prismic content API access."""

from space_travelling.prismic.client import ContentClient, PreviewResolver, create_content_client
from space_travelling.prismic.predicates import at, build_query, ordering

__all__ = [
    "ContentClient",
    "PreviewResolver",
    "at",
    "build_query",
    "create_content_client",
    "ordering",
]
