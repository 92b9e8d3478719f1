"""Tests for query predicate and ordering expressions."""

from space_travelling.prismic.predicates import at, build_query, ordering


def test_at_quotes_string_values():
    assert at("document.type", "posts") == '[at(document.type, "posts")]'


def test_at_escapes_quotes_in_values():
    assert at("my.posts.uid", 'say "hi"') == '[at(my.posts.uid, "say \\"hi\\"")]'


def test_build_query_wraps_single_predicate():
    assert build_query(at("document.type", "posts")) == '[[at(document.type, "posts")]]'


def test_build_query_joins_predicates():
    query = build_query([at("document.type", "posts"), at("document.id", "d1")])
    assert query == '[[at(document.type, "posts")][at(document.id, "d1")]]'


def test_ordering_ascending_and_descending():
    assert ordering("document.first_publication_date") == "[document.first_publication_date]"
    assert (
        ordering("document.last_publication_date", descending=True)
        == "[document.last_publication_date desc]"
    )
