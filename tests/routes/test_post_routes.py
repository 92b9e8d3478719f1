"""Tests for the post detail route."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

from space_travelling.models.post import Redirect
from space_travelling.routes.post import post_detail


class TestPostPage:
    """Test rendered post pages."""

    def test_renders_post_with_neighbours(self, site_client) -> None:
        response = site_client.get("/post/second-post")

        assert response.status_code == 200
        assert "<h1>Second</h1>" in response.text
        assert "Post Anterior" in response.text
        assert 'href="/post/first-post"' in response.text
        assert "Próximo Post" in response.text
        assert 'href="/post/third-post"' in response.text
        assert response.headers["cache-control"] == "s-maxage=1800, stale-while-revalidate"

    def test_oldest_post_has_only_next_link(self, site_client) -> None:
        response = site_client.get("/post/first-post")

        assert "Post Anterior" not in response.text
        assert "Próximo Post" in response.text

    def test_edited_post_shows_edit_date(self, site_client) -> None:
        response = site_client.get("/post/third-post")

        assert "* editado em 05 mar 2021, às 12:30" in response.text

    def test_unedited_post_has_no_edit_line(self, site_client) -> None:
        assert "editado em" not in site_client.get("/post/second-post").text

    def test_missing_post_redirects_home(self, site_client) -> None:
        response = site_client.get("/post/does-not-exist", follow_redirects=False)

        assert response.status_code == 307
        assert response.headers["location"] == "/"


class TestRichContent:
    """Test a post with sections and rich text."""

    def test_sections_and_reading_time(self, site_client, fake_prismic, post_factory, paragraph_factory) -> None:
        document = post_factory(
            "d9",
            "rich-post",
            title="Rich",
            author="Ana",
            content=[
                {
                    "heading": "Começo",
                    "body": [paragraph_factory("texto " * 300, [{"start": 0, "end": 5, "type": "strong"}])],
                }
            ],
        )
        fake_prismic.refs["master-ref"].append(document)

        response = site_client.get("/post/rich-post")

        assert response.status_code == 200
        assert "<h2>Começo</h2>" in response.text
        assert "<strong>texto</strong>" in response.text
        assert "2 min" in response.text
        assert "Ana" in response.text


class TestFallbackPlaceholder:
    """Test the page served while a post is still generating."""

    async def test_renders_loading_template(self) -> None:
        request = MagicMock()
        request.app.state.builder.post = AsyncMock(return_value=None)
        templates = request.app.state.templates
        templates.TemplateResponse.return_value = MagicMock(headers={})

        response = await post_detail(request, "new-post")

        call_args = templates.TemplateResponse.call_args
        assert call_args[0][0] is request
        assert call_args[0][1] == "loading.html"
        assert response.headers["Cache-Control"] == "no-store"

    async def test_redirect_result(self) -> None:
        request = MagicMock()
        request.app.state.builder.post = AsyncMock(return_value=Redirect(destination="/"))

        response = await post_detail(request, "gone")

        assert response.status_code == 307
        assert response.headers["location"] == "/"
