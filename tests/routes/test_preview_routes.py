"""Tests for entering and leaving preview mode."""

from __future__ import annotations

from space_travelling.app import SESSION_COOKIE


class TestEnterPreview:
    """Test the preview redirect handler."""

    def test_valid_token_redirects_to_document(self, site_client) -> None:
        response = site_client.get(
            "/api/preview",
            params={"token": "preview-ref", "documentId": "d2"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/post/second-post"
        assert SESSION_COOKIE in response.cookies

    def test_unknown_document_redirects_home(self, site_client) -> None:
        response = site_client.get(
            "/api/preview",
            params={"token": "preview-ref", "documentId": "nope"},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/"

    def test_invalid_token(self, site_client) -> None:
        response = site_client.get(
            "/api/preview",
            params={"token": "bogus", "documentId": "d2"},
            follow_redirects=False,
        )

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid token"}
        assert SESSION_COOKIE not in response.cookies

    def test_missing_parameters(self, site_client) -> None:
        response = site_client.get("/api/preview", follow_redirects=False)

        assert response.status_code == 401
        assert response.json() == {"message": "Invalid token"}


class TestPreviewSession:
    """Test pages rendered inside a preview session."""

    def test_pages_render_draft_content(self, site_client, fake_prismic, post_factory) -> None:
        fake_prismic.refs["preview-ref"] = [post_factory("d2", "second-post", title="Second (draft)")]
        site_client.get("/api/preview", params={"token": "preview-ref", "documentId": "d2"}, follow_redirects=False)

        response = site_client.get("/post/second-post")

        assert response.status_code == 200
        assert "Second (draft)" in response.text
        assert "Sair do modo Preview" in response.text
        assert "no-store" in response.headers["cache-control"]

    def test_preview_does_not_touch_published_cache(self, site_client, fake_prismic, post_factory) -> None:
        fake_prismic.refs["preview-ref"] = [post_factory("d2", "second-post", title="Second (draft)")]
        site_client.get("/api/preview", params={"token": "preview-ref", "documentId": "d2"}, follow_redirects=False)
        site_client.get("/post/second-post")

        site_client.get("/api/exit-preview", follow_redirects=False)
        response = site_client.get("/post/second-post")

        assert "Second (draft)" not in response.text
        assert "Sair do modo Preview" not in response.text

    def test_exit_preview_clears_session(self, site_client) -> None:
        site_client.get("/api/preview", params={"token": "preview-ref", "documentId": "d2"}, follow_redirects=False)
        assert "Sair do modo Preview" in site_client.get("/").text

        response = site_client.get("/api/exit-preview", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/"
        assert "Sair do modo Preview" not in site_client.get("/").text

    def test_exit_without_preview(self, site_client) -> None:
        response = site_client.get("/api/exit-preview", follow_redirects=False)

        assert response.status_code == 302

    def test_expired_preview_ref_falls_back_to_published_pages(self, site_client, fake_prismic) -> None:
        site_client.get("/api/preview", params={"token": "preview-ref", "documentId": "d2"}, follow_redirects=False)
        del fake_prismic.refs["preview-ref"]

        post_page = site_client.get("/post/second-post")
        home_page = site_client.get("/")

        assert post_page.status_code == 200
        assert "Sair do modo Preview" not in post_page.text
        assert home_page.status_code == 200
        assert "Sair do modo Preview" not in home_page.text
        assert home_page.headers["cache-control"] == "s-maxage=1800, stale-while-revalidate"
