"""
Tests for the Page façade: loading, failure handling and the projection.
"""

import httpx
import pytest

import pagelens
from pagelens.config import Config
from pagelens.fetcher import Fetcher
from pagelens.page import Page
from pagelens.request import INVALID_URL_MESSAGE
from tests.helpers.metric_delta import metric_delta
from tests.helpers.pages import SAMPLE_HTML, SAMPLE_PAGE_URL

PROJECTION_KEYS = {
    "url",
    "scheme",
    "host",
    "port",
    "title",
    "description",
    "meta",
    "links",
    "images",
    "javascripts",
    "stylesheets",
    "favicon",
    "language",
    "structured_data",
    "microdata",
    "security_info",
    "content_type",
    "size",
    "load_time",
    "technologies",
    "tag_count",
    "response",
    "error",
}


def mock_fetcher(handler) -> Fetcher:
    return Fetcher(client=httpx.Client(transport=httpx.MockTransport(handler)))


@pytest.fixture
def page() -> Page:
    return Page.from_html(
        SAMPLE_HTML,
        SAMPLE_PAGE_URL,
        headers={"Server": "nginx/1.25.3", "Strict-Transport-Security": "max-age=31536000"},
    )


@pytest.mark.unit
class TestPageFromHtml:
    def test_success(self, page):
        assert page.success
        assert page.error_message is None
        assert page.status_code == 200

    def test_request_parts(self, page):
        assert page.url == SAMPLE_PAGE_URL
        assert page.host == "www.example.com"
        assert page.scheme == "https"
        assert page.port == 443
        assert page.domain == "example.com"

    def test_delegated_fields(self, page):
        assert page.title == "Web Metadata: An Introduction"
        assert page.description == "A gentle introduction to web metadata"
        assert page.language == "en"
        assert page.charset == "UTF-8"
        assert page.meta["og:title"] == "Web Metadata 101"
        assert page.links[0] == "https://www.example.com/about"
        assert page.stylesheets == ["https://www.example.com/static/site.css"]
        assert page.json_ld == page.structured_data
        assert page.microdata == []
        assert page.tag_count["a"] == 6
        assert page.find(["about"]) == [{"about": 2}]

    def test_domain_links_default_to_registrable_domain(self, page):
        assert page.domain_links() == [
            "https://www.example.com/about",
            "https://www.example.com/articles/contact.html",
            "https://blog.example.com/post",
        ]
        assert page.domain_links("other.org") == ["https://other.org/page"]

    def test_domain_images(self, page):
        assert page.domain_images() == ["https://www.example.com/images/logo.png"]

    def test_favicon_from_link(self, page):
        assert page.favicon == "https://www.example.com/favicon.png"

    def test_favicon_default(self):
        page = Page.from_html("<html><head></head></html>", "https://example.com/a/b")
        assert page.favicon == "https://example.com/favicon.ico"

    def test_favicon_apple_touch_icon(self):
        html = '<link rel="apple-touch-icon" href="icons/touch.png">'
        page = Page.from_html(html, "http://example.com/a/")
        assert page.favicon == "http://example.com/a/icons/touch.png"

    def test_security_info(self, page):
        assert page.security_info == {"secure": True, "hsts": True, "content_security_policy": False}

    def test_response_fields(self, page):
        assert page.content_type is None
        assert page.size == len(SAMPLE_HTML.encode("utf-8"))
        assert page.load_time is None

    def test_size_prefers_content_length(self):
        page = Page.from_html("<p>x</p>", "http://example.com/", headers={"Content-Length": "1234"})
        assert page.size == 1234

    def test_technologies(self, page):
        assert page.technologies == {
            "jquery": True,
            "wordpress": True,
            "server": "nginx/1.25.3",
            "nginx": True,
        }

    def test_to_dict(self, page):
        data = page.to_dict()
        assert set(data) == PROJECTION_KEYS
        assert data["response"]["status"] == 200
        assert data["response"]["success"] is True
        assert data["response"]["headers"]["server"] == "nginx/1.25.3"
        assert data["error"] is None

    def test_projection_survives_deeply_nested_json_ld(self):
        html = '<script type="application/ld+json">' + "[" * 5000 + "]" * 5000 + "</script><title>t</title>"
        data = Page.from_html(html, "http://a.com/").to_dict()
        assert data["title"] == "t"
        assert data["structured_data"] == []

    def test_counts_successful_pages(self):
        with metric_delta("pages", labels={"outcome": "success"}):
            Page.from_html("<p>x</p>", "http://example.com/")


@pytest.mark.unit
class TestPageFetch:
    def test_fetch_and_inspect(self):
        def handler(request):
            return httpx.Response(
                200,
                headers={"Content-Type": "text/html", "Content-Security-Policy": "default-src 'self'"},
                content='<html><head><meta charset="utf-8"><title>Café</title></head></html>'.encode("utf-8"),
            )

        page = Page("example.com", fetcher=mock_fetcher(handler))
        assert page.success
        assert page.url == "http://example.com/"
        assert page.title == "Café"
        assert page.content_type == "text/html"
        assert page.security_info["content_security_policy"] is True
        assert page.security_info["secure"] is False
        assert page.load_time is not None

    def test_links_resolve_against_final_url(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(302, headers={"Location": "https://example.com/new/"})
            return httpx.Response(200, content=b'<a href="next">next</a>')

        page = Page("https://example.com/old", fetcher=mock_fetcher(handler))
        assert page.url == "https://example.com/old"
        assert page.links == ["https://example.com/new/next"]

    def test_inspect_uses_configured_fetcher(self, monkeypatch):
        handler = httpx.MockTransport(lambda request: httpx.Response(200, content=b"<title>Hello</title>"))
        monkeypatch.setattr(
            "pagelens.page.Fetcher",
            lambda config: Fetcher(config, client=httpx.Client(transport=handler)),
        )
        page = pagelens.inspect("https://example.com/", config=Config())
        assert page.title == "Hello"


@pytest.mark.unit
class TestFailedPage:
    @pytest.fixture
    def failed(self) -> Page:
        return Page("https://example.com/missing", fetcher=mock_fetcher(lambda request: httpx.Response(404)))

    def test_status(self, failed):
        assert not failed.success
        assert failed.status_code == 404
        assert failed.error_message == "HTTP 404 for https://example.com/missing"

    def test_fields_are_none(self, failed):
        for name in (
            "title",
            "description",
            "body",
            "meta",
            "links",
            "images",
            "javascripts",
            "stylesheets",
            "language",
            "structured_data",
            "microdata",
            "tag_count",
            "charset",
            "favicon",
        ):
            assert getattr(failed, name) is None, name
        assert failed.find(["x"]) is None

    def test_domain_views_are_empty(self, failed):
        assert failed.domain_links() == []
        assert failed.domain_images("example.com") == []

    def test_to_dict(self, failed):
        data = failed.to_dict()
        assert set(data) == PROJECTION_KEYS
        assert data["response"]["success"] is False
        assert data["error"] == failed.error_message
        assert data["technologies"] == {}

    def test_counts_failed_pages(self):
        with metric_delta("pages", labels={"outcome": "failed"}):
            Page("https://example.com/", fetcher=mock_fetcher(lambda request: httpx.Response(500)))

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        page = Page("https://example.com/", fetcher=mock_fetcher(handler))
        assert not page.success
        assert page.status_code == 500
        assert "ConnectError" in page.error_message
        assert page.size is None
        assert page.content_type is None

    @pytest.mark.parametrize("url", ["", "http://", "http://example.com:port/"])
    def test_invalid_url(self, url):
        page = Page(url, fetcher=mock_fetcher(lambda request: pytest.fail("must not fetch")))
        assert not page.success
        assert page.error_message == INVALID_URL_MESSAGE
        assert page.response is None
        assert page.title is None
        assert page.to_dict()["error"] == INVALID_URL_MESSAGE
