"""Tests for HTML link and title extraction."""

import pytest

from depthcrawl.crawler.parser import ContentParser


PAGE = """
<html>
  <head><title>  Example
     Page </title><script>var x = "<a href='/js'>";</script></head>
  <body>
    <h1>Hello</h1>
    <a href="/second">second</a>
    <a href="third.html#section">third</a>
    <a href="https://Other.Example.org/path?q=1">other</a>
    <a href="/second">again</a>
    <a href="#top">top</a>
    <a href="mailto:someone@example.com">mail</a>
    <a href="/logo.png">image</a>
    <a href="">empty</a>
  </body>
</html>
"""


@pytest.fixture
def parser():
    return ContentParser()


def test_title_is_cleaned(parser):
    page = parser.parse("http://example.com/dir/index.html", PAGE)

    assert page.title == "Example Page"


def test_links_resolved_and_deduplicated_in_order(parser):
    page = parser.parse("http://example.com/dir/index.html", PAGE)

    assert page.links == [
        "http://example.com/second",
        "http://example.com/dir/third.html",
        "https://other.example.org/path?q=1",
    ]


def test_text_excludes_scripts(parser):
    page = parser.parse("http://example.com/", PAGE)

    assert "Hello" in page.text
    assert "var x" not in page.text


def test_page_without_title(parser):
    page = parser.parse("http://example.com/", "<html><body><a href='/a'>a</a></body></html>")

    assert page.title is None
    assert page.links == ["http://example.com/a"]


def test_allowed_domains_filter():
    parser = ContentParser(allowed_domains=["example.com"])

    page = parser.parse("http://example.com/dir/index.html", PAGE)

    assert "https://other.example.org/path?q=1" not in page.links
    assert "http://example.com/second" in page.links


def test_blocked_domains_filter():
    parser = ContentParser(blocked_domains=["other.example.org"])

    page = parser.parse("http://example.com/dir/index.html", PAGE)

    assert all("other.example.org" not in link for link in page.links)


@pytest.mark.parametrize("url,expected", [
    ("http://example.com/a", True),
    ("https://example.com/", True),
    ("ftp://example.com/file", False),
    ("/relative", False),
    ("http://example.com/doc.PDF", False),
])
def test_is_valid_url(parser, url, expected):
    assert parser.is_valid_url(url) is expected


def test_normalize_url(parser):
    assert parser.normalize_url("HTTP://Example.COM#frag") == "http://example.com/"
