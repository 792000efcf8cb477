from unittest.mock import MagicMock

import pytest
import requests

from sitewatch.errors import FetchFailed
from sitewatch.fetcher import FetchedPage, PageFetcher, extract_links


def make_fetcher(response=None, side_effect=None):
    session = MagicMock()
    session.headers = {}
    session.get.return_value = response
    session.get.side_effect = side_effect
    return PageFetcher(timeout_s=10.0, user_agent="SiteWatch/test", session=session), session


def make_response(status_code=200, text="<html></html>", content_type="text/html", url="https://example.com/a", content=None):
    resp = MagicMock()
    resp.status_code = status_code
    resp.url = url
    resp.text = text
    resp.content = text.encode("utf-8") if content is None else content
    resp.headers = {"content-type": content_type}
    return resp


def test_fetch_returns_page_on_success():
    fetcher, session = make_fetcher(make_response(text="<p>hi</p>", content_type="text/html; charset=UTF-8"))

    page = fetcher.fetch("https://example.com/a")

    assert page == FetchedPage(
        url="https://example.com/a",
        status_code=200,
        text="<p>hi</p>",
        content=b"<p>hi</p>",
        content_type="text/html; charset=utf-8",
    )
    assert page.is_html
    session.get.assert_called_once_with("https://example.com/a", timeout=10.0, allow_redirects=True)
    assert session.headers["User-Agent"] == "SiteWatch/test"


@pytest.mark.parametrize("status", [301, 404, 500, 503])
def test_non_2xx_status_is_fetch_failure(status):
    fetcher, _ = make_fetcher(make_response(status_code=status))

    with pytest.raises(FetchFailed) as exc_info:
        fetcher.fetch("https://example.com/a")

    assert exc_info.value.status_code == status
    assert exc_info.value.url == "https://example.com/a"


def test_timeout_is_fetch_failure():
    fetcher, _ = make_fetcher(side_effect=requests.Timeout("read timed out"))

    with pytest.raises(FetchFailed) as exc_info:
        fetcher.fetch("https://example.com/slow")

    assert exc_info.value.status_code is None
    assert "timed out" in exc_info.value.reason


def test_connection_error_is_fetch_failure():
    fetcher, _ = make_fetcher(side_effect=requests.ConnectionError("refused"))

    with pytest.raises(FetchFailed) as exc_info:
        fetcher.fetch("https://example.com/down")

    assert exc_info.value.reason == "refused"


def test_non_html_page_is_not_parsed_for_links():
    page = FetchedPage(url="https://example.com/doc.pdf", status_code=200, text="%PDF", content=b"%PDF", content_type="application/pdf")
    assert not page.is_html


def test_missing_content_type_is_treated_as_html():
    assert FetchedPage(url="https://example.com", status_code=200, text="", content=b"").is_html


def test_close_closes_session():
    fetcher, session = make_fetcher()
    fetcher.close()
    session.close.assert_called_once()


def test_extract_links_returns_raw_hrefs():
    html = """
    <html><body>
      <a href="/a/b">B</a>
      <a href="https://other.com/x">X</a>
      <a href="mailto:me@example.com">mail</a>
      <a name="anchor">no href</a>
      <a href="">empty</a>
      <div><p><a href="c#frag">nested</a></p></div>
      <link href="/style.css">
    </body></html>
    """
    assert extract_links(html) == ["/a/b", "https://other.com/x", "mailto:me@example.com", "c#frag"]


def test_extract_links_on_page_without_links():
    assert extract_links("<html><body><p>nothing here</p></body></html>") == []


def test_page_url_is_the_url_after_redirects():
    fetcher, _ = make_fetcher(make_response(url="https://example.com/docs/"))

    page = fetcher.fetch("https://example.com/docs")

    assert page.url == "https://example.com/docs/"


def test_page_keeps_raw_bytes_next_to_decoded_text():
    raw = b"%PDF-1.4 \xff\xfe\x00 body"
    fetcher, _ = make_fetcher(make_response(text=raw.decode("utf-8", errors="replace"), content=raw))

    page = fetcher.fetch("https://example.com/a")

    assert page.content == raw
