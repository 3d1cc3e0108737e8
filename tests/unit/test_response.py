"""
Unit tests for response headers and fixed bodies.
"""

from datetime import datetime, timedelta, timezone

from webworker.http.response import (
    ResponseHeader,
    format_http_date,
    ROOT_PAGE,
    NOT_FOUND_PAGE,
)
from webworker.http.status_codes import HTTPStatus


def make_header(status=HTTPStatus.OK, content_type="text/html") -> ResponseHeader:
    return ResponseHeader(
        status=status,
        content_type=content_type,
        date="Mon, 19 Oct 2026 12:00:00 GMT",
        server_name="WebWorker/1.0",
    )


class TestResponseHeader:
    """Tests for ResponseHeader serialization."""

    def test_status_line(self):
        """Test status line generation."""
        assert make_header(HTTPStatus.OK).status_line == "HTTP/1.1 200 OK"
        assert make_header(HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_exact_bytes(self):
        """Test the full header, field order included."""
        result = make_header(content_type="image/png").to_bytes()

        assert result == (
            b"HTTP/1.1 200 OK\r\n"
            b"Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n"
            b"Server: WebWorker/1.0\r\n"
            b"Connection: close\r\n"
            b"Content-Type: image/png\r\n"
            b"\r\n"
        )

    def test_ends_with_single_blank_line(self):
        result = make_header().to_bytes()

        assert result.endswith(b"\r\n\r\n")
        assert not result.endswith(b"\r\n\r\n\r\n")

    def test_no_bare_lf(self):
        """Test that every line terminator is CRLF."""
        result = make_header(HTTPStatus.NOT_FOUND).to_bytes()

        assert result.count(b"\n") == result.count(b"\r\n")

    def test_field_names(self):
        names = [name for name, _ in make_header().fields]

        assert names == ["Date", "Server", "Connection", "Content-Type"]


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"

    def test_status_codes(self):
        assert HTTPStatus.OK == 200
        assert HTTPStatus.NOT_FOUND == 404


class TestFixedBodies:
    """Tests for the banner and not-found bodies."""

    def test_root_page(self):
        assert "This is the root of the server." in ROOT_PAGE
        assert ROOT_PAGE.startswith("<html>")

    def test_not_found_page(self):
        assert "404 File Not Found" in NOT_FOUND_PAGE


class TestFormatHTTPDate:
    """Tests for HTTP date formatting."""

    def test_format(self):
        """Test HTTP date format."""
        dt = datetime(2026, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

        assert format_http_date(dt) == "Thu, 15 Jan 2026 12:30:45 GMT"

    def test_converts_to_utc(self):
        """Test that aware datetimes in other zones are shifted to GMT."""
        mst = timezone(timedelta(hours=-7))
        dt = datetime(2026, 10, 19, 5, 0, 0, tzinfo=mst)

        assert format_http_date(dt) == "Mon, 19 Oct 2026 12:00:00 GMT"

    def test_naive_is_treated_as_utc(self):
        dt = datetime(2026, 10, 19, 12, 0, 0)

        assert format_http_date(dt) == "Mon, 19 Oct 2026 12:00:00 GMT"
