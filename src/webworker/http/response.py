"""
=============================================================================
RESPONSE HEADER AND FIXED BODIES
=============================================================================

Every response the worker sends has the same shape:

    HTTP/1.1 200 OK\r\n                      ← Status line
    Date: Mon, 19 Oct 2026 12:00:00 GMT\r\n  ← When the response was made
    Server: WebWorker/1.0\r\n                ← Fixed identity string
    Connection: close\r\n                    ← One response per connection
    Content-Type: text/html\r\n              ← From the resolved resource
    \r\n                                     ← End of header
    <body bytes>                             ← Until the connection closes

=============================================================================
WHY NO CONTENT-LENGTH?
=============================================================================

The header is written BEFORE the body is produced, and binary bodies are
streamed in chunks straight from disk. Rather than measuring the body up
front, the response is delimited by closing the connection, which is
valid for HTTP/1.1 responses that carry "Connection: close":

    Client reads header ──► reads body bytes ──► sees EOF ──► done

The header field order is fixed. Clients and tests may rely on it.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone

from .status_codes import HTTPStatus


CRLF = "\r\n"

HTTP_VERSION = "HTTP/1.1"


# =============================================================================
# FIXED BODIES
# =============================================================================

ROOT_PAGE = (
    "<html><head><title>WebWorker</title></head><body>\n"
    "<center><h3>WebWorker Web Server</h3></center>\n"
    "<center><h3>This is the root of the server.</h3></center>\n"
    "</body></html>\n"
)

NOT_FOUND_PAGE = (
    "<html><head><title>404 File Not Found.</title></head><body>\n"
    "<h3>404 File Not Found</h3>\n"
    "</body></html>\n"
)


@dataclass(frozen=True)
class ResponseHeader:
    """
    Status line plus header block for one response.

    Attributes:
        status: 200 or 404.
        content_type: Content-Type header value.
        date: Preformatted Date header value.
        server_name: Server header value.
    """

    status: HTTPStatus
    content_type: str
    date: str
    server_name: str
    version: str = HTTP_VERSION

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 404 Not Found"."""
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    @property
    def fields(self) -> list[tuple[str, str]]:
        """Header fields in wire order."""
        return [
            ("Date", self.date),
            ("Server", self.server_name),
            ("Connection", "close"),
            ("Content-Type", self.content_type),
        ]

    def to_bytes(self) -> bytes:
        """
        Serialize the header, including the blank line that ends it.

        Returns:
            Header bytes ready to be written before the body.
        """
        lines = [self.status_line]
        for name, value in self.fields:
            lines.append(f"{name}: {value}")

        # Empty line separates header from body
        lines.append("")
        lines.append("")

        # Header text is ISO-8859-1 on the wire
        return CRLF.join(lines).encode("iso-8859-1", errors="replace")


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231 IMF-fixdate).

    Format: Day, DD Mon YYYY HH:MM:SS GMT
    Example: Mon, 19 Oct 2026 12:00:00 GMT

    Aware datetimes are converted to UTC first; naive ones are assumed to
    already be UTC. Names are spelled out here instead of using strftime so
    the output does not depend on the process locale.

    Args:
        dt: Datetime to format.

    Returns:
        Formatted date string.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)

    # Weekday names (0=Monday in Python's datetime)
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

    # Month names (1-indexed, so we subtract 1)
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
