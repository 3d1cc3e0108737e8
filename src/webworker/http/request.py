"""
=============================================================================
REQUEST READING
=============================================================================

Reads just enough of an HTTP request to know what the client asked for.

=============================================================================
WHAT WE ACTUALLY CONSUME
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /index.html HTTP/1.1\r\n     ← REQUEST LINE (interpreted)  │
    │  └─┘ └─────────┘ └──────┘                                       │
    │  method  target   version                                       │
    │           ▲                                                     │
    │           └── the only token the worker uses                    │
    ├─────────────────────────────────────────────────────────────────┤
    │  Host: localhost:8080\r\n         ← read and discarded          │
    │  User-Agent: curl/8.5.0\r\n       ← read and discarded          │
    │  \r\n                             ← blank line: end of request  │
    └─────────────────────────────────────────────────────────────────┘

Headers are never parsed. They are drained from the stream so the client
is not left blocked writing into a full socket buffer, and so the blank
line that terminates the request is seen.

The method token is NOT checked. "POST /x HTTP/1.1" and "FOO /x" resolve
exactly like "GET /x HTTP/1.1". Only the target matters.

=============================================================================
LINE HANDLING
=============================================================================

- A line is the bytes up to "\n"; a trailing "\r" is dropped too, so both
  CRLF and bare LF clients work.
- Blank lines BEFORE the request line are skipped (RFC 7230 section 3.5
  allows a server to ignore them).
- End of stream ends the request with whatever was captured, possibly
  nothing at all.
- A line longer than max_line_size makes the request malformed.

Reading blocks on the stream. There is no timeout here: the accept layer
sets a socket timeout and the resulting OSError propagates to the caller.

=============================================================================
"""

import logging
from dataclasses import dataclass
from typing import BinaryIO, List, Optional
from urllib.parse import unquote


logger = logging.getLogger(__name__)


class MalformedRequest(ValueError):
    """
    The request line could not be interpreted.

    Raised when the request line has fewer than two tokens (no target) or
    when a line exceeds the configured maximum length. The connection
    handler recovers from it locally by answering 404; it is never allowed
    to crash a worker.

    Attributes:
        line: The offending request line, if one was captured.
    """

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


@dataclass(frozen=True)
class RequestLine:
    """
    The first line of a request, split into whitespace-separated tokens.

    Attributes:
        raw: The request line as received, without its line terminator.
             Empty when the client sent nothing before closing.
        header_count: Number of header lines read and discarded after it.
    """

    raw: str = ""
    header_count: int = 0

    @property
    def tokens(self) -> List[str]:
        return self.raw.split()

    @property
    def target(self) -> str:
        """
        The request target (second token), normalised.

        Raises:
            MalformedRequest: If the line has fewer than two tokens.
        """
        tokens = self.tokens
        if len(tokens) < 2:
            raise MalformedRequest(
                f"Request line has {len(tokens)} token(s), expected at least 2",
                line=self.raw,
            )
        return normalize_target(tokens[1])


def normalize_target(target: str) -> str:
    """
    Reduce a raw request target to a path.

    The query string and fragment are cut off, then percent-escapes are
    decoded:

        >>> normalize_target("/logo.png?v=3")
        '/logo.png'
        >>> normalize_target("/my%20page.html")
        '/my page.html'
        >>> normalize_target("/")
        '/'
    """
    for separator in ("?", "#"):
        target = target.split(separator, 1)[0]
    return unquote(target)


class RequestReader:
    """
    Reads one request from a binary stream.

    Usage:
        reader = RequestReader(max_line_size=8192)
        request_line = reader.read(conn.rfile)
        target = request_line.target   # may raise MalformedRequest

    The reader holds no per-request state, so one instance may be shared
    between workers.
    """

    def __init__(self, max_line_size: int = 8192):
        self.max_line_size = max_line_size

    def read(self, stream: BinaryIO) -> RequestLine:
        """
        Read the request line and drain the header block.

        Args:
            stream: Readable binary stream positioned at the request start.

        Returns:
            The captured request line. Its raw text is empty if the stream
            ended before any non-blank line arrived.

        Raises:
            MalformedRequest: If a line exceeds max_line_size.
            OSError: If reading from the stream fails.
        """
        request_line: Optional[str] = None
        header_count = 0

        while True:
            line = self._read_line(stream)
            if line is None:
                # Stream closed before the blank line
                break

            if request_line is None:
                if line:
                    request_line = line
                    logger.debug(f"Request line: ({request_line})")
                continue

            if not line:
                break  # End of headers

            header_count += 1

        return RequestLine(raw=request_line or "", header_count=header_count)

    def _read_line(self, stream: BinaryIO) -> Optional[str]:
        """
        Read one line, without its terminator.

        Returns None at end of stream.
        """
        data = stream.readline(self.max_line_size + 1)
        if not data:
            return None

        if len(data) > self.max_line_size and not data.endswith(b"\n"):
            raise MalformedRequest(
                f"Request line exceeds {self.max_line_size} bytes",
                line=data[:80].decode("iso-8859-1"),
            )

        if data.endswith(b"\n"):
            data = data[:-1]
        if data.endswith(b"\r"):
            data = data[:-1]

        # ISO-8859-1 maps every byte to a character, so decoding never fails
        return data.decode("iso-8859-1")
