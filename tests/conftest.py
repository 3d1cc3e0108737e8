"""
pytest configuration and fixtures.
"""

import io
import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Tuple
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from webworker import WebServer, ServerConfig, ConnectionHandler


FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
FIXED_DATE = "Mon, 19 Oct 2026 12:00:00 GMT"

# Larger than two 32 KB chunks, with a short trailing chunk, CRLFs, NULs
# and a template tag that must NOT be substituted.
IMAGE_BYTES = bytes(range(256)) * 300 + b"\r\n\x00<cs371date>\n\xff\xd8tail"


class FixedClock:
    """Clock that always returns the same instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self._now = now

    def now(self) -> datetime:
        return self._now


def split_response(raw: bytes) -> Tuple[str, dict, bytes]:
    """Split raw response bytes into (status line, headers, body)."""
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("iso-8859-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(": ")
        headers[name] = value
    return lines[0], headers, body


@pytest.fixture
def document_root(tmp_path: Path) -> Path:
    """A small document root with text, image and nested files."""
    root = tmp_path / "www"
    root.mkdir()

    (root / "index.html").write_bytes(
        b"<html><body>\r\n"
        b"<p>Today is <cs371date>.</p>\r\n"
        b"<p>Served by <cs371server></p>\r\n"
        b"</body></html>\r\n"
    )
    (root / "logo.png").write_bytes(IMAGE_BYTES)
    (root / "favicon.ico").write_bytes(b"\x00\x00\x01\x00icon")
    (root / "notes.txt").write_bytes(b"plain <cs371server>\n")
    (root / "README").write_bytes(b"no extension")

    (root / "images").mkdir()
    (root / "images" / "cat.gif").write_bytes(b"GIF89a\x01\x00\x01\x00")

    # Outside the document root: must never be reachable
    (tmp_path / "secret.html").write_bytes(b"top secret")

    return root


@pytest.fixture
def config(document_root: Path) -> ServerConfig:
    """Default test server configuration."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        document_root=str(document_root),
        timeout=5.0,
        log_level="WARNING",
    )


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def fixed_date() -> str:
    """FIXED_NOW as it appears in headers and bodies."""
    return FIXED_DATE


@pytest.fixture
def image_bytes() -> bytes:
    return IMAGE_BYTES


@pytest.fixture
def handler(config: ServerConfig, clock: FixedClock) -> ConnectionHandler:
    return ConnectionHandler(config, clock=clock)


@pytest.fixture
def exchange(handler: ConnectionHandler):
    """Run one raw request through the handler, return split response."""

    def _exchange(raw_request: bytes) -> Tuple[str, dict, bytes]:
        wfile = io.BytesIO()
        handler.handle(io.BytesIO(raw_request), wfile)
        return split_response(wfile.getvalue())

    return _exchange


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('127.0.0.1', 0))
        return s.getsockname()[1]


class RunningServer:
    """Server running in a background thread."""

    def __init__(self, server: WebServer):
        self.server = server
        self._thread: threading.Thread = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw_request: bytes) -> bytes:
        """Send raw bytes, read until the server closes the connection."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as s:
            s.sendall(raw_request)
            chunks = []
            while True:
                chunk = s.recv(65536)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def exchange(self, raw_request: bytes) -> Tuple[str, dict, bytes]:
        return split_response(self.request(raw_request))


@pytest.fixture
def running_server(config: ServerConfig, clock: FixedClock) -> Generator[RunningServer, None, None]:
    """Start a real server on an ephemeral port."""
    srv = RunningServer(WebServer(config, clock=clock))
    srv.start()

    yield srv

    srv.stop()
