"""
Integration tests: a real server on a loopback socket.
"""

import socket
import threading

from webworker.http.response import ROOT_PAGE, NOT_FOUND_PAGE


class TestServer:
    """Requests over TCP against a running WebServer."""

    def test_root(self, running_server, fixed_date: str):
        status, headers, body = running_server.exchange(
            b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n"
        )

        assert status == "HTTP/1.1 200 OK"
        assert headers["Date"] == fixed_date
        assert headers["Connection"] == "close"
        assert headers["Content-Type"] == "text/html"
        assert body == ROOT_PAGE.encode()

    def test_missing(self, running_server):
        status, _, body = running_server.exchange(b"GET /missing.html HTTP/1.1\r\n\r\n")

        assert status == "HTTP/1.1 404 Not Found"
        assert body == NOT_FOUND_PAGE.encode()

    def test_image(self, running_server, image_bytes: bytes):
        """Large binary bodies arrive intact across many chunks."""
        status, headers, body = running_server.exchange(b"GET /logo.png HTTP/1.1\r\n\r\n")

        assert status == "HTTP/1.1 200 OK"
        assert headers["Content-Type"] == "image/png"
        assert body == image_bytes

    def test_template(self, running_server, fixed_date: str):
        _, _, body = running_server.exchange(b"GET /index.html HTTP/1.1\r\n\r\n")

        assert f"Today is {fixed_date}.".encode() in body
        assert b"<cs371" not in body

    def test_client_closes_without_request(self, running_server):
        """A half-closed client with no request still gets a 404."""
        with socket.create_connection(("127.0.0.1", running_server.port), timeout=5.0) as s:
            s.shutdown(socket.SHUT_WR)
            data = b""
            while chunk := s.recv(4096):
                data += chunk

        assert data.startswith(b"HTTP/1.1 404 Not Found\r\n")

    def test_concurrent_connections(self, running_server, image_bytes: bytes):
        """Connections are served independently and in parallel."""
        targets = ["/logo.png", "/", "/missing.html", "/images/cat.gif"] * 5
        results = {}

        def fetch(i, target):
            raw = f"GET {target} HTTP/1.1\r\n\r\n".encode()
            results[i] = (target, running_server.exchange(raw))

        threads = [
            threading.Thread(target=fetch, args=(i, t)) for i, t in enumerate(targets)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10.0)

        assert len(results) == len(targets)
        for target, (status, headers, body) in results.values():
            if target == "/logo.png":
                assert body == image_bytes
            elif target == "/missing.html":
                assert status == "HTTP/1.1 404 Not Found"
            elif target == "/images/cat.gif":
                assert headers["Content-Type"] == "image/gif"
            else:
                assert body == ROOT_PAGE.encode()

    def test_reports_bound_port(self, running_server):
        assert running_server.port > 0
        assert running_server.server.is_running
