"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps an accepted client socket as the byte-stream pair the connection
handler works on.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent as

    GET /index.html HTTP/1.1\r\n
    Host: localhost\r\n
    \r\n

may arrive as one recv() or as several arbitrary pieces. Instead of
buffering by hand, the socket is wrapped with socket.makefile(), which
gives a buffered file object whose readline() blocks until a whole line
(or end of stream) is available:

    ┌──────────────┐   makefile("rb")   ┌───────────┐
    │              │ ─────────────────► │  rfile    │  readline(), read()
    │    socket    │                    └───────────┘
    │              │   makefile("wb")   ┌───────────┐
    │              │ ─────────────────► │  wfile    │  write(), flush()
    └──────────────┘                    └───────────┘

No polling and no sleeping: reads simply block on the socket.

=============================================================================
ONE RESPONSE, THEN CLOSE
=============================================================================

The worker never reuses a connection. After the response is flushed the
connection is half-closed, which tells the client the body is complete:

    Server                              Client
       │   ...body bytes...  ──────────► │
       │   FIN  ─────────────────────────► │  (shutdown SHUT_WR: EOF)
       │ ◄─────────────────────────  FIN   │
    (socket closed)                  (socket closed)

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Unique connection identifier (for logging).
        timeout: Idle timeout for blocking reads and writes, None = forever.
        created_at: Timestamp when connection was accepted.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    timeout: Optional[float] = 30.0
    created_at: float = field(default_factory=time.time)

    # Stream pair (created in __post_init__)
    rfile: BinaryIO = field(init=False, repr=False)
    wfile: BinaryIO = field(init=False, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    def __post_init__(self):
        """Configure the socket and open the stream pair."""
        # A timeout turns a stuck peer into an OSError in the worker
        self.socket.settimeout(self.timeout)

        self.rfile = self.socket.makefile("rb")
        self.wfile = self.socket.makefile("wb")

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def closed(self) -> bool:
        return self._closed

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. Flush and close the stream pair
        2. shutdown(SHUT_WR): tell the client we're done sending
        3. Drain whatever the client still sends (briefly)
        4. close(): release the file descriptor

        Safe to call more than once. Errors are ignored: by the time we
        close, the client may already be gone.
        """
        if self._closed:
            return
        self._closed = True

        for stream in (self.wfile, self.rfile):
            try:
                stream.close()
            except OSError:
                pass  # Unflushed bytes to a dead peer

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
