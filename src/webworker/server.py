"""
=============================================================================
WEB SERVER
=============================================================================

Wires the pieces together:

    ┌──────────────┐  Connection   ┌────────────────────┐
    │ SocketServer │ ────────────► │ WebServer          │
    │ accept loop  │  (own thread) │ ._serve_connection │
    └──────────────┘               └─────────┬──────────┘
                                             │ rfile, wfile
                                             ▼
                                   ┌────────────────────┐
                                   │ ConnectionHandler  │
                                   │ read → resolve →   │
                                   │ header → body      │
                                   └────────────────────┘

The server is the only place that catches network I/O errors. A worker
that hits one logs it and closes; no retries, no error response (the
stream is already broken).

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection
from .handlers import ConnectionHandler
from .http.resolver import FileSystem
from .http.templates import Clock


logger = logging.getLogger(__name__)


class WebServer:
    """
    Single-request-per-connection HTTP/1.1 file server.

    Usage:
        server = WebServer(ServerConfig(port=8080, document_root="./www"))
        server.run()   # Blocks until Ctrl+C
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        filesystem: Optional[FileSystem] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config or ServerConfig()
        self._handler = ConnectionHandler(self.config, filesystem=filesystem, clock=clock)
        self._socket_server = SocketServer(self.config)

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._socket_server.is_running

    def run(self):
        """
        Start the server (blocking).

        Returns after shutdown() or SIGINT/SIGTERM.
        """
        self.config.validate(allow_ephemeral=True)
        self._setup_logging()
        logger.info(
            f"Serving {self.config.document_root} as {self.config.server_name}"
        )

        try:
            self._socket_server.start(self._serve_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

        logger.info("Server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Stop accepting connections. In-flight workers finish on their own."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("webworker").setLevel(level)

    def _serve_connection(self, conn: Connection):
        """
        Serve one connection (runs on its own worker thread).

        Args:
            conn: The accepted client connection.
        """
        with conn:  # Context manager ensures connection is closed
            try:
                self._handler.handle(
                    conn.rfile,
                    conn.wfile,
                    label=f"{conn.id} {conn.client_ip}",
                )
            except OSError as e:
                logger.warning(f"[{conn.id}] Connection error: {e}")
            except Exception as e:
                logger.exception(f"[{conn.id}] Unexpected error: {e}")
