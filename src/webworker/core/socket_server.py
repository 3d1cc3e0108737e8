"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Listens, accepts, and hands every accepted connection to its own thread.

=============================================================================
THREAD-PER-CONNECTION
=============================================================================

    ┌───────────────────────┐
    │   Listening socket    │   accept() loop on the calling thread
    └───────────┬───────────┘
        ┌───────┼───────────────────────┐
        ▼       ▼                       ▼
    Thread-1  Thread-2      ...     Thread-N     one per connection,
    (conn A)  (conn B)              (conn N)     daemon, never reused

Workers share nothing but read-only configuration, so no locks are
needed. A worker ends when its single response is written.

=============================================================================
SHUTDOWN
=============================================================================

accept() is given a 1-second timeout so the loop can notice shutdown()
(called from another thread, or from the SIGINT/SIGTERM handler) without
extra wake-up machinery:

    while running:
        try:
            accept()          # at most 1 second
        except timeout:
            continue          # re-check running

Workers already in flight are left to finish; they are daemon threads
and do not keep the process alive on exit.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Optional, Callable, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        """
        Initialize the socket server.

        The socket is created lazily in start().
        """
        self.config = config
        self._socket: Optional[socket.socket] = None
        self._running = False

        # Set once the socket is bound and listening
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The bound (host, port).

        With port 0 in the config this is the port the OS picked, once
        the server is listening.
        """
        if self._socket is not None:
            return self._socket.getsockname()[:2]
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create and configure the listening socket."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Avoid "Address already in use" when restarting
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Periodic wake-up for the shutdown check
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """
        Route SIGINT / SIGTERM to shutdown().

        signal.signal() only works on the main thread. When the server runs
        on any other thread (tests, embedding) the handlers are left alone.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Start accepting connections.

        This method BLOCKS until shutdown() is called.

        Args:
            connection_handler: Called on a fresh worker thread for every
                                accepted connection. It owns the connection
                                and must close it.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)

        self._running = True
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """Accept connections until shutdown, one thread each."""
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                # Usually means we're shutting down
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            conn = Connection(
                socket=client_socket,
                address=client_address,
                timeout=self.config.timeout,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {conn.client_ip}:{conn.client_port}")

            worker = threading.Thread(
                target=connection_handler,
                args=(conn,),
                name=f"worker-{conn.id}",
                daemon=True,
            )
            worker.start()

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call multiple times and from any thread.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the server is listening. Returns False on timeout."""
        return self._ready_event.wait(timeout)
