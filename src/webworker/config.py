"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the web worker.

Configuration is READ-ONLY once the server starts. Every connection
handler shares the same ServerConfig instance, and nothing on the request
path writes to it, so no locking is needed.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │   1. Defaults        ServerConfig()                                 │
    │   2. Environment     ServerConfig.from_env()   (WEBWORKER_*)        │
    │   3. Command line    python -m webworker --port 3000 --root ./www   │
    └─────────────────────────────────────────────────────────────────────┘

Later sources override earlier ones. validate() runs once at startup so a
bad port or a missing document root fails immediately, not on the first
request.

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class ServerConfig:
    """
    Configuration for the web worker.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, timeout

    CONTENT
    - document_root, encoding

    LIMITS
    - buffer_size, max_line_size

    IDENTITY
    - server_name, server_phrase

    LOGGING
    - log_level

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """The port number to listen on."""

    backlog: int = 128
    """Maximum number of queued connections."""

    timeout: Optional[float] = 30.0
    """
    Idle timeout applied to each accepted socket, in seconds.
    None = block forever. A timeout surfaces in the worker as an I/O
    error and ends the connection.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    document_root: str = "."
    """Directory that request targets are resolved against."""

    encoding: str = "utf-8"
    """
    Encoding used to decode text files for tag substitution.
    Bytes that don't decode are carried through unchanged.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LIMITS
    # ─────────────────────────────────────────────────────────────────────

    buffer_size: int = 32 * 1024
    """Chunk size for streaming image files (32 KB)."""

    max_line_size: int = 8192
    """Longest request or header line accepted, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # IDENTITY
    # ─────────────────────────────────────────────────────────────────────

    server_name: str = "WebWorker/1.0"
    """Value of the Server response header."""

    server_phrase: str = "WebWorker server for CS371"
    """Text substituted for <cs371server> in served files."""

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        WEBWORKER_HOST          Server host (default: 127.0.0.1)
        WEBWORKER_PORT          Server port (default: 8080)
        WEBWORKER_ROOT          Document root (default: .)
        WEBWORKER_TIMEOUT       Socket idle timeout in seconds (default: 30)
        WEBWORKER_LOG_LEVEL     Logging level (default: INFO)
        WEBWORKER_SERVER_NAME   Server header (default: WebWorker/1.0)

        =====================================================================
        """
        defaults = cls()
        return cls(
            host=os.getenv("WEBWORKER_HOST", defaults.host),
            port=int(os.getenv("WEBWORKER_PORT", str(defaults.port))),
            document_root=os.getenv("WEBWORKER_ROOT", defaults.document_root),
            timeout=float(os.getenv("WEBWORKER_TIMEOUT", str(defaults.timeout))),
            log_level=os.getenv("WEBWORKER_LOG_LEVEL", defaults.log_level),
            server_name=os.getenv("WEBWORKER_SERVER_NAME", defaults.server_name),
        )

    def validate(self, allow_ephemeral: bool = False) -> None:
        """
        Validate configuration values.

        Args:
            allow_ephemeral: Accept port 0 (let the OS pick). Tests use this.

        Raises:
            ValueError: On the first invalid value found.
        """
        lowest_port = 0 if allow_ephemeral else 1
        if not lowest_port <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 1-65535.")

        if not Path(self.document_root).is_dir():
            raise ValueError(f"Document root is not a directory: {self.document_root}")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.max_line_size < 64:
            raise ValueError("max_line_size must be >= 64")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        try:
            "".encode(self.encoding)
        except LookupError:
            raise ValueError(f"Unknown encoding: {self.encoding}") from None
