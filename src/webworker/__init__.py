"""
=============================================================================
WEBWORKER - One Request, One Response, Close
=============================================================================

A small HTTP/1.1 file server built on raw Python sockets. Each accepted
connection gets its own thread, which:

    1. reads the request line (headers are drained, not parsed)
    2. resolves the target: the root banner, a file, or 404
    3. writes the status line and a fixed set of headers
    4. writes the body:
         - images (png, jpg, gif, ico) streamed byte-for-byte
         - anything else decoded as text with <cs371date> and
           <cs371server> replaced
    5. flushes and closes

=============================================================================
PACKAGE LAYOUT
=============================================================================

    webworker/
    ├── config.py          ServerConfig
    ├── server.py          WebServer (wiring + logging)
    ├── core/              sockets: accept loop, Connection
    ├── handlers/          ConnectionHandler (the per-connection state machine)
    └── http/              request line, resolution, MIME, header, templates

=============================================================================
"""

__version__ = "1.0.0"

from .server import WebServer
from .config import ServerConfig
from .handlers import ConnectionHandler

__all__ = ["WebServer", "ServerConfig", "ConnectionHandler", "__version__"]
