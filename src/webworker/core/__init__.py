"""
=============================================================================
CORE NETWORKING
=============================================================================

    socket_server.py   SocketServer - bind, listen, accept, thread per connection
    connection.py      Connection   - socket as an (rfile, wfile) pair, graceful close

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection

__all__ = [
    "SocketServer",     # Accepts connections, one worker thread each
    "Connection",       # Wrapper for client socket - stream pair + close
]
