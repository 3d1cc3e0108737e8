"""
=============================================================================
HANDLERS
=============================================================================

    worker.py    ConnectionHandler - one request in, one response out

=============================================================================
"""

from .worker import ConnectionHandler

__all__ = [
    "ConnectionHandler",
]
