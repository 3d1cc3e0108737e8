"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The worker only ever answers with two statuses:

    200 OK          The root banner, or a file that exists under the
                    document root.
    404 Not Found   Anything else: missing files, directories, malformed
                    request lines, traversal attempts.

The status is a pure function of the resolution outcome (see resolver.py),
so it is computed once and never changes after the header is written.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes used by the connection handler.

    This enum extends IntEnum, so status codes can be used as integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200            # Root banner or served file
    NOT_FOUND = 404     # Missing / unresolvable target

    @property
    def phrase(self) -> str:
        """Reason phrase that follows the code in the status line."""
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.NOT_FOUND: "Not Found",
}
