"""
=============================================================================
TEMPLATE TAGS
=============================================================================

Text files served by the worker may contain two literal tags that are
replaced just before transmission:

    <cs371date>     →  the current timestamp (same value as the Date header)
    <cs371server>   →  the server identity phrase

    Source file:                         Sent to the client:
    ─────────────                        ───────────────────
    <p>Today is <cs371date>.</p>         <p>Today is Mon, 19 Oct 2026 ...</p>
    <p>Served by <cs371server></p>       <p>Served by WebWorker server ...</p>

Substitution is plain, case-sensitive string replacement over the WHOLE
file at once. Line terminators are left exactly as they were in the file,
and nothing is inserted or removed besides the tags themselves.

=============================================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol


DATE_TAG = "<cs371date>"
SERVER_TAG = "<cs371server>"


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock, always in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TemplateContext:
    """
    Values substituted into text bodies.

    Built once per connection, so the Date header and every <cs371date>
    in the body carry the same timestamp.

    Attributes:
        date: Formatted current timestamp.
        server: Server identity phrase.
    """

    date: str
    server: str

    def render(self, text: str) -> str:
        """
        Replace every template tag in text.

        Example:
            >>> TemplateContext(date="today", server="me").render(
            ...     "<cs371date> by <cs371server>")
            'today by me'
        """
        return text.replace(DATE_TAG, self.date).replace(SERVER_TAG, self.server)
