"""
=============================================================================
CONNECTION HANDLER
=============================================================================

Owns the complete request → response lifecycle for ONE connection.

=============================================================================
THE STATE MACHINE
=============================================================================

    ┌──────────────┐   ┌─────────────────┐   ┌──────────────┐   ┌────────────┐
    │ read request │──►│ resolve target  │──►│ write header │──►│ write body │──► flush
    └──────────────┘   └─────────────────┘   └──────────────┘   └────────────┘
                              │
                 ┌────────────┼──────────────────────┐
                 ▼            ▼                      ▼
               ROOT          FILE                 MISSING
                 │            │                      │
                 │     ┌──────┴───────┐              │
                 │     ▼              ▼              │
                 │   image          other            │
                 │     │              │              │
                 ▼     ▼              ▼              ▼
           banner page  raw bytes,   decoded text,   "404 File Not Found"
                        streamed in  tags replaced   fragment
                        chunks

Every step is sequential; nothing here is shared between connections
except the read-only config, filesystem and clock.

=============================================================================
HEADER / BODY CONSISTENCY
=============================================================================

Once the header is on the wire it cannot be taken back. So everything
that can fail on the FILE path happens BEFORE the header is written:

    FILE (text)    open + read + decode + substitute, then header
    FILE (image)   open, then header, then stream

If opening or reading fails at that point (file deleted since the
existence check, permission denied, ...) the resolution is downgraded to
MISSING and the client gets a consistent 404. The only failure left after
the header is a read error in the middle of an image stream; the body is
then cut short and the connection closes.

Errors on the NETWORK stream are not handled here at all. They propagate
to the server, which logs them and drops the connection.

=============================================================================
"""

import logging
from typing import BinaryIO, Optional, Tuple, Union

from ..config import ServerConfig
from ..http.request import MalformedRequest, RequestLine, RequestReader
from ..http.resolver import (
    FileSystem,
    LocalFileSystem,
    ResolvedResource,
    ResourceKind,
    ResourceResolver,
)
from ..http.response import NOT_FOUND_PAGE, ROOT_PAGE, ResponseHeader, format_http_date
from ..http.templates import Clock, SystemClock, TemplateContext


logger = logging.getLogger(__name__)

# A prepared body is either complete bytes or an open file to stream
Body = Union[bytes, BinaryIO]


class ConnectionHandler:
    """
    Turns one request on a byte-stream pair into one response.

    The handler works on plain binary streams, so it doesn't care whether
    they come from a socket (socket.makefile) or from io.BytesIO in tests.

    Usage:
        handler = ConnectionHandler(config)
        resource = handler.handle(conn.rfile, conn.wfile, label=conn.id)
        conn.close()

    One handler instance can serve any number of connections, one call to
    handle() each, from any number of threads: it keeps no per-request
    state on self.
    """

    def __init__(
        self,
        config: ServerConfig,
        filesystem: Optional[FileSystem] = None,
        clock: Optional[Clock] = None,
    ):
        self.config = config
        self.filesystem = filesystem or LocalFileSystem()
        self.clock = clock or SystemClock()
        self.reader = RequestReader(max_line_size=config.max_line_size)
        self.resolver = ResourceResolver(config.document_root, self.filesystem)

    def handle(self, rfile: BinaryIO, wfile: BinaryIO, label: str = "-") -> ResolvedResource:
        """
        Serve exactly one request.

        Args:
            rfile: Readable binary stream carrying the request.
            wfile: Writable binary stream for the response.
            label: Connection identifier used in log messages.

        Returns:
            The resolution the response was built from (after any
            downgrade to MISSING).

        Raises:
            OSError: If reading from rfile or writing to wfile fails.
        """
        logger.debug(f"[{label}] Handling connection")

        try:
            request_line = self.reader.read(rfile)
            logger.debug(f"[{label}] Discarded {request_line.header_count} header line(s)")
            resource = self.resolve_resource(request_line, label)
        except MalformedRequest as e:
            logger.warning(f"[{label}] Malformed request: {e}")
            request_line = RequestLine(raw=e.line)
            resource = ResolvedResource.missing()

        context = self.template_context()
        resource, body = self.prepare_body(resource, context, label)

        try:
            self.write_header(wfile, resource, context)
            self.write_body(wfile, resource, body, label)
            wfile.flush()
        finally:
            if not isinstance(body, bytes):
                body.close()

        logger.info(
            f'[{label}] "{request_line.raw}" {int(resource.status)} {resource.content_type}'
        )
        return resource

    # =========================================================================
    # RESOLUTION
    # =========================================================================

    def resolve_resource(self, request_line: RequestLine, label: str = "-") -> ResolvedResource:
        """
        Resolve the target named by a request line.

        Raises:
            MalformedRequest: If the line has no target token.
        """
        resource = self.resolver.resolve(request_line.target, label)
        logger.debug(f"[{label}] Resolved {resource.target!r} to {resource.kind.value}")
        return resource

    def template_context(self) -> TemplateContext:
        """Snapshot the clock once for the header and the body."""
        return TemplateContext(
            date=format_http_date(self.clock.now()),
            server=self.config.server_phrase,
        )

    # =========================================================================
    # HEADER
    # =========================================================================

    def write_header(
        self,
        wfile: BinaryIO,
        resource: ResolvedResource,
        context: TemplateContext,
    ) -> None:
        """Write the status line and header block for resource."""
        header = ResponseHeader(
            status=resource.status,
            content_type=resource.content_type,
            date=context.date,
            server_name=self.config.server_name,
        )
        wfile.write(header.to_bytes())

    # =========================================================================
    # BODY
    # =========================================================================

    def prepare_body(
        self,
        resource: ResolvedResource,
        context: TemplateContext,
        label: str = "-",
    ) -> Tuple[ResolvedResource, Body]:
        """
        Produce the body for resource, or downgrade it to MISSING.

        Returns:
            (resource, body) where resource may now be MISSING and body is
            either the full body bytes or an open image file to stream.
        """
        if resource.kind is ResourceKind.ROOT:
            return resource, ROOT_PAGE.encode(self.config.encoding)

        if resource.kind is ResourceKind.MISSING:
            return resource, NOT_FOUND_PAGE.encode(self.config.encoding)

        try:
            source = self.filesystem.open_for_read(resource.path)
        except OSError as e:
            return self._downgrade(resource, e, label)

        if resource.is_image:
            return resource, source

        try:
            with source:
                raw = source.read()
        except OSError as e:
            return self._downgrade(resource, e, label)

        return resource, self.render_text(raw, context)

    def render_text(self, raw: bytes, context: TemplateContext) -> bytes:
        """
        Substitute template tags in a text file's bytes.

        Bytes that are not valid in the configured encoding round-trip
        untouched (surrogateescape), as do all line terminators.
        """
        encoding = self.config.encoding
        text = raw.decode(encoding, errors="surrogateescape")
        return context.render(text).encode(encoding, errors="surrogateescape")

    def write_body(
        self,
        wfile: BinaryIO,
        resource: ResolvedResource,
        body: Body,
        label: str = "-",
    ) -> None:
        """Write a prepared body. Image files are streamed and then closed."""
        if isinstance(body, bytes):
            wfile.write(body)
            return

        with body:
            self._stream_file(wfile, body, resource, label)

    def _stream_file(
        self,
        wfile: BinaryIO,
        source: BinaryIO,
        resource: ResolvedResource,
        label: str,
    ) -> int:
        """
        Copy source to wfile in buffer_size chunks.

        Each write sends exactly the bytes returned by the matching read,
        so a short final chunk is never padded.

        Returns:
            Number of bytes written.
        """
        sent = 0
        while True:
            try:
                chunk = source.read(self.config.buffer_size)
            except OSError as e:
                # Header already sent: all we can do is stop
                logger.warning(f"[{label}] Aborted body of {resource.path} after {sent} bytes: {e}")
                break
            if not chunk:
                break
            wfile.write(chunk)
            sent += len(chunk)
        return sent

    def _downgrade(
        self,
        resource: ResolvedResource,
        error: OSError,
        label: str,
    ) -> Tuple[ResolvedResource, Body]:
        logger.warning(f"[{label}] Could not read {resource.path}: {error}")
        missing = ResolvedResource.missing(resource.path, target=resource.target)
        return missing, NOT_FOUND_PAGE.encode(self.config.encoding)
