"""
=============================================================================
RESOURCE RESOLUTION
=============================================================================

Maps a request target to one of three outcomes. The outcome is computed
ONCE per connection and then drives both the header and the body, so a
200 header can never be followed by 404 content (or the reverse).

=============================================================================
RESOLUTION RULES (in order)
=============================================================================

    target == "/"  ─────────────────────────────►  ROOT      200 text/html
         │
         ▼
    strip leading "/", normalise segments
         │
         ├── escapes the document root ─────────►  MISSING   404 text/html
         │
         ▼
    document_root / target
         │
         ├── is a regular file ─────────────────►  FILE      200 by extension
         │
         └── absent, directory, FIFO, device ───►  MISSING   404 text/html

The literal target "/" is ALWAYS the root banner. It is never looked up
on disk, even if the document root somehow contains an entry named "/".

=============================================================================
PATH TRAVERSAL
=============================================================================

A target like "/../../etc/passwd" must not escape the document root:

    document_root = /srv/www
    target        = ../../etc/passwd
    naive join    = /srv/www/../../etc/passwd  →  /etc/passwd   (!!)

Segments are normalised lexically before touching the filesystem:

    "."  and empty segments  →  dropped
    ".."                     →  removes the previous segment
    ".." with nothing left   →  traversal attempt, resolved as MISSING

"a/../b.html" is therefore fine (it is just "b.html"), while
"../b.html" is rejected. The client sees an ordinary 404, which gives
away nothing about the layout outside the root.

=============================================================================
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, List, Optional, Protocol, Union

from .mime_types import DEFAULT_CONTENT_TYPE, get_content_type, get_extension, is_image_extension
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)

ROOT_TARGET = "/"


class ResourceKind(Enum):
    """The three possible outcomes of resolving a request target."""
    ROOT = "root"          # The literal "/" target: fixed banner page
    FILE = "file"          # A regular file under the document root
    MISSING = "missing"    # Anything else: 404


@dataclass(frozen=True)
class ResolvedResource:
    """
    Immutable result of resolving one request target.

    Use the constructors rather than building instances by hand:

        ResolvedResource.root()
        ResolvedResource.found(path, "png")
        ResolvedResource.missing(path)

    Attributes:
        kind: Which outcome this is.
        path: Filesystem path looked up (None for ROOT, and for targets
              rejected before any lookup).
        extension: File extension without the dot ("" if none). Only
                   meaningful for FILE.
        target: The request target this was resolved from, for logging.
    """

    kind: ResourceKind
    path: Optional[Path] = None
    extension: str = ""
    target: str = ""

    @classmethod
    def root(cls) -> "ResolvedResource":
        return cls(ResourceKind.ROOT, target=ROOT_TARGET)

    @classmethod
    def found(cls, path: Path, extension: str, target: str = "") -> "ResolvedResource":
        return cls(ResourceKind.FILE, path=path, extension=extension, target=target)

    @classmethod
    def missing(cls, path: Optional[Path] = None, target: str = "") -> "ResolvedResource":
        return cls(ResourceKind.MISSING, path=path, target=target)

    @property
    def status(self) -> HTTPStatus:
        """200 for ROOT and FILE, 404 for MISSING."""
        if self.kind is ResourceKind.MISSING:
            return HTTPStatus.NOT_FOUND
        return HTTPStatus.OK

    @property
    def content_type(self) -> str:
        """Content-Type header value; only FILE can be anything but HTML."""
        if self.kind is ResourceKind.FILE:
            return get_content_type(self.extension)
        return DEFAULT_CONTENT_TYPE

    @property
    def is_image(self) -> bool:
        """True if the body is streamed as raw bytes."""
        return self.kind is ResourceKind.FILE and is_image_extension(self.extension)


# =============================================================================
# FILESYSTEM COLLABORATOR
# =============================================================================

class FileSystem(Protocol):
    """
    The filesystem queries the worker needs.

    Anything with these two methods can stand in for the local disk,
    which keeps the resolver and the handler testable without real files.
    """

    def is_file(self, path: Path) -> bool:
        """True only for an existing regular file (not a directory, FIFO or device)."""
        ...

    def open_for_read(self, path: Path) -> BinaryIO:
        ...


class LocalFileSystem:
    """FileSystem backed by the local disk via pathlib."""

    def is_file(self, path: Path) -> bool:
        return path.is_file()

    def open_for_read(self, path: Path) -> BinaryIO:
        return path.open("rb")


# =============================================================================
# RESOLVER
# =============================================================================

class ResourceResolver:
    """
    Resolves request targets against a document root.

    The resolver is read-only after construction and is shared by every
    worker thread.

    Usage:
        resolver = ResourceResolver("/srv/www")
        resource = resolver.resolve("/logo.png")
        resource.status         # HTTPStatus.OK
        resource.content_type   # "image/png"
    """

    def __init__(
        self,
        document_root: Union[str, Path],
        filesystem: Optional[FileSystem] = None,
    ):
        self.document_root = Path(document_root)
        self.filesystem = filesystem or LocalFileSystem()

    def resolve(self, target: str, label: str = "-") -> ResolvedResource:
        """
        Resolve a normalised request target.

        Args:
            target: Path part of the request target, e.g. "/" or
                    "/images/logo.png".
            label: Connection identifier used in log messages.

        Returns:
            The resolution outcome. Never raises for "not found".
        """
        if target == ROOT_TARGET:
            return ResolvedResource.root()

        parts = self._split_target(target)
        if parts is None:
            logger.warning(f"[{label}] Rejected target outside document root: {target!r}")
            return ResolvedResource.missing(target=target)

        path = self.document_root.joinpath(*parts)

        try:
            is_file = self.filesystem.is_file(path)
        except OSError as e:
            # e.g. ENAMETOOLONG: nothing by that name can be served
            logger.warning(f"[{label}] Lookup failed for {path}: {e}")
            is_file = False

        if is_file:
            extension = get_extension(path.name)
            return ResolvedResource.found(path, extension, target=target)

        return ResolvedResource.missing(path, target=target)

    def _split_target(self, target: str) -> Optional[List[str]]:
        """
        Split a target into safe path segments.

        Returns None if the target tries to leave the document root or
        contains characters that have no business in a URL path.
        """
        if "\\" in target or "\x00" in target:
            return None

        parts: List[str] = []
        for segment in target.lstrip("/").split("/"):
            if segment in ("", "."):
                continue
            if segment == "..":
                if not parts:
                    return None
                parts.pop()
                continue
            parts.append(segment)
        return parts
