"""
=============================================================================
HTTP PACKAGE
=============================================================================

The protocol pieces of the worker, each usable on its own:

    request.py       Read the request line, drain headers
    resolver.py      Target → ROOT / FILE / MISSING
    mime_types.py    Extension → Content-Type
    response.py      Status line + header block, fixed bodies, HTTP dates
    templates.py     <cs371date> / <cs371server> substitution
    status_codes.py  200 and 404

=============================================================================
"""

from .request import RequestLine, RequestReader, MalformedRequest, normalize_target
from .resolver import (
    ResourceResolver,
    ResolvedResource,
    ResourceKind,
    FileSystem,
    LocalFileSystem,
)
from .mime_types import get_content_type, get_extension, is_image_extension
from .response import ResponseHeader, format_http_date, ROOT_PAGE, NOT_FOUND_PAGE
from .templates import TemplateContext, Clock, SystemClock, DATE_TAG, SERVER_TAG
from .status_codes import HTTPStatus

__all__ = [
    # Request reading
    "RequestLine",
    "RequestReader",
    "MalformedRequest",
    "normalize_target",

    # Resolution
    "ResourceResolver",
    "ResolvedResource",
    "ResourceKind",
    "FileSystem",
    "LocalFileSystem",

    # Content types
    "get_content_type",
    "get_extension",
    "is_image_extension",

    # Response
    "ResponseHeader",
    "format_http_date",
    "ROOT_PAGE",
    "NOT_FOUND_PAGE",

    # Templates
    "TemplateContext",
    "Clock",
    "SystemClock",
    "DATE_TAG",
    "SERVER_TAG",

    # Status codes
    "HTTPStatus",
]
