"""
=============================================================================
CONTENT-TYPE SELECTION
=============================================================================

Maps a resolved file's extension to the Content-Type header value.

=============================================================================
A FIXED TABLE, NOT SNIFFING
=============================================================================

The worker recognises exactly one class of non-HTML content: images.

    ┌────────────────────────────────────────────────────────────────────┐
    │  Extension      Content-Type      Body delivery                    │
    ├────────────────────────────────────────────────────────────────────┤
    │  png            image/png         raw bytes, streamed in chunks    │
    │  jpg            image/jpg         raw bytes, streamed in chunks    │
    │  gif            image/gif         raw bytes, streamed in chunks    │
    │  ico            image/x-icon      raw bytes, streamed in chunks    │
    │  anything else  text/html         decoded, tags substituted        │
    │  (or none)                                                         │
    └────────────────────────────────────────────────────────────────────┘

The choice never looks at file contents. A file called "notes.txt" is
served as text/html, and so is "Makefile".

Note that jpg maps to "image/jpg", not the registered "image/jpeg".
Browsers accept both and existing clients of this server expect the
former.

=============================================================================
"""

from pathlib import PurePosixPath


# =============================================================================
# MIME TYPE TABLE
# =============================================================================
#
# Keys are lowercase extensions WITHOUT the dot, exactly as returned by
# get_extension(). Lookups lowercase the extension first, so LOGO.PNG is
# still an image.
#
# =============================================================================

IMAGE_TYPES = {
    "png": "image/png",
    "jpg": "image/jpg",
    "gif": "image/gif",
    "ico": "image/x-icon",
}

# Everything that is not an image is served as HTML
DEFAULT_CONTENT_TYPE = "text/html"


def get_extension(name: str) -> str:
    """
    Extract the extension from a file name or path.

    The extension is the text after the LAST dot of the final path
    component. There is no extension when:

    - the name contains no dot               ("README")
    - the only dot is the first character    (".htaccess")

    Examples:
        >>> get_extension("logo.png")
        'png'
        >>> get_extension("archive.tar.gz")
        'gz'
        >>> get_extension(".hidden")
        ''
        >>> get_extension("docs/README")
        ''
    """
    filename = PurePosixPath(name).name
    dot = filename.rfind(".")
    if dot <= 0:
        return ""
    return filename[dot + 1:]


def is_image_extension(extension: str) -> bool:
    """Check whether an extension is served as a raw binary image."""
    return extension.lower() in IMAGE_TYPES


def get_content_type(extension: str) -> str:
    """
    Get the Content-Type for an extension.

    Unrecognised and empty extensions fall back to text/html.

    Examples:
        >>> get_content_type("png")
        'image/png'
        >>> get_content_type("ICO")
        'image/x-icon'
        >>> get_content_type("txt")
        'text/html'
        >>> get_content_type("")
        'text/html'
    """
    return IMAGE_TYPES.get(extension.lower(), DEFAULT_CONTENT_TYPE)
