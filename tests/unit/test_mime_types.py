"""
Unit tests for Content-Type selection.
"""

import pytest

from webworker.http.mime_types import (
    get_content_type,
    get_extension,
    is_image_extension,
)


class TestGetExtension:
    """Tests for extension extraction."""

    @pytest.mark.parametrize("name, expected", [
        ("logo.png", "png"),
        ("archive.tar.gz", "gz"),
        ("images/cat.gif", "gif"),
        ("README", ""),
        (".htaccess", ""),
        ("dir.d/README", ""),
        ("trailing.", ""),
    ])
    def test_extension(self, name: str, expected: str):
        assert get_extension(name) == expected


class TestGetContentType:
    """Tests for the fixed extension table."""

    @pytest.mark.parametrize("extension, expected", [
        ("png", "image/png"),
        ("jpg", "image/jpg"),
        ("gif", "image/gif"),
        ("ico", "image/x-icon"),
    ])
    def test_image_types(self, extension: str, expected: str):
        assert get_content_type(extension) == expected
        assert is_image_extension(extension)

    @pytest.mark.parametrize("extension", ["html", "txt", "css", "jpeg", "svg", ""])
    def test_everything_else_is_html(self, extension: str):
        assert get_content_type(extension) == "text/html"
        assert not is_image_extension(extension)

    def test_case_insensitive(self):
        assert get_content_type("PNG") == "image/png"
        assert is_image_extension("Ico")
