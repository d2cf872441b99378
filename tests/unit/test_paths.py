"""Tests for path and URL helpers."""

import pytest

from webdav_fs.paths import (
    basename,
    content_type_for,
    join_path,
    join_url,
    normalize,
    parent_of,
    strip_base,
)


@pytest.mark.parametrize(
    "path, expected",
    [
        ("", "/"),
        ("/", "/"),
        ("//", "/"),
        ("foo", "/foo"),
        ("/foo/", "/foo"),
        ("//foo//bar///", "/foo/bar"),
        ("a b/c", "/a b/c"),
    ],
)
def test_normalize(path, expected):
    """Test path normalization examples."""
    assert normalize(path) == expected, f"normalize({path!r}) = {normalize(path)!r}"


@pytest.mark.parametrize("path", ["", "x", "/x/", "//a//b/", "/a/b/c"])
def test_normalize_idempotent(path):
    """Test that normalizing twice changes nothing."""
    once = normalize(path)
    assert normalize(once) == once


def test_join_path():
    """Test joining path parts."""
    assert join_path("/docs", "a.txt") == "/docs/a.txt"
    assert join_path("/", "a.txt") == "/a.txt"
    assert join_path("docs/", "/sub/", "") == "/docs/sub"


def test_parent_and_basename():
    """Test parent directory and last segment extraction."""
    assert parent_of("/a/b/c") == "/a/b"
    assert parent_of("/a") == "/"
    assert parent_of("/") == "/"
    assert basename("/a/b/c.txt") == "c.txt"
    assert basename("/a/b/") == "b"
    assert basename("/") == ""


class TestJoinURL:
    """Tests for join_url."""

    def test_mount_prefix_not_doubled(self):
        """Test that a segment repeating the mount prefix is merged."""
        assert join_url("http://h/webdav", "/webdav/file.txt") == "http://h/webdav/file.txt"
        assert join_url("http://h/webdav/", "webdav/a/b") == "http://h/webdav/a/b"
        assert join_url("http://h/webdav/", "/webdav/") == "http://h/webdav/"

    def test_plain_join(self):
        """Test joining segments without a shared prefix."""
        assert join_url("http://h/webdav/", "/docs/a.txt") == "http://h/webdav/docs/a.txt"
        assert join_url("http://h", "docs", "a.txt") == "http://h/docs/a.txt"

    def test_collapses_slashes_keeps_scheme(self):
        """Test that duplicate slashes collapse but the scheme is untouched."""
        assert join_url("https://h//base//", "//x//y") == "https://h/base/x/y"

    def test_trailing_slash_preserved(self):
        """Test that a trailing slash on the last segment survives."""
        assert join_url("http://h/dav/", "dir/") == "http://h/dav/dir/"

    def test_similar_prefix_kept(self):
        """Test that a segment merely starting with the prefix text is kept."""
        assert join_url("http://h/web", "/webdav/x") == "http://h/web/webdav/x"

    def test_no_segments(self):
        """Test joining with nothing returns the base."""
        assert join_url("http://h/dav/") == "http://h/dav/"
        assert join_url("http://h/dav/", "", "") == "http://h/dav/"


def test_strip_base():
    """Test making server paths relative to the mount point."""
    assert strip_base("/webdav/docs/a.txt", "/webdav/") == "/docs/a.txt"
    assert strip_base("/webdav/", "/webdav/") == "/"
    assert strip_base("/docs/a.txt", "/") == "/docs/a.txt"
    assert strip_base("/webdavx/a", "/webdav") == "/webdavx/a"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("notes.txt", "text/plain"),
        ("/a/README.md", "text/markdown"),
        ("data.JSON", "application/json"),
        ("photo.png", "image/png"),
        ("calendar.ics", "text/calendar"),
        ("blob", "application/octet-stream"),
        (".hidden", "application/octet-stream"),
    ],
)
def test_content_type_for(name, expected):
    """Test MIME type inference from file names."""
    assert content_type_for(name) == expected
