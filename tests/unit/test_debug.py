"""Tests for debug logging helpers."""

import logging

from webdav_fs.debug import format_xml, is_xml_content, log_request, log_response


def test_format_xml():
    formatted = format_xml(b'<a xmlns="DAV:"><b>1</b></a>')
    assert formatted.splitlines()[1].strip() == "<b>1</b>"
    assert format_xml(b"not <xml") == "not <xml"


def test_is_xml_content():
    assert is_xml_content("application/xml; charset=utf-8")
    assert is_xml_content("text/xml")
    assert not is_xml_content("text/plain")
    assert not is_xml_content(None)


def test_authorization_redacted(caplog):
    """Test that credentials never reach the log."""
    with caplog.at_level(logging.DEBUG, logger="webdav_fs"):
        log_request(
            "PROPFIND",
            "http://dav.test/webdav/",
            {"Authorization": "Bearer secret-token", "Depth": "1"},
            b"<propfind/>",
        )

    assert "secret-token" not in caplog.text
    assert "[REDACTED]" in caplog.text
    assert ">>> OUTGOING REQUEST: PROPFIND http://dav.test/webdav/" in caplog.text
    assert "Depth: 1" in caplog.text


def test_binary_body_preview(caplog):
    with caplog.at_level(logging.DEBUG, logger="webdav_fs"):
        log_response(200, {"content-type": "application/octet-stream"}, b"x" * 300)

    assert "<<< INCOMING RESPONSE: 200" in caplog.text
    assert "[300 bytes]" in caplog.text
    assert "(100 more bytes)" in caplog.text
