"""Debug logging utilities for the WebDAV client."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from lxml import etree

logger = logging.getLogger("webdav_fs")


def format_xml(xml_bytes: bytes | str) -> str:
    """Format XML with proper indentation.

    Args:
        xml_bytes: XML content as bytes or string

    Returns:
        Pretty-formatted XML string
    """
    try:
        if isinstance(xml_bytes, str):
            xml_bytes = xml_bytes.encode("utf-8")

        # Parse and pretty-print XML
        parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
        root = etree.fromstring(xml_bytes, parser)
        return etree.tostring(root, pretty_print=True, encoding="unicode")
    except (etree.XMLSyntaxError, ValueError):
        # If parsing fails, return as-is
        if isinstance(xml_bytes, bytes):
            return xml_bytes.decode("utf-8", errors="replace")
        return str(xml_bytes)


def is_xml_content(content_type: str | None) -> bool:
    """Check if content type is XML.

    Args:
        content_type: Content-Type header value

    Returns:
        True if content type indicates XML
    """
    if not content_type:
        return False

    xml_types = ["application/xml", "text/xml"]
    return any(xml_type in content_type.lower() for xml_type in xml_types)


def _log_headers(headers: Mapping[str, str], interesting: list[str]) -> None:
    logger.debug("Headers:")
    for header in interesting:
        value = headers.get(header.lower(), headers.get(header))
        if value:
            # Redact authorization
            if header == "Authorization":
                value = "[REDACTED]"
            logger.debug(f"  {header}: {value}")


def _log_body(label: str, content_type: str, body: bytes) -> None:
    logger.debug("-" * 80)
    logger.debug(f"{label}:")

    if is_xml_content(content_type):
        formatted = format_xml(body)
        for line in formatted.split("\n"):
            if line.strip():
                logger.debug(f"  {line}")
    else:
        # Log non-XML bodies with size info
        body_preview = body[:200].decode("utf-8", errors="replace")
        logger.debug(f"  [{len(body)} bytes] {body_preview}")
        if len(body) > 200:
            logger.debug(f"  ... ({len(body) - 200} more bytes)")


def log_request(method: str, url: str, headers: Mapping[str, str], body: bytes | None) -> None:
    """Log an outgoing HTTP request.

    Args:
        method: HTTP method
        url: Request URL
        headers: Request headers
        body: Request body (if any)
    """
    logger.debug("=" * 80)
    logger.debug(f">>> OUTGOING REQUEST: {method} {url}")
    logger.debug("-" * 80)

    _log_headers(
        headers,
        [
            "Content-Type",
            "Content-Length",
            "Depth",
            "Destination",
            "Overwrite",
            "Authorization",
        ],
    )

    if body:
        _log_body("Request Body", headers.get("content-type", headers.get("Content-Type", "")), body)

    logger.debug("=" * 80)


def log_response(status_code: int, headers: Mapping[str, str], body: bytes | None) -> None:
    """Log an incoming HTTP response.

    Args:
        status_code: HTTP status code
        headers: Response headers
        body: Response body (if any)
    """
    logger.debug("=" * 80)
    logger.debug(f"<<< INCOMING RESPONSE: {status_code}")
    logger.debug("-" * 80)

    _log_headers(headers, ["Content-Type", "Content-Length", "ETag", "DAV", "Location"])

    if body:
        _log_body("Response Body", headers.get("content-type", ""), body)

    logger.debug("=" * 80)
    logger.debug("")  # Empty line for readability


def setup_debug_logging() -> None:
    """Configure debug logging for the WebDAV client."""
    # Configure logger
    logger.setLevel(logging.DEBUG)

    # Create console handler with custom formatter
    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)

    # Simple format - just the message (since we format the logs ourselves)
    formatter = logging.Formatter("%(message)s")
    handler.setFormatter(formatter)

    # Add handler to logger
    logger.addHandler(handler)

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False
