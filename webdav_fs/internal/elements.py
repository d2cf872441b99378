"""WebDAV XML elements.

Parsing is namespace-insensitive: elements are matched by their lower-cased
local name, so ``<D:response>``, ``<d:response>``, ``<response xmlns="DAV:">``
and even a response with an undeclared prefix are all recognised.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import unquote, urlsplit

from dateutil import parser as date_parser
from lxml import etree

from ..errors import WebDAVError
from .internal import parse_status_line

# WebDAV namespace
NAMESPACE = "DAV:"
NS = {"D": NAMESPACE}

# Property names (local names in the DAV: namespace)
RESOURCE_TYPE = "resourcetype"
DISPLAY_NAME = "displayname"
GET_CONTENT_LENGTH = "getcontentlength"
GET_CONTENT_TYPE = "getcontenttype"
GET_LAST_MODIFIED = "getlastmodified"
CREATION_DATE = "creationdate"
GET_ETAG = "getetag"
COLLECTION = "collection"

# Properties requested for stat and directory listings
FILE_INFO_PROPS = (
    RESOURCE_TYPE,
    GET_CONTENT_LENGTH,
    GET_LAST_MODIFIED,
    CREATION_DATE,
    GET_CONTENT_TYPE,
    GET_ETAG,
    DISPLAY_NAME,
)

_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    remove_comments=True,
    remove_pis=True,
)


def local_name(element: etree._Element) -> str:
    """Return the lower-cased local name of an element, without namespace or prefix."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if "}" in tag:
        tag = tag.rsplit("}", 1)[1]
    if ":" in tag:
        tag = tag.rsplit(":", 1)[1]
    return tag.lower()


def children(element: etree._Element, name: str) -> Iterator[etree._Element]:
    """Iterate over direct children with the given local name."""
    name = name.lower()
    for child in element:
        if local_name(child) == name:
            yield child


def find(element: etree._Element, name: str) -> etree._Element | None:
    """Return the first direct child with the given local name."""
    return next(children(element, name), None)


def text_of(element: etree._Element | None) -> str:
    """Return the stripped text content of an element and its descendants."""
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def parse_date(value: str | None) -> datetime | None:
    """Parse an RFC 1123 or ISO 8601 date, returning None if it can't be parsed."""
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None


@dataclass
class Prop:
    """Properties of one resource, keyed by lower-cased local name."""

    raw: dict[str, etree._Element] = field(default_factory=dict)

    @staticmethod
    def from_xml(elements: Iterable[etree._Element]) -> Prop:
        """Collect the children of one or more ``<prop>`` elements."""
        raw: dict[str, etree._Element] = {}
        for prop_el in elements:
            for child in prop_el:
                name = local_name(child)
                if name:
                    raw.setdefault(name, child)
        return Prop(raw=raw)

    def get(self, name: str) -> etree._Element | None:
        """Get a property element by name."""
        return self.raw.get(name.lower())

    def text(self, name: str) -> str | None:
        """Get the text of a property, None if missing or empty."""
        return text_of(self.get(name)) or None

    @property
    def is_collection(self) -> bool:
        """True if ``resourcetype`` contains a ``collection`` marker."""
        res_type = self.get(RESOURCE_TYPE)
        return res_type is not None and find(res_type, COLLECTION) is not None

    @property
    def content_length(self) -> int:
        value = self.text(GET_CONTENT_LENGTH)
        if value is None:
            return 0
        try:
            return max(int(value), 0)
        except ValueError:
            return 0

    @property
    def last_modified(self) -> datetime | None:
        return parse_date(self.text(GET_LAST_MODIFIED))

    @property
    def creation_date(self) -> datetime | None:
        return parse_date(self.text(CREATION_DATE))

    @property
    def content_type(self) -> str | None:
        return self.text(GET_CONTENT_TYPE)

    @property
    def etag(self) -> str | None:
        return self.text(GET_ETAG)

    @property
    def display_name(self) -> str | None:
        return self.text(DISPLAY_NAME)


@dataclass
class PropStat:
    """WebDAV propstat element."""

    prop: Prop
    status_code: int | None = None

    @staticmethod
    def from_xml(element: etree._Element) -> PropStat:
        """Parse from XML element."""
        return PropStat(
            prop=Prop.from_xml(children(element, "prop")),
            status_code=parse_status_line(text_of(find(element, "status"))),
        )

    @property
    def ok(self) -> bool:
        """A propstat without a status line is treated as successful."""
        return self.status_code is None or self.status_code // 100 == 2


@dataclass
class Response:
    """WebDAV response element."""

    raw_href: str = ""
    status_code: int | None = None
    propstats: list[PropStat] = field(default_factory=list)

    @staticmethod
    def from_xml(element: etree._Element) -> Response:
        """Parse from XML element."""
        return Response(
            raw_href=text_of(find(element, "href")),
            status_code=parse_status_line(text_of(find(element, "status"))),
            propstats=[PropStat.from_xml(ps) for ps in children(element, "propstat")],
        )

    @property
    def path(self) -> str:
        """Decoded path component of the href (hrefs may be absolute URLs)."""
        return unquote(urlsplit(self.raw_href).path)

    @property
    def prop(self) -> Prop:
        """Properties merged from all successful propstats."""
        merged: dict[str, etree._Element] = {}
        for propstat in self.propstats:
            if propstat.ok:
                for name, el in propstat.prop.raw.items():
                    merged.setdefault(name, el)
        return Prop(raw=merged)


@dataclass
class MultiStatus:
    """WebDAV multistatus response."""

    responses: list[Response] = field(default_factory=list)

    @staticmethod
    def from_xml(element: etree._Element) -> MultiStatus:
        """Parse from XML element."""
        if local_name(element) != "multistatus":
            raise WebDAVError.protocol(
                f"webdav: expected multistatus root element, got {local_name(element)!r}"
            )
        return MultiStatus(responses=[Response.from_xml(r) for r in children(element, "response")])


def parse_multistatus(data: bytes | str) -> MultiStatus:
    """Parse a multistatus document.

    Args:
        data: Raw XML

    Returns:
        Parsed multistatus, responses in document order

    Raises:
        WebDAVError: If the document is empty or not a multistatus
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data.strip():
        raise WebDAVError.protocol("webdav: empty multistatus response")

    try:
        root = etree.fromstring(data, _PARSER)
    except etree.XMLSyntaxError as e:
        raise WebDAVError.protocol(f"webdav: malformed multistatus response: {e}", cause=e) from e
    return MultiStatus.from_xml(root)


def _prop_tag(name: str) -> str:
    # Clark notation keeps its own namespace
    if name.startswith("{"):
        return name
    return f"{{{NAMESPACE}}}{name}"


@dataclass
class PropFind:
    """WebDAV PROPFIND request."""

    names: list[str] = field(default_factory=list)

    def to_xml(self) -> etree._Element:
        """Convert to XML element. No names means ``allprop``."""
        pf = etree.Element(f"{{{NAMESPACE}}}propfind", nsmap=NS)
        if not self.names:
            etree.SubElement(pf, f"{{{NAMESPACE}}}allprop")
            return pf

        prop = etree.SubElement(pf, f"{{{NAMESPACE}}}prop")
        for name in self.names:
            etree.SubElement(prop, _prop_tag(name))
        return pf


@dataclass
class PropertyUpdate:
    """WebDAV PROPPATCH request (``set`` only)."""

    set_props: dict[str, str] = field(default_factory=dict)

    def to_xml(self) -> etree._Element:
        """Convert to XML element."""
        update = etree.Element(f"{{{NAMESPACE}}}propertyupdate", nsmap=NS)
        set_el = etree.SubElement(update, f"{{{NAMESPACE}}}set")
        prop = etree.SubElement(set_el, f"{{{NAMESPACE}}}prop")
        for name, value in self.set_props.items():
            etree.SubElement(prop, _prop_tag(name)).text = value
        return update


def to_bytes(element: etree._Element) -> bytes:
    """Serialize an element with an XML declaration."""
    return etree.tostring(element, encoding="utf-8", xml_declaration=True)


def propfind_body(names: Sequence[str] = ()) -> bytes:
    """Build a PROPFIND body for the given property names."""
    return to_bytes(PropFind(names=list(names)).to_xml())


def proppatch_body(values: Mapping[str, str]) -> bytes:
    """Build a PROPPATCH body setting the given properties."""
    return to_bytes(PropertyUpdate(set_props=dict(values)).to_xml())
