"""
Core protocol types for the CMIS browser binding.

These dataclasses represent property values, content streams and HTTP
requests/responses at the protocol level, independent of any I/O
implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from cmisbrowser.lib.python_utilities import to_wire


class PropertyKind(Enum):
    """Kinds of CMIS property values, as far as wire encoding is concerned."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    ID = "id"

    @classmethod
    def from_wire_type(cls, wire_type: Optional[str]) -> "PropertyKind":
        """
        Map a CMIS property type as found in JSON payloads ("integer",
        "html", ...) onto a PropertyKind.  Unknown types are treated
        as strings.
        """
        return _WIRE_TYPES.get(wire_type, cls.STRING)


_WIRE_TYPES = {
    "string": PropertyKind.STRING,
    "html": PropertyKind.STRING,
    "uri": PropertyKind.STRING,
    "integer": PropertyKind.NUMBER,
    "decimal": PropertyKind.NUMBER,
    "boolean": PropertyKind.BOOLEAN,
    "datetime": PropertyKind.DATETIME,
    "id": PropertyKind.ID,
}


def datetime_to_millis(value: datetime) -> int:
    """Epoch milliseconds, rounded from the (fractional) epoch seconds."""
    return int(round(value.timestamp() * 1000))


def millis_to_datetime(value) -> datetime:
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


def _kind_of(value) -> PropertyKind:
    ## bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return PropertyKind.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return PropertyKind.NUMBER
    if isinstance(value, datetime):
        return PropertyKind.DATETIME
    return PropertyKind.STRING


@dataclass(frozen=True)
class PropertyValue:
    """
    A tagged CMIS property value.

    The tag decides the wire encoding; a datetime value is a native
    datetime in memory and epoch milliseconds on the wire.

    Attributes:
        kind: The PropertyKind of the value
        value: The value, a list of values if multivalued
        multivalued: True for multi-valued properties
    """

    kind: PropertyKind
    value: Any
    multivalued: bool = False

    @classmethod
    def of(cls, value, kind: Optional[PropertyKind] = None) -> "PropertyValue":
        """
        Tag a plain python value.  PropertyValue objects are returned
        as they are.  Lists and tuples become multi-valued properties.
        Pass ``kind`` to tag ids (which look like strings).
        """
        if isinstance(value, PropertyValue):
            return value
        if isinstance(value, (list, tuple)):
            values = list(value)
            if kind is None:
                kind = _kind_of(values[0]) if values else PropertyKind.STRING
            return cls(kind=kind, value=values, multivalued=True)
        if kind is None:
            kind = _kind_of(value)
        return cls(kind=kind, value=value)

    @classmethod
    def from_wire(
        cls, kind: PropertyKind, raw, multivalued: bool = False
    ) -> "PropertyValue":
        if multivalued:
            values = [] if raw is None else list(raw)
            return cls(
                kind=kind,
                value=[_decode(kind, v) for v in values],
                multivalued=True,
            )
        return cls(kind=kind, value=_decode(kind, raw))

    def to_wire(self):
        """The value as it is sent to the server (a list if multivalued)"""
        if self.multivalued:
            return [_encode(self.kind, v) for v in self.value]
        return _encode(self.kind, self.value)

    @property
    def first(self):
        """The value, or the first value of a multi-valued property"""
        if self.multivalued:
            return self.value[0] if self.value else None
        return self.value


def _encode(kind: PropertyKind, value):
    if value is None:
        return None
    if kind is PropertyKind.DATETIME and isinstance(value, datetime):
        return datetime_to_millis(value)
    return value


def _decode(kind: PropertyKind, value):
    if value is None:
        return None
    if kind is PropertyKind.DATETIME and isinstance(value, (int, float)):
        return millis_to_datetime(value)
    return value


@dataclass(frozen=True)
class ContentStream:
    """
    A content stream to be uploaded.

    Attributes:
        stream: bytes, str or a file-like object with a read method
        mime_type: The declared mime type, e.g. "text/plain"
        filename: The file name reported to the server
    """

    stream: Any
    mime_type: str = "application/octet-stream"
    filename: Optional[str] = None

    def read(self) -> bytes:
        if hasattr(self.stream, "read"):
            return to_wire(self.stream.read())
        return to_wire(self.stream)


class TransportMode(Enum):
    """How a request is put on the wire."""

    GET = "GET"
    POST_FORM = "POST_FORM"
    POST_MULTIPART = "POST_MULTIPART"


@dataclass(frozen=True)
class WireRequest:
    """
    The result of encoding an operation's parameters, not yet bound to
    a URL.

    Attributes:
        params: The wire parameters, in insertion order
        transport_mode: GET, POST_FORM or POST_MULTIPART
        content: Content stream for multipart uploads
        headers: Request specific HTTP headers
    """

    params: dict[str, Any]
    transport_mode: TransportMode
    content: Optional[ContentStream] = None
    headers: dict[str, str] = field(default_factory=dict)

    def for_url(self, url: str) -> "CMISRequest":
        return CMISRequest(
            url=url,
            transport_mode=self.transport_mode,
            params=self.params,
            content=self.content,
            headers=self.headers,
        )


@dataclass(frozen=True)
class CMISRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.
    """

    url: str
    transport_mode: TransportMode = TransportMode.GET
    params: dict[str, Any] = field(default_factory=dict)
    content: Optional[ContentStream] = None
    headers: dict[str, str] = field(default_factory=dict)

    def with_header(self, name: str, value: str) -> "CMISRequest":
        """Return new request with additional header."""
        return CMISRequest(
            url=self.url,
            transport_mode=self.transport_mode,
            params=self.params,
            content=self.content,
            headers={**self.headers, name: value},
        )

    @property
    def method(self) -> str:
        if self.transport_mode is TransportMode.GET:
            return "GET"
        return "POST"


@dataclass(frozen=True)
class CMISResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        content_type: The Content-Type header, "" if missing
        body: Response body as bytes
        headers: HTTP headers as dict
    """

    status: int
    content_type: str = ""
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True if status indicates success (2xx)."""
        return 200 <= self.status < 300

    @property
    def is_json(self) -> bool:
        return self.content_type.split(";")[0].strip().lower() == "application/json"
