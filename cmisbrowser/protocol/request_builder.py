"""
Encoding of operation parameters into browser binding wire parameters.

Pure functions without any I/O.  Validation happens here, so an
invalid request never reaches the network.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from cmisbrowser.lib import error
from cmisbrowser.protocol.types import ContentStream, PropertyValue, TransportMode, WireRequest

log = logging.getLogger("cmisbrowser")

#: Enumerated request parameters and the values the server accepts
ALLOWED_VALUES: dict[str, tuple[str, ...]] = {
    "includeRelationships": ("none", "source", "target", "both"),
    "unfileObjects": ("unfile", "deletesinglefiled", "delete"),
}


def validate_params(params: Mapping[str, Any]) -> None:
    """
    Raises InvalidParameterValue if an enumerated parameter holds a
    value outside its allowed set
    """
    for key, allowed in ALLOWED_VALUES.items():
        value = params.get(key)
        if value is not None and value not in allowed:
            raise error.InvalidParameterValue(key, value, allowed)


def wire_scalar(value):
    """Booleans are spelled the way the browser binding expects them"""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def build_property_params(properties: Mapping[str, Any]) -> dict[str, Any]:
    """
    Re-emit a property mapping as indexed ``propertyId[n]`` /
    ``propertyValue[n]`` pairs, in iteration order.

    Multi-valued properties become ``propertyValue[n][m]``.  Plain
    python values are tagged with PropertyValue.of first; the tag
    decides the wire encoding (datetimes go as epoch milliseconds).
    """
    params: dict[str, Any] = {}
    for index, (property_id, value) in enumerate(properties.items()):
        prop = PropertyValue.of(value)
        params[f"propertyId[{index}]"] = property_id
        wire_value = prop.to_wire()
        if prop.multivalued:
            for vindex, v in enumerate(wire_value):
                params[f"propertyValue[{index}][{vindex}]"] = wire_scalar(v)
        else:
            params[f"propertyValue[{index}]"] = wire_scalar(wire_value)
    return params


def select_transport_mode(params: Mapping[str, Any], has_content: bool) -> TransportMode:
    if has_content:
        return TransportMode.POST_MULTIPART
    if "cmisaction" in params:
        return TransportMode.POST_FORM
    return TransportMode.GET


def build_request(
    required_params: Mapping[str, Any],
    optional_params: Optional[Mapping[str, Any]] = None,
    succinct: Optional[bool] = None,
) -> WireRequest:
    """
    Transform the required and optional parameters of an operation into
    wire parameters and select the transport mode.

    Args:
        required_params: Parameters that are always sent
        optional_params: Parameters sent only when not None
        succinct: Default for the ``succinct`` parameter, used when
            the operation does not set it itself

    Returns:
        WireRequest with the merged parameters, the transport mode and
        the content stream (if any)

    Raises:
        InvalidParameterValue: an enumerated parameter is out of range
    """
    optional = {k: v for k, v in (optional_params or {}).items() if v is not None}
    merged: dict[str, Any] = dict(required_params)
    merged.update(optional)

    validate_params(merged)

    content: Optional[ContentStream] = None
    params: dict[str, Any] = {}
    for key, value in merged.items():
        if key == "properties":
            if value:
                params.update(build_property_params(value))
        elif key == "content":
            content = _as_content_stream(value)
        else:
            params[key] = wire_scalar(value)

    if succinct is not None and "succinct" not in params:
        params["succinct"] = wire_scalar(succinct)

    transport_mode = select_transport_mode(params, content is not None)
    log.debug("built %s request with params %s", transport_mode.value, params)
    return WireRequest(
        params=params,
        transport_mode=transport_mode,
        content=content,
        headers=request_headers(params),
    )


def request_headers(params: Mapping[str, Any]) -> dict[str, str]:
    """
    Headers specific to a request.  Content streams come in any mime
    type, so content reads accept anything instead of JSON only.
    """
    if params.get("cmisselector") == "content":
        return {"Accept": "*/*"}
    return {}


def _as_content_stream(value) -> ContentStream:
    if isinstance(value, ContentStream):
        return value
    if isinstance(value, Mapping):
        return ContentStream(
            stream=value["stream"],
            mime_type=value.get("mime_type", "application/octet-stream"),
            filename=value.get("filename"),
        )
    stream, mime_type, filename = value
    return ContentStream(stream=stream, mime_type=mime_type, filename=filename)
