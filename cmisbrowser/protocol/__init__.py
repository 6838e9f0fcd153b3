"""
Sans-I/O protocol layer for the CMIS browser binding.

Request encoding and response interpretation live here as pure
functions; the actual HTTP traffic is done by cmisbrowser.io.

Example:
    from cmisbrowser.protocol import build_request, interpret_response
    from cmisbrowser.io import SyncIO

    wire = build_request({"cmisselector": "object", "objectId": "abc"}, succinct=True)
    with SyncIO() as io:
        response = io.execute(wire.for_url(root_folder_url))
        payload = interpret_response(response)
"""

from .request_builder import ALLOWED_VALUES
from .request_builder import build_property_params
from .request_builder import build_request
from .request_builder import select_transport_mode
from .request_builder import validate_params
from .response_parser import interpret_response
from .response_parser import parse_body
from .types import CMISRequest
from .types import CMISResponse
from .types import ContentStream
from .types import PropertyKind
from .types import PropertyValue
from .types import TransportMode
from .types import WireRequest

__all__ = [
    # Types
    "CMISRequest",
    "CMISResponse",
    "ContentStream",
    "PropertyKind",
    "PropertyValue",
    "TransportMode",
    "WireRequest",
    # Builders
    "ALLOWED_VALUES",
    "build_property_params",
    "build_request",
    "select_transport_mode",
    "validate_params",
    # Parsers
    "interpret_response",
    "parse_body",
]
