"""
Interpretation of browser binding responses.

The server answers with JSON on success and with a JSON error document
(``{"exception": ..., "message": ...}``) and a non-2xx status on
failure.  Content streams come back unparsed.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from cmisbrowser.lib import error
from cmisbrowser.lib.python_utilities import to_normal_str
from cmisbrowser.protocol.types import CMISResponse

log = logging.getLogger("cmisbrowser")


def parse_body(response: CMISResponse) -> Any:
    """
    Parse a JSON body into python structures, pass anything else through
    as bytes.  An empty body yields None.
    """
    if not response.body:
        return None
    if response.is_json:
        return json.loads(to_normal_str(response.body))
    return response.body


def interpret_response(response: CMISResponse, url: str | None = None) -> Any:
    """
    Convert a response into the success payload, or raise.

    Args:
        response: The response as delivered by the transport
        url: The request URL, only used for error reporting

    Returns:
        The parsed JSON value, the raw body (non-JSON) or None (no body)

    Raises:
        CMISRequestError: on a non-2xx status.  If the server sent an
            error document, the subclass matching its ``exception`` is
            raised, carrying exception and message verbatim.
    """
    try:
        result = parse_body(response)
    except ValueError:
        if response.ok:
            raise
        ## A broken error document is still an error, report the raw body
        result = response.body

    if response.ok:
        if response.body and not response.is_json and response.content_type.startswith("text/html"):
            error.weirdness(f"Unexpected content type: {response.content_type}")
        return result

    log.debug("server responded with status %i: %r", response.status, response.body)
    if isinstance(result, dict) and "exception" in result:
        exception = result["exception"]
        raise error.exception_by_name[exception](
            exception=exception,
            message=result.get("message"),
            url=url,
            status=response.status,
        )
    raise error.CMISRequestError(
        exception=None,
        message=to_normal_str(response.body) or "",
        url=url,
        status=response.status,
    )
