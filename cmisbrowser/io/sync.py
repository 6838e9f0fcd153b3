"""
Synchronous I/O implementation using the requests library.
"""

import logging
from typing import Mapping, Optional, Tuple, Union

import requests
from requests.auth import AuthBase

from cmisbrowser.lib import error
from cmisbrowser.protocol.types import CMISRequest, CMISResponse, TransportMode

log = logging.getLogger("cmisbrowser")


class SyncIO:
    """
    Synchronous I/O shell using the requests library.

    This is a thin wrapper that executes CMISRequest objects via HTTP
    and returns CMISResponse objects.  Exactly one HTTP request is done
    per call, there are no retries.

    Example:
        io = SyncIO(auth=HTTPBasicAuth("admin", "admin"))
        response = io.execute(build_request(params).for_url(url))
        result = interpret_response(response)
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        auth: Optional[AuthBase] = None,
        timeout: Optional[float] = 30.0,
        verify: Union[bool, str] = True,
        cert: Union[str, Tuple[str, str], None] = None,
        headers: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the sync I/O handler.

        Args:
            session: Existing requests Session to use (creates new if None)
            auth: requests auth object, attached to every request
            timeout: Request timeout in seconds
            verify: Verify SSL certificates, or path to a CA bundle
            cert: Client side certificate
            headers: Headers sent with every request
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.auth = auth
        self.timeout = timeout
        self.verify = verify
        self.cert = cert
        self.headers = dict(headers or {})

    def execute(self, request: CMISRequest) -> CMISResponse:
        """
        Execute a CMISRequest and return CMISResponse.

        GET puts the parameters in the query string, POST_FORM sends
        them url-encoded in the body and POST_MULTIPART sends them as
        multipart form fields next to the ``content`` file part.

        Raises:
            TransportError: if the request could not be completed
        """
        kwargs = {}
        if request.transport_mode is TransportMode.GET:
            kwargs["params"] = request.params
        else:
            kwargs["data"] = request.params
        if request.transport_mode is TransportMode.POST_MULTIPART:
            content = request.content
            kwargs["files"] = {
                "content": (content.filename, content.read(), content.mime_type)
            }

        log.debug(
            "sending request - method={0}, url={1}, params={2}".format(
                request.method, request.url, request.params
            )
        )
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers={**self.headers, **request.headers},
                auth=self.auth,
                timeout=self.timeout,
                verify=self.verify,
                cert=self.cert,
                **kwargs,
            )
        except requests.RequestException as e:
            raise error.TransportError(url=request.url, reason=str(e)) from e
        log.debug("server responded with %i %s" % (response.status_code, response.reason))

        return CMISResponse(
            status=response.status_code,
            content_type=response.headers.get("Content-Type", ""),
            body=response.content,
            headers=dict(response.headers),
        )

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> "SyncIO":
        """Context manager entry."""
        return self

    def __exit__(self, *args) -> None:
        """Context manager exit."""
        self.close()
