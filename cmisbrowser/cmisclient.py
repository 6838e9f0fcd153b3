#!/usr/bin/env python
import logging
import sys
from types import TracebackType
from typing import Any
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from requests.auth import AuthBase
from requests.auth import HTTPBasicAuth

from cmisbrowser import __version__
from cmisbrowser.directory import DEFAULT_CACHE_SIZE
from cmisbrowser.directory import LRUCache
from cmisbrowser.directory import RepositoryDirectory
from cmisbrowser.io.base import SyncIOProtocol
from cmisbrowser.io.sync import SyncIO
from cmisbrowser.lib import error
from cmisbrowser.protocol.request_builder import build_request
from cmisbrowser.protocol.response_parser import interpret_response
from cmisbrowser.protocol.types import CMISRequest
from cmisbrowser.repository import Repository

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

"""
The ``CMISClient`` class handles the communication with a CMIS server
speaking the browser binding.  ``get_cmisclient`` will return a
CMISClient object, based either on parameters, environmental variables
or a configuration file.
"""

log = logging.getLogger("cmisbrowser")


class CMISClient:
    """
    Basic client for the CMIS browser binding, uses the requests lib.

    Every operation is one blocking HTTP round trip, except when the
    repository URLs are not known yet; then the service root is asked
    for them first.  There are no automatic retries.
    """

    url: str = None
    succinct_properties: bool = True

    def __init__(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        auth: Optional[AuthBase] = None,
        succinct_properties: bool = True,
        timeout: Optional[float] = None,
        headers: Mapping[str, str] = None,
        ssl_verify_cert: Union[bool, str] = True,
        ssl_cert: Union[str, Tuple[str, str], None] = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
        io: Optional[SyncIOProtocol] = None,
    ) -> None:
        """
        Sets up the transport and the repository directory.

        Args:
          url: The service URL of the browser binding, i.e. `http://localhost:8080/browser`
          username, password: credentials for basic auth, sent with every request
          auth: A requests.auth.AuthBase object, may be passed instead of username/password
          succinct_properties: ask the server for succinct property representations
          timeout, ssl_verify_cert and ssl_cert are passed to requests.
          ssl_verify_cert can be the path of a CA-bundle or False.
          cache_size: how many repositories the repository directory remembers,
            also the size of the type definition cache
          io: transport to use instead of a requests based SyncIO
        """
        log.debug("url: " + str(url))
        self.url = url
        self.username = username
        self.succinct_properties = succinct_properties

        if auth and username:
            log.error(
                "both auth object and username sent to CMISClient.  The latter will be ignored."
            )
        elif username is not None:
            auth = HTTPBasicAuth(username, password or "")
        self.auth = auth

        # Build global headers
        self.headers = {
            "User-Agent": "cmisbrowser/" + __version__,
            "Accept": "application/json",
        }
        self.headers.update(headers or {})

        if io is None:
            io = SyncIO(
                auth=self.auth,
                timeout=timeout,
                verify=ssl_verify_cert,
                cert=ssl_cert,
                headers=self.headers,
            )
        self.io = io
        self.directory = RepositoryDirectory(
            self._fetch_repository_listing, cache_size=cache_size
        )
        ## (repository id, type id) -> TypeDefinition, None for unknown types
        self.type_definitions = LRUCache(cache_size)

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Optional[BaseException] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """
        Closes the transport
        """
        self.io.close()

    def _fetch_repository_listing(self) -> Dict[str, Any]:
        return self.request(CMISRequest(url=self.url))

    def infer_url(self, repository_id: Optional[str], object_id: Optional[str] = None) -> str:
        """
        The URL a request should go to.  Requests without a repository
        go to the service URL, requests addressing an object go to the
        root folder URL of the repository and everything else to the
        repository URL.
        """
        if repository_id is None:
            return self.url
        if object_id is not None:
            return self.directory.resolve_root_folder_url(repository_id)
        return self.directory.resolve_operation_url(repository_id)

    def perform_request(
        self,
        required_params: Mapping[str, Any],
        optional_params: Optional[Mapping[str, Any]] = None,
    ):
        """
        Encode the parameters, send the request to the right URL and
        interpret the response.

        Args:
            required_params: parameters of the operation, including
                ``repositoryId`` and ``cmisselector`` or ``cmisaction``
            optional_params: parameters sent only if not None

        Returns:
            The parsed JSON response, the raw body for content streams,
            None for empty responses

        Raises:
            InvalidParameterValue: before anything is sent
            RepositoryNotFound, TransportError, CMISRequestError
        """
        ## validation happens in build_request, before any network access
        wire_request = build_request(
            required_params, optional_params, succinct=self.succinct_properties
        )
        url = self.infer_url(
            required_params.get("repositoryId"), required_params.get("objectId")
        )
        return self.request(wire_request.for_url(url))

    def request(self, request: CMISRequest):
        """
        Actually sends the request and interprets the response
        """
        response = self.io.execute(request)
        return interpret_response(response, url=request.url)

    def repositories(self) -> List[Repository]:
        """
        All repositories listed by the service root.  This refreshes
        the repository directory.
        """
        return [
            Repository(self, descriptor.info)
            for descriptor in self.directory.refill().values()
        ]

    def repository(self, repository_id: str) -> Repository:
        """
        Returns a Repository object.  No network traffic is needed if
        the repository is in the repository directory already.

        Raises RepositoryNotFound if the service root does not list it
        """
        descriptor = self.directory.resolve(repository_id)
        info = dict(descriptor.info)
        info.setdefault("repositoryId", repository_id)
        return Repository(self, info)

    def has_repository(self, repository_id: str) -> bool:
        try:
            self.repository(repository_id)
            return True
        except error.RepositoryNotFound:
            return False


def get_cmisclient(
    config_file: str = None,
    config_section: str = None,
    environment: bool = True,
    **config_data,
) -> Optional[CMISClient]:
    """
    This function will yield a CMISClient object.  It will not try to
    connect.  It will read configuration from various sources, dependent
    on the parameters given, in this order:

    * Data from the parameters given
    * Environment variables prepended with `CMIS_`, like `CMIS_URL`, `CMIS_USERNAME`, `CMIS_PASSWORD`.
    * Configuration file, `CMIS_CONFIG_FILE` or `~/.config/cmisbrowser/connection.conf`

    Returns None if no configuration was found
    """
    ## late import, the config stuff is not needed for normal library usage
    from . import config

    conn_params = config.get_connection_params(
        config_file=config_file,
        config_section_name=config_section,
        environment=environment,
        **config_data,
    )
    if conn_params is None:
        return None
    return CMISClient(**conn_params)
