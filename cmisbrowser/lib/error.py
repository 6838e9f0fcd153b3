#!/usr/bin/env python
import logging
import os
from collections import defaultdict
from typing import Dict
from typing import Optional
from typing import Type

from cmisbrowser import __version__

## Environmental variables prepended with "PYTHON_CMIS" are used for debug purposes,
## environmental variables prepended with "CMIS_" are for connection parameters
## one of DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_CMIS_DEBUGMODE")
if not debugmode:
    if "dev" in __version__:
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("cmisbrowser")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons) -> None:
    reason = " : ".join(str(x) for x in reasons)
    log.warning(f"Deviation from expectations found: {reason}")


class CMISError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class RepositoryNotFound(CMISError):
    """
    The repository id is not listed by the service root, not even after
    the repository directory was refilled from the server.
    """

    repository_id: Optional[str] = None

    def __init__(
        self, repository_id: Optional[str] = None, url: Optional[str] = None
    ) -> None:
        self.repository_id = repository_id
        super().__init__(url=url, reason=f"No repository found with id {repository_id!r}")


class InvalidParameterValue(CMISError, ValueError):
    """
    An enumerated request parameter holds a value outside its allowed
    set.  Raised while building the request, so nothing has been sent
    to the server.
    """

    def __init__(self, parameter: str, value, allowed) -> None:
        self.parameter = parameter
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            reason=f"{parameter} must be one of {', '.join(self.allowed)}, got {value!r}"
        )


class UnsupportedTypeError(CMISError):
    """
    An object payload carries a cmis:baseTypeId that is none of the
    five CMIS base types.
    """

    def __init__(self, base_type_id: Optional[str]) -> None:
        self.base_type_id = base_type_id
        super().__init__(reason=f"unexpected baseTypeId {base_type_id!r}")


class TransportError(CMISError):
    """
    The request could not be completed on the network layer
    (DNS failure, connection refused, timeout ...).
    """

    pass


class CMISRequestError(CMISError):
    """
    The server answered with a non-2xx status.  ``exception`` and
    ``message`` are passed on verbatim from the error document the
    server sent, ``exception`` is None when the server did not send a
    JSON error document (``message`` is then the raw response body).
    """

    exception: Optional[str] = None
    message: str = ""
    status: Optional[int] = None

    def __init__(
        self,
        exception: Optional[str] = None,
        message: Optional[str] = None,
        url: Optional[str] = None,
        status: Optional[int] = None,
    ) -> None:
        if exception is not None:
            self.exception = exception
        self.message = message or ""
        self.status = status
        if self.exception:
            reason = f"{self.exception} -- {self.message}"
        else:
            reason = self.message
        super().__init__(url=url, reason=reason)


class InvalidArgument(CMISRequestError):
    exception = "invalidArgument"


class ObjectNotFound(CMISRequestError):
    exception = "objectNotFound"


class NotSupported(CMISRequestError):
    exception = "notSupported"


class PermissionDenied(CMISRequestError):
    exception = "permissionDenied"


class RuntimeFailure(CMISRequestError):
    exception = "runtime"


class ConstraintViolation(CMISRequestError):
    exception = "constraint"


class ContentAlreadyExists(CMISRequestError):
    exception = "contentAlreadyExists"


class FilterNotValid(CMISRequestError):
    exception = "filterNotValid"


class NameConstraintViolation(CMISRequestError):
    exception = "nameConstraintViolation"


class StorageFailure(CMISRequestError):
    exception = "storage"


class StreamNotSupported(CMISRequestError):
    exception = "streamNotSupported"


class UpdateConflict(CMISRequestError):
    exception = "updateConflict"


exception_by_name: Dict[Optional[str], Type[CMISRequestError]] = defaultdict(
    lambda: CMISRequestError
)
for cls in (
    InvalidArgument,
    ObjectNotFound,
    NotSupported,
    PermissionDenied,
    RuntimeFailure,
    ConstraintViolation,
    ContentAlreadyExists,
    FilterNotValid,
    NameConstraintViolation,
    StorageFailure,
    StreamNotSupported,
    UpdateConflict,
):
    exception_by_name[cls.exception] = cls
