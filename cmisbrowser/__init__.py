#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .cmisclient import CMISClient
from .cmisclient import get_cmisclient

## Silence notification of no default logging handler
log = logging.getLogger("cmisbrowser")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = ["__version__", "CMISClient", "get_cmisclient"]
