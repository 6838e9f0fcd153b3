"""
Abstract I/O protocol definition.

This module defines the interface that all I/O implementations must follow.
"""

from typing import Protocol, runtime_checkable

from cmisbrowser.protocol.types import CMISRequest, CMISResponse


@runtime_checkable
class SyncIOProtocol(Protocol):
    """
    Protocol defining the synchronous I/O interface.

    CMISClient accepts anything implementing it, which is how the test
    suite plugs in an in-memory server.
    """

    def execute(self, request: CMISRequest) -> CMISResponse:
        ...

    def close(self) -> None:
        ...
