"""
I/O layer for the CMIS browser binding.

The I/O layer is intentionally thin - it only handles HTTP transport.
All protocol logic (parameter encoding, response interpretation) is in
cmisbrowser.protocol.
"""

from .base import SyncIOProtocol
from .sync import SyncIO

__all__ = [
    "SyncIOProtocol",
    "SyncIO",
]
