"""
The repository directory: resolves repository ids into the repository
URL and the root folder URL, as listed by the service root.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Mapping

from cmisbrowser.lib import error

log = logging.getLogger("cmisbrowser")

DEFAULT_CACHE_SIZE = 128


@dataclass(frozen=True)
class RepositoryDescriptor:
    """
    Endpoint URLs of one repository.

    Attributes:
        id: The repository id
        operation_url: The ``repositoryUrl``, target of most operations
        root_folder_url: The ``rootFolderUrl``, target of operations
            addressing an object
        info: The full repository info mapping from the service root
    """

    id: str
    operation_url: str
    root_folder_url: str
    info: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_info(cls, repository_id: str, info: Mapping[str, Any]) -> "RepositoryDescriptor":
        return cls(
            id=repository_id,
            operation_url=info["repositoryUrl"],
            root_folder_url=info["rootFolderUrl"],
            info=dict(info),
        )


class LRUCache:
    """
    A bounded mapping evicting the least recently used entry when full.
    All operations are protected by a lock.
    """

    def __init__(self, maxsize: int = DEFAULT_CACHE_SIZE) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self.maxsize = maxsize
        self._data: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable, default=None):
        with self._lock:
            if key not in self._data:
                return default
            self._data.move_to_end(key)
            return self._data[key]

    def put(self, key: Hashable, value) -> None:
        with self._lock:
            self._data[key] = value
            self._data.move_to_end(key)
            while len(self._data) > self.maxsize:
                evicted, _ = self._data.popitem(last=False)
                log.debug("evicting %s from the cache", evicted)

    def pop(self, key: Hashable, default=None):
        with self._lock:
            return self._data.pop(key, default)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __contains__(self, key) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class RepositoryDirectory:
    """
    Resolves and caches the endpoint URLs of repositories.

    On a cache miss the complete listing is fetched from the service
    root (one GET) and every listed repository is cached, not only the
    one asked for.  Misses are serialized through one lock and the cache
    is checked again once it is held, so concurrent misses lead to a
    single fetch.

    The cache is owned by the directory, and the directory by the client;
    there is no process wide state.
    """

    def __init__(
        self,
        fetch_listing: Callable[[], Mapping[str, Mapping[str, Any]]],
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        """
        Args:
          fetch_listing: callable returning the parsed service root
            document, a mapping of repository id -> repository info
          cache_size: maximum number of cached repositories
        """
        self._fetch_listing = fetch_listing
        self._cache = LRUCache(cache_size)
        self._refill_lock = threading.Lock()

    def resolve(self, repository_id: str) -> RepositoryDescriptor:
        descriptor = self._cache.get(repository_id)
        if descriptor is not None:
            return descriptor

        with self._refill_lock:
            descriptor = self._cache.get(repository_id)
            if descriptor is not None:
                return descriptor
            descriptor = self.refill().get(repository_id)

        if descriptor is None:
            raise error.RepositoryNotFound(repository_id)
        return descriptor

    def refill(self) -> dict[str, RepositoryDescriptor]:
        """
        Fetch the service root listing and cache all repositories in it.

        Returns all descriptors found, also those that did not fit into
        the cache.  Entries lacking an endpoint URL are skipped.
        """
        log.debug("fetching the repository listing from the service root")
        listing = self._fetch_listing() or {}
        descriptors = {}
        for repository_id, info in listing.items():
            if not isinstance(info, Mapping) or not (
                info.get("repositoryUrl") and info.get("rootFolderUrl")
            ):
                error.weirdness("repository listed without endpoint URLs", repository_id)
                continue
            descriptor = RepositoryDescriptor.from_info(repository_id, info)
            descriptors[repository_id] = descriptor
            self._cache.put(repository_id, descriptor)
        return descriptors

    def resolve_operation_url(self, repository_id: str) -> str:
        return self.resolve(repository_id).operation_url

    def resolve_root_folder_url(self, repository_id: str) -> str:
        return self.resolve(repository_id).root_folder_url

    def evict(self, repository_id: str) -> None:
        self._cache.pop(repository_id)

    def clear(self) -> None:
        self._cache.clear()

    def __contains__(self, repository_id) -> bool:
        return repository_id in self._cache

    def __len__(self) -> int:
        return len(self._cache)
