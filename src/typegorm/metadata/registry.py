"""
Metadata registry.

Thread-safe memoization of ``EntityMetadata`` per record class.

- Cache hits take a shared (read) lock, so any number of readers proceed
  together.
- A miss takes the exclusive (write) lock for the whole build-and-store
  sequence and checks the table again first, so a record class is parsed at
  most once even when many threads ask for it at the same time.
- Misses for different classes also wait for each other; every class is
  parsed once per registry, so this only costs time on first use.
- ``clear()`` swaps in an empty table. Metadata already handed out stays
  valid; it is simply no longer returned by later lookups.

Usage:
    from typegorm import MetadataRegistry

    registry = MetadataRegistry()
    meta = registry.parse(User)
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from typegorm.metadata.parser import build_entity_metadata
from typegorm.metadata.typeinfo import resolve_target
from typegorm.models import EntityMetadata

logger = logging.getLogger(__name__)

Builder = Callable[[type], EntityMetadata]


class ReadWriteLock:
    """
    Many readers or one writer.

    A waiting writer blocks new readers, so a steady stream of reads cannot
    starve ``clear()`` or a cache miss.
    """

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MetadataRegistry:
    """
    Record class -> EntityMetadata table.

    Attributes:
        _entries: Parsed metadata keyed by record class
        _lock: Reader/writer lock guarding ``_entries``
        _build: Function that parses a record class
    """

    def __init__(self, builder: Optional[Builder] = None):
        """
        Initialize an empty registry.

        Args:
            builder: Parse function for cache misses (default: the entity parser)
        """
        self._entries: Dict[type, EntityMetadata] = {}
        self._lock = ReadWriteLock()
        self._build = builder or build_entity_metadata

        self._stats_lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _count(self, hit: bool) -> None:
        with self._stats_lock:
            if hit:
                self._hits += 1
            else:
                self._misses += 1

    def get(self, cls: type) -> Tuple[Optional[EntityMetadata], bool]:
        """
        Look up parsed metadata.

        Returns:
            (metadata, found)
        """
        with self._lock.read():
            meta = self._entries.get(cls)
        return meta, meta is not None

    def store(self, cls: type, meta: EntityMetadata) -> None:
        """Store metadata for a record class, replacing any previous entry."""
        with self._lock.write():
            self._entries[cls] = meta

    def clear(self) -> None:
        """Forget every entry."""
        with self._lock.write():
            self._entries = {}
        logger.info("Metadata cache cleared")

    def get_or_build(self, cls: type) -> EntityMetadata:
        """
        Return cached metadata for ``cls``, parsing it on first use.

        Nothing is stored when parsing raises.
        """
        meta, found = self.get(cls)
        if found:
            self._count(hit=True)
            logger.debug(f"Cache hit for {cls.__name__}")
            return meta

        with self._lock.write():
            # Another thread may have finished this class while we waited
            meta = self._entries.get(cls)
            if meta is not None:
                self._count(hit=True)
                logger.debug(f"Cache hit (double-check) for {cls.__name__}")
                return meta

            self._count(hit=False)
            logger.debug(f"Cache miss, parsing {cls.__name__}")
            meta = self._build(cls)
            self._entries[cls] = meta

        logger.info(
            f"Metadata for {cls.__name__} cached "
            f"({len(meta.columns)} columns, {len(meta.relations)} relations)"
        )
        return meta

    def parse(self, target: Any) -> EntityMetadata:
        """
        Parse a record class or instance, using the cache.

        Args:
            target: A record class or an instance of one

        Returns:
            The shared EntityMetadata for the record class

        Raises:
            InvalidInputError: target is None or not a record type
            EntityParseError: a field annotation is invalid
        """
        resolved = resolve_target(target)
        return self.get_or_build(resolved.cls)

    def __contains__(self, cls: object) -> bool:
        with self._lock.read():
            return cls in self._entries

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        """
        Get cache statistics for monitoring.

        Returns:
            Dictionary with entry, hit and miss counts
        """
        with self._stats_lock:
            hits, misses = self._hits, self._misses
        return {
            "total_entries": len(self),
            "hits": hits,
            "misses": misses,
        }


_default_registry: Optional[MetadataRegistry] = None
_registry_lock = threading.Lock()


def get_default_registry() -> MetadataRegistry:
    """
    Get the process-wide registry behind ``parse`` and ``clear_cache``.

    Created lazily on first use.
    """
    global _default_registry
    if _default_registry is None:
        with _registry_lock:
            if _default_registry is None:
                _default_registry = MetadataRegistry()
    return _default_registry


def parse(target: Any) -> EntityMetadata:
    """Parse a record class or instance with the default registry."""
    return get_default_registry().parse(target)


def clear_cache() -> None:
    """Empty the default registry."""
    get_default_registry().clear()
