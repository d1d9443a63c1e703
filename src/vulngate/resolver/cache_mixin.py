"""Shared lookup cache guarded by a reader/writer lock."""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from vulngate.policy.errors import LookupFailure
from vulngate.policy.models import SeverityAssessment
from vulngate.policy.severity import unknown_assessment

CachedLookup = tuple[SeverityAssessment, LookupFailure | None]


class ReadWriteLock:
    """Many concurrent readers or one writer; waiting writers block new readers."""

    def __init__(self) -> None:
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


class ResolverCacheMixin:
    """Cache per-identifier lookup outcomes, failures included."""

    def _init_cache(self) -> None:
        self._cache_lock = ReadWriteLock()
        self._cache: dict[str, CachedLookup] = {}

    def read_cache(self, identifier: str) -> CachedLookup | None:
        """Return the cached (assessment, error) pair, if any."""
        with self._cache_lock.read():
            return self._cache.get(identifier)

    def write_cache(
        self, identifier: str, assessment: SeverityAssessment, error: LookupFailure | None
    ) -> CachedLookup:
        """Store and return a lookup outcome."""
        entry = (assessment, error)
        with self._cache_lock.write():
            self._cache[identifier] = entry
        return entry

    def cache_failure(self, identifier: str, error: LookupFailure) -> CachedLookup:
        """Cache an UNKNOWN rating together with the error that caused it."""
        return self.write_cache(identifier, unknown_assessment(identifier), error)
