"""
In-memory storage backend for feature flags

Records are kept as JSON documents so callers never share model instances.
Write transactions are serialized by a lock and work on a copy of the
records which replaces the live copy on commit. Readers see the last
committed state.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from feature_flag_api.core.errors import FlagNotFoundError, StoreError
from feature_flag_api.core.models import FeatureFlag
from feature_flag_api.storage.base import FlagStore, StoreTransaction


class MemoryTransaction(StoreTransaction):

    def __init__(self, records: Dict[str, str], writable: bool):
        super().__init__(writable)
        self._records = records

    def get(self, key: str) -> FeatureFlag:
        document = self._records.get(key)
        if document is None:
            raise FlagNotFoundError(key)
        return FeatureFlag.from_json(document)

    def put(self, flag: FeatureFlag) -> None:
        self._ensure_writable()
        self._records[flag.key] = flag.to_json()

    def delete(self, key: str) -> None:
        self._ensure_writable()
        if key not in self._records:
            raise FlagNotFoundError(key)
        del self._records[key]

    def exists(self, key: str) -> bool:
        return key in self._records

    def list_all(self) -> List[FeatureFlag]:
        return [FeatureFlag.from_json(self._records[key]) for key in sorted(self._records)]


class MemoryFlagStore(FlagStore):
    """Process-local feature flag store"""

    def __init__(self, timeout: float = 1.0):
        self.timeout = timeout
        self._records: Dict[str, str] = {}
        self._write_lock = threading.Lock()

    @contextmanager
    def _view(self) -> Iterator[MemoryTransaction]:
        # Committed dicts are never mutated, a reference is a snapshot
        yield MemoryTransaction(self._records, writable=False)

    @contextmanager
    def _update(self) -> Iterator[MemoryTransaction]:
        if not self._write_lock.acquire(timeout=self.timeout):
            raise StoreError("Timed out waiting for the store write lock")
        try:
            working = dict(self._records)
            yield MemoryTransaction(working, writable=True)
            self._records = working
        finally:
            self._write_lock.release()

    def view(self):
        return self._view()

    def update(self):
        return self._update()
