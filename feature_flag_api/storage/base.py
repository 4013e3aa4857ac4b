"""
Storage interface for feature flags

A store hands out transactions. Read-only transactions come from ``view()``
and read-write transactions from ``update()``. A write transaction is
committed when its block exits normally and rolled back when the block
raises, so a read-modify-write done inside one block is atomic.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List

from feature_flag_api.core.errors import StoreError
from feature_flag_api.core.models import FeatureFlag

DEFAULT_BUCKET = "features"


class StoreTransaction(ABC):
    """Operations available inside a store transaction"""

    def __init__(self, writable: bool):
        self.writable = writable

    @abstractmethod
    def get(self, key: str) -> FeatureFlag:
        """Fetch a feature, raising FlagNotFoundError when absent"""
        pass

    @abstractmethod
    def put(self, flag: FeatureFlag) -> None:
        """Insert or overwrite a feature"""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete a feature, raising FlagNotFoundError when absent"""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def list_all(self) -> List[FeatureFlag]:
        """All features ordered by key"""
        pass

    def _ensure_writable(self) -> None:
        if not self.writable:
            raise StoreError("Transaction is read-only")


class FlagStore(ABC):
    """Abstract base class for feature flag stores"""

    @abstractmethod
    def view(self) -> AbstractContextManager:
        """Open a read-only transaction"""
        pass

    @abstractmethod
    def update(self) -> AbstractContextManager:
        """Open a read-write transaction"""
        pass

    def ping(self) -> bool:
        """Check the store can open a transaction"""
        with self.view() as tx:
            tx.exists("")
        return True

    def close(self) -> None:
        pass
