"""
Store selection from configuration
"""

import logging

from feature_flag_api.config import StorageConfig
from feature_flag_api.storage.base import FlagStore
from feature_flag_api.storage.memory_store import MemoryFlagStore
from feature_flag_api.storage.sqlite_store import SQLiteFlagStore

logger = logging.getLogger(__name__)


def create_store(config: StorageConfig) -> FlagStore:
    """Create the feature flag store described by the storage configuration"""

    backend = config.backend.lower()

    if backend == "sqlite":
        return SQLiteFlagStore(
            db_path=config.path,
            bucket=config.bucket,
            timeout=config.timeout,
        )

    if backend == "memory":
        logger.warning("Using in-memory store, feature flags will not be persisted")
        return MemoryFlagStore(timeout=config.timeout)

    raise ValueError(f"Unknown storage backend: {config.backend}")
