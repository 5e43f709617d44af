"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
import threading

from wishlist.config import get_settings
from wishlist.db import RemoteDbBackend
from wishlist.local_store import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from wishlist.storage import StorageService

logger = logging.getLogger(__name__)

_kv_store: KeyValueStore | None = None
_storage_service: StorageService | None = None
_storage_lock = threading.Lock()


def get_kv_store() -> KeyValueStore:
    """
    Return a singleton local store so in-memory state persists across requests.
    """
    global _kv_store
    if _kv_store:
        return _kv_store

    settings = get_settings()
    if settings.use_in_memory_backends:
        _kv_store = InMemoryKeyValueStore()
    else:
        _kv_store = JsonFileKeyValueStore(settings.local_store_path)
    return _kv_store


def get_storage_service() -> StorageService:
    """
    Return the storage service, initializing it on first use after startup
    or after a restart.
    """
    global _storage_service
    service = _storage_service
    if service:
        return service

    with _storage_lock:
        if _storage_service:
            return _storage_service
        _storage_service = StorageService.initialize(
            get_kv_store(), restart=restart_storage_service
        )
        logger.info(
            "Storage initialized in %s mode",
            "cloud" if _storage_service.is_cloud_mode() else "local",
        )
        return _storage_service


def restart_storage_service() -> None:
    """Drop the current service so the next request re-resolves the backend."""
    global _storage_service
    with _storage_lock:
        service, _storage_service = _storage_service, None
    if service and isinstance(service.backend, RemoteDbBackend):
        service.backend.dispose()


def reset_dependencies() -> None:
    """Forget all singletons (useful in tests)."""
    global _kv_store
    restart_storage_service()
    _kv_store = None
