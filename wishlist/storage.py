"""
Storage service: one CRUD interface over the local and the remote backend.

The backend is resolved once in ``StorageService.initialize`` from the remote
connection config persisted in the local key-value store, and stays fixed
for the lifetime of the returned service. Switching backends means persisting
a new config and restarting, which re-runs ``initialize``.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from sqlalchemy.exc import ArgumentError

from wishlist.db import RemoteDbBackend
from wishlist.local_store import (
    CLOUD_CONFIG_KEY,
    INIT_KEY,
    CorruptLocalStateError,
    KeyValueStore,
    LocalBackend,
    read_json,
    write_json,
)
from wishlist.types import Category, Gift, GiftStatus, Person, now_ms

logger = logging.getLogger(__name__)


class Backend(Protocol):
    """Primitive CRUD each persistence backend provides."""

    def list_people(self) -> list[Person]:
        ...

    def list_categories(self) -> list[Category]:
        ...

    def list_gifts(self) -> list[Gift]:
        ...

    def upsert_person(self, person: Person) -> Person:
        ...

    def upsert_category(self, category: Category) -> Category:
        ...

    def upsert_gift(self, gift: Gift) -> Gift:
        ...

    def delete_person(self, person_id: str) -> None:
        ...

    def delete_category(self, category_id: str) -> None:
        ...

    def delete_gift(self, gift_id: str) -> None:
        ...

    def delete_gifts_for_person(self, person_id: str) -> None:
        ...


INITIAL_PEOPLE = [
    Person(
        id="p1",
        name="Анна",
        description="День рождения (25 Октября)",
        avatar_url="https://picsum.photos/200/200?random=1",
    ),
]

INITIAL_CATEGORIES = [
    Category(id="c1", name="Техника", color="blue"),
    Category(id="c2", name="Дом", color="emerald"),
    Category(id="c3", name="Книги", color="amber"),
    Category(id="c4", name="Одежда", color="purple"),
]


def initial_gifts() -> list[Gift]:
    return [
        Gift(
            id="g1",
            person_id="p1",
            category_id="c1",
            title="Пример подарка (Локально)",
            price=1000,
            status=GiftStatus.WANT,
            is_private=False,
            image_url="https://picsum.photos/400/300?random=10",
            url="https://market.yandex.ru",
            created_at=now_ms(),
        )
    ]


def load_cloud_config(store: KeyValueStore) -> Optional[tuple[str, str]]:
    """Return ``(url, key)`` if a well-formed remote config is persisted."""
    try:
        config = read_json(store, CLOUD_CONFIG_KEY)
    except CorruptLocalStateError:
        logger.error("Ignoring unreadable remote connection config")
        return None
    if not isinstance(config, dict):
        return None
    url, key = config.get("url"), config.get("key")
    if not url or not key:
        return None
    return url, key


def store_cloud_config(store: KeyValueStore, url: str, key: str) -> bool:
    """Persist the remote config. Empty values are ignored and return False."""
    if not url or not key:
        return False
    write_json(store, CLOUD_CONFIG_KEY, {"url": url, "key": key})
    logger.info("Remote connection config saved")
    return True


def clear_cloud_config(store: KeyValueStore) -> None:
    store.remove_item(CLOUD_CONFIG_KEY)
    logger.info("Remote connection config removed")


def connect_remote(store: KeyValueStore) -> Optional[RemoteDbBackend]:
    config = load_cloud_config(store)
    if config is None:
        return None
    url, key = config
    try:
        backend = RemoteDbBackend(url, key)
    except (ArgumentError, ImportError) as exc:
        logger.error("Failed to init remote database: %s", exc)
        return None
    logger.info("Remote database connected")
    return backend


class StorageService:
    """Uniform CRUD over whichever backend was chosen at startup."""

    def __init__(
        self,
        backend: Backend,
        store: KeyValueStore,
        *,
        cloud: bool = False,
        restart: Optional[Callable[[], None]] = None,
    ):
        self._backend = backend
        self._store = store
        self._cloud = cloud
        self._restart = restart

    @classmethod
    def initialize(
        cls,
        store: KeyValueStore,
        *,
        restart: Optional[Callable[[], None]] = None,
    ) -> "StorageService":
        remote = connect_remote(store)
        if remote is not None:
            remote.ensure_schema()
            return cls(remote, store, cloud=True, restart=restart)

        local = LocalBackend(store)
        if not store.get_item(INIT_KEY):
            logger.info("Seeding local store with starter data")
            local.seed(INITIAL_PEOPLE, INITIAL_CATEGORIES, initial_gifts())
            write_json(store, INIT_KEY, True)
        return cls(local, store, cloud=False, restart=restart)

    @property
    def backend(self) -> Backend:
        return self._backend

    def is_cloud_mode(self) -> bool:
        return self._cloud

    def save_cloud_config(self, url: str, key: str) -> None:
        if store_cloud_config(self._store, url, key):
            self._request_restart()

    def disconnect_cloud(self) -> None:
        clear_cloud_config(self._store)
        self._request_restart()

    def _request_restart(self) -> None:
        if self._restart is not None:
            self._restart()

    def get_people(self) -> list[Person]:
        return self._backend.list_people()

    def get_categories(self) -> list[Category]:
        categories = self._backend.list_categories()
        if self._cloud and not categories:
            # An empty remote table still needs something to pick from.
            return list(INITIAL_CATEGORIES)
        return categories

    def get_gifts(self) -> list[Gift]:
        return self._backend.list_gifts()

    def save_person(self, person: Person) -> Person:
        return self._backend.upsert_person(person)

    def save_category(self, category: Category) -> Category:
        return self._backend.upsert_category(category)

    def save_gift(self, gift: Gift) -> Gift:
        return self._backend.upsert_gift(gift)

    def delete_person(self, person_id: str) -> None:
        self._backend.delete_person(person_id)
        # Cascade runs here for both backends, whatever the remote schema does.
        self._backend.delete_gifts_for_person(person_id)

    def delete_category(self, category_id: str) -> None:
        self._backend.delete_category(category_id)

    def delete_gift(self, gift_id: str) -> None:
        self._backend.delete_gift(gift_id)
