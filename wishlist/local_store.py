"""
Local persistence: a string-keyed store of JSON blobs and the CRUD backend
built on top of it.

The key-value store mimics browser local storage: every value is a JSON
encoded string and a missing key reads as ``None``.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, TypeVar

from pydantic import ValidationError

from wishlist.types import Category, Entity, Gift, Person

PEOPLE_KEY = "wishlist_people"
GIFTS_KEY = "wishlist_gifts"
CATEGORIES_KEY = "wishlist_categories"
INIT_KEY = "wishlist_init_v2"
CLOUD_CONFIG_KEY = "wishlist_supabase_config"

E = TypeVar("E", bound=Entity)


class CorruptLocalStateError(ValueError):
    """Raised when a persisted local value cannot be read back."""

    def __init__(self, key: str, reason: str):
        super().__init__(f"Local value for {key!r} is unreadable: {reason}")
        self.key = key


class KeyValueStore(Protocol):
    """String-keyed storage of string values."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


@dataclass
class InMemoryKeyValueStore:
    """Test double for the local store."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileKeyValueStore:
    """
    Keeps every key in a single JSON object on disk.

    The file is re-read on every access and rewritten in full on every
    mutation, through a temporary file so a crash never leaves half a file.
    """

    def __init__(self, path: str):
        self.path = path
        directory = os.path.dirname(os.path.abspath(path))
        os.makedirs(directory, exist_ok=True)

    def _read_all(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            raw = f.read()
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptLocalStateError(self.path, str(exc)) from exc
        if not isinstance(data, dict):
            raise CorruptLocalStateError(self.path, "expected a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


def read_json(store: KeyValueStore, key: str, default=None):
    raw = store.get_item(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptLocalStateError(key, str(exc)) from exc


def write_json(store: KeyValueStore, key: str, value) -> None:
    store.set_item(key, json.dumps(value, ensure_ascii=False))


class LocalBackend:
    """CRUD over whole-collection JSON arrays kept in a key-value store."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _load(self, key: str, model: type[E]) -> list[E]:
        items = read_json(self.store, key, default=[])
        if not isinstance(items, list):
            raise CorruptLocalStateError(key, "expected a JSON array")
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as exc:
            raise CorruptLocalStateError(key, str(exc)) from exc

    def _save(self, key: str, items: list[Entity]) -> None:
        write_json(self.store, key, [item.to_json() for item in items])

    def _upsert(self, key: str, model: type[E], entity: E) -> E:
        items = self._load(key, model)
        for index, existing in enumerate(items):
            if existing.id == entity.id:
                items[index] = entity
                break
        else:
            items.append(entity)
        self._save(key, items)
        return entity

    def _remove(
        self, key: str, model: type[E], predicate: Callable[[E], bool]
    ) -> None:
        items = self._load(key, model)
        self._save(key, [item for item in items if not predicate(item)])

    def list_people(self) -> list[Person]:
        return self._load(PEOPLE_KEY, Person)

    def list_categories(self) -> list[Category]:
        return self._load(CATEGORIES_KEY, Category)

    def list_gifts(self) -> list[Gift]:
        return self._load(GIFTS_KEY, Gift)

    def upsert_person(self, person: Person) -> Person:
        return self._upsert(PEOPLE_KEY, Person, person)

    def upsert_category(self, category: Category) -> Category:
        return self._upsert(CATEGORIES_KEY, Category, category)

    def upsert_gift(self, gift: Gift) -> Gift:
        return self._upsert(GIFTS_KEY, Gift, gift)

    def delete_person(self, person_id: str) -> None:
        self._remove(PEOPLE_KEY, Person, lambda p: p.id == person_id)

    def delete_category(self, category_id: str) -> None:
        self._remove(CATEGORIES_KEY, Category, lambda c: c.id == category_id)

    def delete_gift(self, gift_id: str) -> None:
        self._remove(GIFTS_KEY, Gift, lambda g: g.id == gift_id)

    def delete_gifts_for_person(self, person_id: str) -> None:
        self._remove(GIFTS_KEY, Gift, lambda g: g.person_id == person_id)

    def seed(
        self,
        people: list[Person],
        categories: list[Category],
        gifts: list[Gift],
    ) -> None:
        self._save(PEOPLE_KEY, people)
        self._save(CATEGORIES_KEY, categories)
        self._save(GIFTS_KEY, gifts)
