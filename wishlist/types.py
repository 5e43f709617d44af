"""
Entities stored by the wishlist service.

Field names serialize to camelCase (``personId``, ``avatarUrl``, ...) which is
the layout used both by the local key-value store and the remote tables.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


class GiftStatus(str, Enum):
    WANT = "WANT"
    RESERVED = "RESERVED"
    BOUGHT = "BOUGHT"


class Entity(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Person(Entity):
    name: str
    description: str = ""
    avatar_url: str = ""


class Category(Entity):
    name: str
    # Semantic color tag such as "blue"; not checked against a fixed set.
    color: str = ""


class Gift(Entity):
    person_id: str
    category_id: str
    title: str
    price: Optional[float] = Field(default=0, ge=0)
    url: Optional[str] = None
    image_url: Optional[str] = None
    status: GiftStatus = GiftStatus.WANT
    is_private: bool = False
    notes: Optional[str] = None
    created_at: int = Field(default_factory=now_ms)
