"""
Read-side helpers for the public gallery and the admin panel, plus the
form-to-entity builders used when saving.
"""

from __future__ import annotations

import random
import uuid
from typing import Optional

from wishlist.schemas import CategoryForm, GiftCard, GiftForm, PersonForm
from wishlist.types import Category, Gift, GiftStatus, Person, now_ms

ALL_PEOPLE = "all"
UNKNOWN_PERSON = "Неизвестно"
DEFAULT_CATEGORY = "Общее"


def _random_picture(width: int, height: int) -> str:
    return f"https://picsum.photos/{width}/{height}?random={random.randrange(100)}"


def filter_gifts(
    gifts: list[Gift],
    *,
    person_id: str = ALL_PEOPLE,
    search: str = "",
    include_private: bool = False,
) -> list[Gift]:
    """Filter by owner and a case-insensitive title search.

    Private gifts are dropped unless ``include_private`` is set, which only
    the admin views do.
    """
    needle = (search or "").lower()
    result = []
    for gift in gifts:
        if gift.is_private and not include_private:
            continue
        if person_id and person_id != ALL_PEOPLE and gift.person_id != person_id:
            continue
        if needle not in gift.title.lower():
            continue
        result.append(gift)
    return result


def build_cards(
    gifts: list[Gift], people: list[Person], categories: list[Category]
) -> list[GiftCard]:
    """Attach person and category names, with placeholders for dangling refs."""
    names = {person.id: person.name for person in people}
    labels = {category.id: category for category in categories}
    cards = []
    for gift in gifts:
        category = labels.get(gift.category_id)
        cards.append(
            GiftCard(
                gift=gift,
                person_name=names.get(gift.person_id, UNKNOWN_PERSON),
                category_name=category.name if category else DEFAULT_CATEGORY,
                category_color=category.color if category else "",
            )
        )
    return cards


def find_by_id(items, item_id: Optional[str]):
    if not item_id:
        return None
    for item in items:
        if item.id == item_id:
            return item
    return None


def build_gift(form: GiftForm, existing: Optional[Gift] = None) -> Gift:
    """Turn an admin form into a Gift, keeping id and createdAt on edit."""
    return Gift(
        id=existing.id if existing else str(uuid.uuid4()),
        title=form.title,
        person_id=form.person_id,
        category_id=form.category_id,
        price=form.price or 0,
        url=form.url or "",
        image_url=form.image_url or _random_picture(400, 300),
        status=form.status or GiftStatus.WANT,
        is_private=form.is_private or False,
        notes=form.notes or "",
        created_at=existing.created_at if existing else now_ms(),
    )


def build_person(form: PersonForm, existing: Optional[Person] = None) -> Person:
    return Person(
        id=existing.id if existing else str(uuid.uuid4()),
        name=form.name,
        description=form.description or "",
        avatar_url=form.avatar_url or _random_picture(200, 200),
    )


def build_category(form: CategoryForm) -> Category:
    return Category(id=form.id or str(uuid.uuid4()), name=form.name, color=form.color)
