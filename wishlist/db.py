"""
Remote tabular backend over SQLAlchemy.

Accepts any SQLAlchemy URL (Postgres for a hosted database, SQLite for tests).
Errors raised by SQLAlchemy are left to propagate to the caller.
"""

from __future__ import annotations

import logging

from sqlalchemy import BigInteger, Boolean, Column, Float, String, create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from wishlist.types import Category, Gift, GiftStatus, Person

logger = logging.getLogger(__name__)


def build_database_url(database_url: str, access_key: str | None = None) -> URL:
    """
    Parse ``database_url`` and use ``access_key`` as the connection password.

    File-based SQLite URLs cannot carry credentials, so the key is ignored
    for them. Raises ``sqlalchemy.exc.ArgumentError`` for unparsable URLs.
    """
    url = make_url(database_url)
    if access_key and url.get_backend_name() != "sqlite":
        url = url.set(password=access_key)
    return url


class RemoteDbBackend:
    """SQLAlchemy-backed implementation with tables people/categories/gifts."""

    def __init__(self, database_url: str, access_key: str | None = None):
        if not database_url:
            raise ValueError("database_url is required for RemoteDbBackend")
        self.url = build_database_url(database_url, access_key)
        self.engine = create_engine(
            self.url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )

    def ensure_schema(self) -> None:
        Base.metadata.create_all(self.engine)
        logger.info("Remote schema ready on %s", self.url.render_as_string())

    def dispose(self) -> None:
        self.engine.dispose()

    def list_people(self) -> list[Person]:
        with self.Session() as session:
            return [_to_person(row) for row in session.query(PersonRow).all()]

    def list_categories(self) -> list[Category]:
        with self.Session() as session:
            return [_to_category(row) for row in session.query(CategoryRow).all()]

    def list_gifts(self) -> list[Gift]:
        with self.Session() as session:
            return [_to_gift(row) for row in session.query(GiftRow).all()]

    def upsert_person(self, person: Person) -> Person:
        with self.Session() as session:
            session.merge(
                PersonRow(
                    id=person.id,
                    name=person.name,
                    description=person.description,
                    avatar_url=person.avatar_url,
                )
            )
            session.commit()
        return person

    def upsert_category(self, category: Category) -> Category:
        with self.Session() as session:
            session.merge(
                CategoryRow(id=category.id, name=category.name, color=category.color)
            )
            session.commit()
        return category

    def upsert_gift(self, gift: Gift) -> Gift:
        with self.Session() as session:
            session.merge(
                GiftRow(
                    id=gift.id,
                    person_id=gift.person_id,
                    category_id=gift.category_id,
                    title=gift.title,
                    price=gift.price,
                    url=gift.url,
                    image_url=gift.image_url,
                    status=gift.status.value,
                    is_private=gift.is_private,
                    notes=gift.notes,
                    created_at=gift.created_at,
                )
            )
            session.commit()
        return gift

    def delete_person(self, person_id: str) -> None:
        with self.Session() as session:
            session.query(PersonRow).filter(PersonRow.id == person_id).delete()
            session.commit()

    def delete_category(self, category_id: str) -> None:
        with self.Session() as session:
            session.query(CategoryRow).filter(CategoryRow.id == category_id).delete()
            session.commit()

    def delete_gift(self, gift_id: str) -> None:
        with self.Session() as session:
            session.query(GiftRow).filter(GiftRow.id == gift_id).delete()
            session.commit()

    def delete_gifts_for_person(self, person_id: str) -> None:
        with self.Session() as session:
            session.query(GiftRow).filter(GiftRow.person_id == person_id).delete()
            session.commit()


def _to_person(row: "PersonRow") -> Person:
    return Person(
        id=row.id,
        name=row.name,
        description=row.description or "",
        avatar_url=row.avatar_url or "",
    )


def _to_category(row: "CategoryRow") -> Category:
    return Category(id=row.id, name=row.name, color=row.color or "")


def _to_gift(row: "GiftRow") -> Gift:
    return Gift(
        id=row.id,
        person_id=row.person_id,
        category_id=row.category_id,
        title=row.title,
        price=row.price,
        url=row.url,
        image_url=row.image_url,
        status=GiftStatus(row.status),
        is_private=bool(row.is_private),
        notes=row.notes,
        created_at=row.created_at,
    )


Base = declarative_base()


class PersonRow(Base):
    __tablename__ = "people"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    avatar_url = Column("avatarUrl", String, nullable=True)


class CategoryRow(Base):
    __tablename__ = "categories"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=True)


class GiftRow(Base):
    __tablename__ = "gifts"

    id = Column(String, primary_key=True)
    person_id = Column("personId", String, nullable=False, index=True)
    category_id = Column("categoryId", String, nullable=False)
    title = Column(String, nullable=False)
    price = Column(Float, nullable=True)
    url = Column(String, nullable=True)
    image_url = Column("imageUrl", String, nullable=True)
    status = Column(String, nullable=False, default=GiftStatus.WANT.value)
    is_private = Column("isPrivate", Boolean, nullable=False, default=False)
    notes = Column(String, nullable=True)
    created_at = Column("createdAt", BigInteger, nullable=False)
