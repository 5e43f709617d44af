"""
HTTP routes for the public gallery and the admin panel.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from wishlist.auth import check_credentials, require_admin
from wishlist.catalog import (
    ALL_PEOPLE,
    build_cards,
    build_category,
    build_gift,
    build_person,
    filter_gifts,
    find_by_id,
)
from wishlist.config import Settings, get_settings
from wishlist.dependencies import (
    get_kv_store,
    get_storage_service,
    restart_storage_service,
)
from wishlist.local_store import KeyValueStore
from wishlist.schemas import (
    CategoryForm,
    CloudConfigRequest,
    DatabaseStatusResponse,
    GiftCard,
    GiftForm,
    LoginRequest,
    PersonForm,
    StatusResponse,
)
from wishlist.storage import StorageService, clear_cloud_config
from wishlist.types import Category, Gift, Person

logger = logging.getLogger(__name__)

router = APIRouter()
admin = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])


def _gift_cards(
    storage: StorageService, person_id: str, q: str, include_private: bool
) -> list[GiftCard]:
    gifts = filter_gifts(
        storage.get_gifts(),
        person_id=person_id,
        search=q,
        include_private=include_private,
    )
    return build_cards(gifts, storage.get_people(), storage.get_categories())


@router.get("/public/people", response_model=list[Person])
def public_people(storage: StorageService = Depends(get_storage_service)):
    return storage.get_people()


@router.get("/public/gifts", response_model=list[GiftCard])
def public_gifts(
    person_id: str = Query(ALL_PEOPLE),
    q: str = Query(""),
    storage: StorageService = Depends(get_storage_service),
):
    return _gift_cards(storage, person_id, q, include_private=False)


@router.post("/login", response_model=StatusResponse)
def login(payload: LoginRequest, settings: Settings = Depends(get_settings)):
    if not check_credentials(settings, payload.username, payload.password):
        logger.warning("Rejected admin login for %r", payload.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return StatusResponse(status="ok")


@admin.get("/gifts", response_model=list[GiftCard])
def admin_gifts(
    person_id: str = Query(ALL_PEOPLE),
    q: str = Query(""),
    storage: StorageService = Depends(get_storage_service),
):
    return _gift_cards(storage, person_id, q, include_private=True)


@admin.post("/gifts", response_model=Gift)
def save_gift(form: GiftForm, storage: StorageService = Depends(get_storage_service)):
    existing = find_by_id(storage.get_gifts(), form.id)
    if form.id and existing is None:
        raise HTTPException(status_code=404, detail="Gift not found")
    return storage.save_gift(build_gift(form, existing))


@admin.delete("/gifts/{gift_id}", status_code=204)
def delete_gift(gift_id: str, storage: StorageService = Depends(get_storage_service)):
    storage.delete_gift(gift_id)
    return Response(status_code=204)


@admin.get("/people", response_model=list[Person])
def admin_people(storage: StorageService = Depends(get_storage_service)):
    return storage.get_people()


@admin.post("/people", response_model=Person)
def save_person(
    form: PersonForm, storage: StorageService = Depends(get_storage_service)
):
    existing = find_by_id(storage.get_people(), form.id)
    if form.id and existing is None:
        raise HTTPException(status_code=404, detail="Person not found")
    return storage.save_person(build_person(form, existing))


@admin.delete("/people/{person_id}", status_code=204)
def delete_person(
    person_id: str, storage: StorageService = Depends(get_storage_service)
):
    storage.delete_person(person_id)
    return Response(status_code=204)


@admin.get("/categories", response_model=list[Category])
def admin_categories(storage: StorageService = Depends(get_storage_service)):
    return storage.get_categories()


@admin.post("/categories", response_model=Category)
def save_category(
    form: CategoryForm, storage: StorageService = Depends(get_storage_service)
):
    return storage.save_category(build_category(form))


@admin.delete("/categories/{category_id}", status_code=204)
def delete_category(
    category_id: str, storage: StorageService = Depends(get_storage_service)
):
    storage.delete_category(category_id)
    return Response(status_code=204)


@admin.get("/database", response_model=DatabaseStatusResponse)
def database_status(storage: StorageService = Depends(get_storage_service)):
    return DatabaseStatusResponse(cloud=storage.is_cloud_mode())


@admin.post("/database", response_model=DatabaseStatusResponse)
def connect_database(
    payload: CloudConfigRequest,
    storage: StorageService = Depends(get_storage_service),
):
    if not payload.url or not payload.key:
        return DatabaseStatusResponse(cloud=storage.is_cloud_mode())
    storage.save_cloud_config(payload.url, payload.key)
    return DatabaseStatusResponse(cloud=storage.is_cloud_mode(), restarting=True)


@admin.delete("/database", response_model=DatabaseStatusResponse)
def disconnect_database(store: KeyValueStore = Depends(get_kv_store)):
    # Works even when the remote backend cannot be reached at startup.
    clear_cloud_config(store)
    restart_storage_service()
    return DatabaseStatusResponse(cloud=False, restarting=True)


router.include_router(admin)
