"""
Pydantic schemas for the wishlist HTTP API.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from wishlist.types import Gift, GiftStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GiftForm(CamelModel):
    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    person_id: str = Field(..., min_length=1)
    category_id: str = Field(..., min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    url: Optional[str] = None
    image_url: Optional[str] = None
    status: Optional[GiftStatus] = None
    is_private: Optional[bool] = None
    notes: Optional[str] = None


class PersonForm(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    avatar_url: Optional[str] = None


class CategoryForm(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1)
    color: str = ""


class GiftCard(CamelModel):
    gift: Gift
    person_name: str
    category_name: str
    category_color: str = ""


class LoginRequest(BaseModel):
    username: str
    password: str


class StatusResponse(BaseModel):
    status: Literal["ok"]


class CloudConfigRequest(BaseModel):
    url: str = ""
    key: str = ""


class DatabaseStatusResponse(BaseModel):
    cloud: bool
    restarting: bool = False
