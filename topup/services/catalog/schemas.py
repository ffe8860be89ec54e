"""API request/response schemas for catalog endpoints."""

from datetime import datetime

from pydantic import Field

from topup.common.schemas import ApiModel


class CategoryCreate(ApiModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    badge: str = ""


class CategoryUpdate(ApiModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    badge: str | None = None
    is_active: bool | None = None


class ProductCreate(ApiModel):
    id: str = Field(min_length=1)
    category_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    diamonds: int = Field(default=0, ge=0)
    price: float = Field(ge=1)
    bonus: str = ""
    tag: str = ""


class ProductUpdate(ApiModel):
    category_id: str | None = None
    name: str | None = Field(default=None, min_length=1)
    diamonds: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, ge=1)
    bonus: str | None = None
    tag: str | None = None
    is_active: bool | None = None


class CategoryRead(ApiModel):
    id: str
    name: str
    description: str
    badge: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductRead(ApiModel):
    id: str
    category_id: str
    category_name: str
    name: str
    diamonds: int
    price: float
    bonus: str
    tag: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
