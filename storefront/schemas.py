# storefront/schemas.py
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.user import Permission


class SignupIn(BaseModel):
    """Schema for account creation."""

    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)
    name: str | None = Field(None, max_length=100)


class SigninIn(BaseModel):
    email: str
    password: str


class RequestResetIn(BaseModel):
    email: str


class ResetPasswordIn(BaseModel):
    reset_token: str
    password: str = Field(..., min_length=1)
    confirm_password: str


class PermissionsIn(BaseModel):
    permissions: List[Permission]


class UserOut(BaseModel):
    """Public view of a user. Never carries the hash or reset token."""

    id: int
    email: str
    name: str | None = None
    permissions: List[Permission]

    model_config = ConfigDict(from_attributes=True)


class ItemIn(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    price: int = Field(..., ge=0, description="Price in the smallest currency unit")
    image: str | None = None
    large_image: str | None = None


class ItemUpdate(BaseModel):
    title: str | None = Field(None, min_length=1)
    description: str | None = None
    price: int | None = Field(None, ge=0)
    image: str | None = None
    large_image: str | None = None


class ItemOut(BaseModel):
    id: int
    title: str
    description: str
    price: int
    image: str | None = None
    large_image: str | None = None
    user_id: int

    model_config = ConfigDict(from_attributes=True)


class CountOut(BaseModel):
    count: int


class CartItemOut(BaseModel):
    id: int
    quantity: int
    item: ItemOut

    model_config = ConfigDict(from_attributes=True)


class CheckoutIn(BaseModel):
    token: str = Field(..., min_length=1, description="Payment source token")


class OrderItemOut(BaseModel):
    id: int
    title: str
    description: str
    price: int
    image: str | None = None
    large_image: str | None = None
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    total: int
    charge: str
    created_at: datetime
    items: List[OrderItemOut]

    model_config = ConfigDict(from_attributes=True)


class MessageOut(BaseModel):
    message: str
