# storefront/db/schemas.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


# Category schema
class CategorySchemas(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


# Product schema, category resolved
class ProductSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    price: float
    stock: int
    image: Optional[str] = None
    brand: Optional[str] = None
    category_id: int
    category: Optional[CategorySchemas] = None


class ProductListResponse(BaseModel):
    count: int
    products: List[ProductSchema]


class MessageResponse(BaseModel):
    message: str


# Only the contact fields of the user are exposed with the cart
class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    address: Optional[str] = None
    phone_number: Optional[str] = None


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    quantity: int
    product: Optional[ProductSchema] = None


class CartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    user: Optional[UserSummary] = None
    items: List[CartItemResponse]
    version: int
    updated_at: datetime


class CartCheckResponse(BaseModel):
    exists: bool
