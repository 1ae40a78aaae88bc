# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from app.domain.enums import Category, Condition, PaymentMethod, OrderStatus


# =====================================================
# USERS
# =====================================================
class UserCreate(BaseModel):
    """Schema dla rejestracji uzytkownika."""

    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255)


class UserRead(BaseModel):
    id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class SellerOut(BaseModel):
    id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


# =====================================================
# PRODUCTS
# =====================================================
class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    category: Category
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    condition: Condition = Condition.GOOD
    images: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    """Wszystkie pola opcjonalne, aktualizowane sa tylko przeslane."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    category: Optional[Category] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    condition: Optional[Condition] = None
    images: Optional[List[str]] = None
    location: Optional[str] = None
    tags: Optional[List[str]] = None
    is_available: Optional[bool] = None


class ProductOut(BaseModel):
    id: int
    title: str
    description: str
    category: str
    condition: str
    price: Decimal
    images: List[str]
    location: Optional[str] = None
    tags: List[str]
    is_available: bool
    views: int
    seller: Optional[SellerOut] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total: int


class ProductPage(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


# =====================================================
# CART
# =====================================================
class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int
    quantity: int = 1


class QuantityIn(BaseModel):
    quantity: int


class CartProductOut(BaseModel):
    id: int
    title: str
    price: Decimal
    images: List[str]
    is_available: bool
    seller: Optional[SellerOut] = None


class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    added_at: datetime
    product: Optional[CartProductOut] = None


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    items: List[CartItemOut]
    total_items: int
    total_price: Decimal


# =====================================================
# CHECKOUT
# =====================================================
class AddressIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    street: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=20)


class DirectItemIn(BaseModel):
    """Pozycja "kup teraz" - cena i tytul i tak sa brane z katalogu."""

    product_id: int
    quantity: int = Field(1, ge=1)


class CheckoutIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    address: AddressIn
    location: str = Field(..., min_length=1, max_length=255)
    payment_method: PaymentMethod
    notes: Optional[str] = Field(None, max_length=500)


class OrderCheckoutIn(CheckoutIn):
    # niepuste products = sciezka "kup teraz", w przeciwnym razie koszyk
    products: List[DirectItemIn] = Field(default_factory=list)
    total_amount: Optional[Decimal] = None


class AddressOut(BaseModel):
    street: str
    city: str
    state: str
    pincode: str


class OrderItemOut(BaseModel):
    product_id: int
    title: str
    price: Decimal
    quantity: int
    seller: SellerOut


class OrderOut(BaseModel):
    id: int
    user_id: int
    items: List[OrderItemOut]
    address: AddressOut
    location: str
    payment_method: str
    status: str
    total_amount: Decimal
    notes: Optional[str] = None
    created_at: datetime


class OrderPage(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class PurchaseItemOut(BaseModel):
    product_id: int
    title: str
    price: Decimal
    quantity: int


class PurchaseOut(BaseModel):
    id: int
    buyer: SellerOut
    seller: SellerOut
    items: List[PurchaseItemOut]
    address: AddressOut
    location: str
    payment_method: str
    status: str
    total_amount: Decimal
    notes: Optional[str] = None
    created_at: datetime


class PurchaseCheckoutOut(BaseModel):
    purchases: List[PurchaseOut]
    total_amount: Decimal


class PurchasePage(BaseModel):
    purchases: List[PurchaseOut]
    pagination: Pagination


class StatusIn(BaseModel):
    status: OrderStatus
