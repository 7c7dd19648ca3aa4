# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, date
from enum import Enum

from app.domain.status import OrderStatus


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    SELLER = "SELLER"
    ADMIN = "ADMIN"


class SortBy(str, Enum):
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"
    NEWEST = "newest"
    POPULARITY = "popularity"


class DashboardPeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# ---------- users ----------

class UserCreate(BaseModel):
    """Schema dla tworzenia użytkownika."""

    id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: Role = Role.CUSTOMER


class UserRead(BaseModel):
    id: int
    username: str
    email: str
    role: Role

    model_config = ConfigDict(from_attributes=True)


# ---------- products ----------

class ProductCreate(BaseModel):
    """Schema dla tworzenia produktu przez sprzedawce."""

    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0, decimal_places=2)
    stock: int = Field(..., ge=0)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    popularity: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    image_url: Optional[str] = None
    is_available: Optional[bool] = None
    popularity: Optional[int] = Field(None, ge=0)

    #pominiete pole = bez zmian, jawny null tylko dla image_url (kolumny NOT NULL)
    @field_validator("name", "description", "category", "price", "is_available", "popularity")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


class ProductOut(BaseModel):
    id: int
    sku: str
    name: str
    description: str
    category: str
    price: Decimal
    stock: int
    is_available: bool
    popularity: int
    image_url: Optional[str] = None
    seller_id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductPage(BaseModel):
    data: List[ProductOut]
    total: int
    page: int
    limit: int
    total_pages: int


# ---------- cart ----------

class AddToCartIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class UpdateCartItemIn(BaseModel):
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class CartItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    price: Decimal
    quantity: int
    subtotal: Decimal


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    items: List[CartItemOut]
    total: Decimal


# ---------- orders ----------

class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia z koszyka."""

    shipping_address: str = Field(..., min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    seller_id: int
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    shipping_address: str
    total_amount: Decimal
    status: OrderStatus
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderPage(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class MessageOut(BaseModel):
    message: str


# ---------- comments ----------

class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class CommentUpdate(BaseModel):
    text: Optional[str] = Field(None, min_length=1, max_length=2000)


class CommentOut(BaseModel):
    id: int
    product_id: int
    user_id: int
    username: str
    text: str
    created_at: datetime
    updated_at: datetime


# ---------- dashboard ----------

class ProductSales(BaseModel):
    id: int
    name: str
    quantity: int
    revenue: Decimal


class LowStockProduct(BaseModel):
    id: int
    name: str
    sku: str
    stock: int


class StatusCount(BaseModel):
    status: OrderStatus
    count: int


class SalesTrend(BaseModel):
    day: date
    revenue: Decimal
    orders: int


class DashboardSummary(BaseModel):
    total_revenue: Decimal
    order_count: int


class DashboardOut(BaseModel):
    period: DashboardPeriod
    summary: DashboardSummary
    top_products: List[ProductSales]
    low_stock_products: List[LowStockProduct]
    status_breakdown: List[StatusCount]
    sales_trends: List[SalesTrend]


class InventoryItem(BaseModel):
    id: int
    name: str
    sku: str
    stock: int
    is_available: bool
    status: str


class InventoryOut(BaseModel):
    total_products: int
    out_of_stock: int
    low_stock: int
    products: List[InventoryItem]
