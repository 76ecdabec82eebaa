# atelier/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from atelier.domain.enums import (
    FurnitureCategory,
    ModelFormat,
    OrderStatus,
    PaymentMethod,
    PaymentPlan,
    PaymentStatus,
    UserRole,
)


# =====================================================
# CART
# =====================================================

class CartItemIn(BaseModel):
    """Add a configured product to the cart."""

    product_id: str = Field(..., min_length=1)
    configuration: Dict[str, str] = Field(
        default_factory=dict,
        description="Selected options, e.g. {'materialId': '...', 'colorId': '...'}",
    )
    quantity: int = Field(1, ge=1)


class CartItemUpdate(BaseModel):
    """0 removes the line."""

    quantity: int = Field(..., ge=0)


class CartItemOut(BaseModel):
    id: str
    product_id: str
    product_name: str
    product_sku: str
    product_image: Optional[str] = None
    configuration: Dict[str, Any]
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class CartOut(BaseModel):
    id: str
    items: List[CartItemOut]
    subtotal: Decimal
    item_count: int


# =====================================================
# ORDERS
# =====================================================

class OrderCreate(BaseModel):
    shipping_address_id: str
    billing_address_id: Optional[str] = None
    payment_plan: PaymentPlan = PaymentPlan.FULL
    notes: Optional[str] = Field(None, max_length=2000)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: Optional[str] = Field(None, max_length=500)


class OrderItemOut(BaseModel):
    id: str
    product_id: str
    product_name: str
    product_sku: str
    configuration: Dict[str, Any]
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderAddressOut(BaseModel):
    id: str
    full_name: str
    phone: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    region: str
    country: str


class PaymentOut(BaseModel):
    id: str
    order_id: str
    amount: Decimal
    currency: str
    method: PaymentMethod
    status: PaymentStatus
    sequence: int
    provider: Optional[str] = None
    provider_ref: Optional[str] = None
    failure_reason: Optional[str] = None
    processed_at: Optional[datetime] = None


class StatusHistoryEntry(BaseModel):
    status: OrderStatus
    timestamp: datetime
    note: Optional[str] = None


class OrderOut(BaseModel):
    id: str
    order_number: str
    user_id: str
    status: OrderStatus
    payment_plan: PaymentPlan
    items: List[OrderItemOut]
    shipping_address: OrderAddressOut
    billing_address: Optional[OrderAddressOut] = None
    payments: List[PaymentOut]
    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal
    currency: str
    estimated_delivery: Optional[datetime] = None
    notes: Optional[str] = None
    status_history: List[StatusHistoryEntry]
    created_at: datetime
    updated_at: datetime


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    total: int
    page: int
    limit: int
    total_pages: int


class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    method: PaymentMethod
    provider: Optional[str] = None
    provider_ref: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    failure_reason: Optional[str] = None


class PaymentScheduleOut(BaseModel):
    order_id: str
    payment_plan: PaymentPlan
    installments: List[Decimal]


# =====================================================
# USERS / ADDRESSES
# =====================================================

class UserCreate(BaseModel):
    """Provisioning hook for the identity layer."""

    id: Optional[str] = None
    email: str = Field(..., min_length=3, max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = None


class AddressCreate(BaseModel):
    label: Optional[str] = None
    full_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address_line_1: str = Field(..., min_length=1)
    address_line_2: Optional[str] = None
    city: str = Field(..., min_length=1)
    region: str = Field(..., min_length=1)
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_default: bool = False


class AddressUpdate(BaseModel):
    label: Optional[str] = None
    full_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    address_line_1: Optional[str] = Field(None, min_length=1)
    address_line_2: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1)
    region: Optional[str] = Field(None, min_length=1)
    postal_code: Optional[str] = None
    country: Optional[str] = None
    is_default: Optional[bool] = None


class AddressOut(BaseModel):
    id: str
    label: Optional[str] = None
    full_name: str
    phone: str
    address_line_1: str
    address_line_2: Optional[str] = None
    city: str
    region: str
    postal_code: Optional[str] = None
    country: str
    is_default: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserProfileOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    addresses: List[AddressOut]
    created_at: datetime


# =====================================================
# CATALOG
# =====================================================

class MaterialOptionIn(BaseModel):
    name: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    price_modifier: Decimal = Decimal("0")
    texture_url: Optional[str] = None
    is_default: bool = False


class ColorOptionIn(BaseModel):
    name: str = Field(..., min_length=1)
    hex_code: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$")
    price_modifier: Decimal = Decimal("0")
    texture_url: Optional[str] = None
    is_default: bool = False


class SizeIn(BaseModel):
    label: str = Field(..., min_length=1)
    sku: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    original_price: Optional[Decimal] = Field(None, ge=0)
    width: Decimal
    height: Decimal
    depth: Decimal
    in_stock: bool = True
    sort_order: int = 0
    is_default: bool = False


class FabricCategoryIn(BaseModel):
    name: str = Field(..., min_length=1)
    sort_order: int = 0


class FabricIn(BaseModel):
    fabric_category_id: str
    name: str = Field(..., min_length=1)
    hex_color: str = Field(..., pattern=r"^#[0-9A-Fa-f]{6}$")
    texture_url: Optional[str] = None
    price: Decimal = Decimal("0")
    in_stock: bool = True
    sort_order: int = 0
    is_default: bool = False


class ProductImageIn(BaseModel):
    url: str = Field(..., min_length=1, max_length=500)
    alt_text: Optional[str] = Field(None, max_length=255)
    sort_order: int = 0
    is_primary: bool = False


class ProductCreate(BaseModel):
    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    story: Optional[str] = None
    category: FurnitureCategory
    base_price: Decimal = Field(..., ge=0)
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    depth: Optional[Decimal] = None
    weight: Optional[Decimal] = None
    model_url: Optional[str] = None
    model_thumbnail: Optional[str] = None
    model_format: Optional[ModelFormat] = None
    lead_time_days: Optional[int] = Field(None, ge=1)
    return_days: Optional[int] = Field(None, ge=0)
    warranty_years: Optional[int] = Field(None, ge=0)
    is_active: bool = True
    is_featured: bool = False
    material_options: List[MaterialOptionIn] = Field(default_factory=list)
    color_options: List[ColorOptionIn] = Field(default_factory=list)


class ProductUpdate(BaseModel):
    sku: Optional[str] = Field(None, min_length=1, max_length=64)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    story: Optional[str] = None
    category: Optional[FurnitureCategory] = None
    base_price: Optional[Decimal] = Field(None, ge=0)
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    depth: Optional[Decimal] = None
    weight: Optional[Decimal] = None
    model_url: Optional[str] = None
    model_thumbnail: Optional[str] = None
    model_format: Optional[ModelFormat] = None
    lead_time_days: Optional[int] = Field(None, ge=1)
    return_days: Optional[int] = Field(None, ge=0)
    warranty_years: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ProductImageOut(BaseModel):
    id: str
    url: str
    alt_text: Optional[str] = None
    sort_order: int
    is_primary: bool

    model_config = ConfigDict(from_attributes=True)


class MaterialOptionOut(BaseModel):
    id: str
    name: str
    type: str
    price_modifier: Decimal
    texture_url: Optional[str] = None
    is_default: bool
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class ColorOptionOut(BaseModel):
    id: str
    name: str
    hex_code: str
    price_modifier: Decimal
    texture_url: Optional[str] = None
    is_default: bool
    is_available: bool

    model_config = ConfigDict(from_attributes=True)


class SizeOut(BaseModel):
    id: str
    label: str
    sku: Optional[str] = None
    price: Decimal
    original_price: Optional[Decimal] = None
    width: Decimal
    height: Decimal
    depth: Decimal
    in_stock: bool
    sort_order: int
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


class FabricOut(BaseModel):
    id: str
    fabric_category_id: str
    name: str
    hex_color: str
    texture_url: Optional[str] = None
    price: Decimal
    in_stock: bool
    is_default: bool

    model_config = ConfigDict(from_attributes=True)


class FabricCategoryOut(BaseModel):
    id: str
    name: str
    sort_order: int
    fabrics: List[FabricOut]


class ProductOut(BaseModel):
    id: str
    sku: str
    slug: str
    name: str
    description: str
    story: Optional[str] = None
    category: FurnitureCategory
    base_price: Decimal
    width: Optional[Decimal] = None
    height: Optional[Decimal] = None
    depth: Optional[Decimal] = None
    weight: Optional[Decimal] = None
    model_url: Optional[str] = None
    model_thumbnail: Optional[str] = None
    model_format: Optional[ModelFormat] = None
    lead_time_days: int
    return_days: int
    warranty_years: int
    is_active: bool
    is_featured: bool
    images: List[ProductImageOut]
    material_options: List[MaterialOptionOut]
    color_options: List[ColorOptionOut]
    sizes: List[SizeOut]
    fabric_categories: List[FabricCategoryOut]
    created_at: datetime
    updated_at: datetime


class ProductListOut(BaseModel):
    products: List[ProductOut]
    total: int
    page: int
    limit: int
    total_pages: int
