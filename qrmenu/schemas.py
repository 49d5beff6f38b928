"""
Pydantic Schemas for Request/Response Validation

Catalog, orders, cart, checkout, admin authentication and QR links.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field

from qrmenu.models import OrderStatus, PaymentMethod
from qrmenu.stores.cart import CartItem


# =============================================================================
# CATALOG
# =============================================================================

class CategoryInfo(BaseModel):
    """A menu category as shown in the category navigation."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    label: str
    emoji: str
    sort_order: int = 0


class CategoryCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=50, pattern=r"^[a-z0-9][a-z0-9_-]*$", examples=["ayam"])
    label: str = Field(..., min_length=1, max_length=100, examples=["Ayam"])
    emoji: str = Field(default="", max_length=16, examples=["🍗"])
    sort_order: int = Field(default=0)


class CategoryUpdate(BaseModel):
    """Partial category patch; omitted fields stay unchanged."""
    label: Optional[str] = Field(None, min_length=1, max_length=100)
    emoji: Optional[str] = Field(None, max_length=16)
    sort_order: Optional[int] = None


class MenuItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: int
    description: str = ""
    category_id: str
    image: Optional[str] = None
    available: bool = True


class MenuItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120, examples=["Ayam Goreng"])
    price: int = Field(..., ge=0, examples=[15000])
    description: str = Field(default="", max_length=1000)
    category_id: str = Field(..., min_length=1, max_length=50, examples=["ayam"])
    image: Optional[str] = Field(None, max_length=500)
    available: bool = True


class MenuItemUpdate(BaseModel):
    """Partial menu item patch; only the fields that are sent are written."""
    name: Optional[str] = Field(None, min_length=1, max_length=120)
    price: Optional[int] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=1000)
    category_id: Optional[str] = Field(None, min_length=1, max_length=50)
    image: Optional[str] = Field(None, max_length=500)
    available: Optional[bool] = None


# =============================================================================
# ORDERS
# =============================================================================

class OrderItemCreate(BaseModel):
    """Single line of a new order."""
    menu_item_id: int
    quantity: int = Field(..., ge=1, examples=[2])
    price_at_order: int = Field(..., ge=0, examples=[15000])
    notes: str = Field(default="", max_length=200)


class OrderCreate(BaseModel):
    """New order as submitted at checkout."""
    customer_name: str = Field(..., min_length=2, max_length=100, examples=["Budi"])
    table_number: str = Field(..., min_length=1, max_length=20, examples=["A1"])
    total_price: int = Field(..., ge=0)
    payment_method: PaymentMethod = PaymentMethod.PAY_AT_COUNTER
    notes: Optional[str] = Field(None, max_length=500)
    items: List[OrderItemCreate] = Field(..., min_length=1)


class MenuItemRef(BaseModel):
    """Denormalized menu item fields shown next to an order line."""
    model_config = ConfigDict(from_attributes=True)

    name: str
    category_id: str


class OrderItemView(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    menu_item_id: Optional[int]
    quantity: int
    price_at_order: int
    notes: Optional[str] = None
    menu_item: Optional[MenuItemRef] = None


class OrderView(BaseModel):
    """An order with its line items, ready for display."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    customer_name: str
    table_number: str
    total_price: int
    payment_method: PaymentMethod
    status: OrderStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    order_items: List[OrderItemView] = Field(default_factory=list)


class OrderListResponse(BaseModel):
    total: int
    orders: List[OrderView]


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class CustomerOrderView(OrderView):
    """Order as shown in the customer's order history."""
    order_code: str
    status_label: str


class AdminOrderView(OrderView):
    """Order as shown on the dashboard, with the buttons it offers."""
    order_code: str
    available_actions: List[OrderStatus] = Field(default_factory=list)


class AdminOrderListResponse(BaseModel):
    total: int
    orders: List[AdminOrderView]


# =============================================================================
# CART / TABLE / CHECKOUT
# =============================================================================

class CartItemAdd(BaseModel):
    id: int
    name: str
    price: int = Field(..., ge=0)
    category: str = ""
    note: str = Field(default="", max_length=200)
    quantity: Optional[int] = Field(None, ge=1)


class CartQuantityUpdate(BaseModel):
    id: int
    quantity: int
    note: str = ""


class CartItemRemove(BaseModel):
    id: int
    note: str = ""


class CartResponse(BaseModel):
    items: List[CartItem]
    is_open: bool
    total: int
    total_display: str
    item_count: int


class TableUpdate(BaseModel):
    table_number: str = Field(..., max_length=20)


class TableResponse(BaseModel):
    table_number: str


class CheckoutRequest(BaseModel):
    """
    Checkout form. Fields are validated by the checkout flow itself so
    problems come back as field messages instead of a 422.
    """
    customer_name: str = ""
    table_number: str = ""
    payment_method: PaymentMethod = PaymentMethod.PAY_AT_COUNTER
    notes: Optional[str] = Field(None, max_length=500)


class CheckoutResponse(BaseModel):
    status: str
    errors: dict[str, str] = Field(default_factory=dict)
    order_id: Optional[str] = None
    order_code: Optional[str] = None
    total: int = 0
    table_number: str = ""


class OrderHistoryResponse(BaseModel):
    order_ids: List[str]
    orders: List[CustomerOrderView]


# =============================================================================
# ADMIN
# =============================================================================

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class AdminUserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str


class LoginResponse(BaseModel):
    success: bool
    token: Optional[str] = None
    user: Optional[AdminUserInfo] = None
    error: Optional[str] = None


class ImageUploadResponse(BaseModel):
    success: bool
    image: Optional[str]
    message: str


class DashboardData(BaseModel):
    total_orders: int
    pending_orders: int
    confirmed_orders: int
    completed_orders: int
    today_revenue: int
    today_revenue_display: str
    menu_items: int
    categories: int


# =============================================================================
# QR / MISC
# =============================================================================

class QrLinkResponse(BaseModel):
    url: str
    table: Optional[str] = None
    data_url: str
    filename: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    state_storage: str
    image_storage: str
    timestamp: datetime
