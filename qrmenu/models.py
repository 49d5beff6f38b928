"""
SQLAlchemy Database Models

Menu catalog (categories, menu items), placed orders with their line
items, and staff accounts for the admin dashboard.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from qrmenu.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(str, enum.Enum):
    """How the customer intends to pay. A label only, nothing is charged."""
    PAY_AT_COUNTER = "pay_at_counter"
    QR_PAYMENT = "qr_payment"


class Category(Base):
    """
    Menu category.

    Defines grouping and display order of menu items. Items reference
    categories by slug without a constraint, so deleting a category
    leaves its items in place.
    """
    __tablename__ = "categories"

    id = Column(String(50), primary_key=True)  # slug, e.g. "ayam"
    label = Column(String(100), nullable=False)
    emoji = Column(String(16), nullable=False, default="")
    sort_order = Column(Integer, nullable=False, default=0, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Category {self.id} - {self.label}>"


class MenuItem(Base):
    """A dish or drink on the menu."""
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    price = Column(Integer, nullable=False)  # smallest currency unit
    description = Column(Text, nullable=False, default="")
    category_id = Column(String(50), nullable=False, index=True)
    image = Column(String(500), nullable=True)
    available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class Order(Base):
    """
    Placed order.

    Created once at checkout. After that only the status (and
    updated_at) changes. total_price is the client-computed cart
    total at submit time and is never recomputed from the items.
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    customer_name = Column(String(100), nullable=False)
    table_number = Column(String(20), nullable=False, index=True)
    total_price = Column(Integer, nullable=False)
    payment_method = Column(
        Enum(PaymentMethod, native_enum=False, values_callable=_enum_values, length=20),
        default=PaymentMethod.PAY_AT_COUNTER,
        nullable=False,
    )
    status = Column(
        Enum(OrderStatus, native_enum=False, values_callable=_enum_values, length=20),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True,
    )
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    order_items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order {self.id} - table {self.table_number} - {self.status.value}>"


class OrderItem(Base):
    """
    One line of a placed order.

    price_at_order is captured at checkout and is independent of any
    later change to the menu item's price.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    menu_item_id = Column(
        Integer,
        ForeignKey("menu_items.id", ondelete="SET NULL"),
        nullable=True,
    )
    quantity = Column(Integer, nullable=False)
    price_at_order = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True, default="")

    order = relationship("Order", back_populates="order_items")
    menu_item = relationship("MenuItem")

    def __repr__(self):
        return f"<OrderItem #{self.id} - order {self.order_id} - {self.quantity}x{self.menu_item_id}>"


class AdminUser(Base):
    """Staff account allowed into the admin dashboard."""
    __tablename__ = "admin_users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<AdminUser {self.email}>"
