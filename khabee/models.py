"""
SQLAlchemy Database Models

Users, kitchens, menu items and orders with their line items.
Orders snapshot their pricing at creation; afterwards only the
status column changes.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Float,
    Integer,
    DateTime,
    Text,
    Enum,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from khabee.database import Base


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    """Who a user is to the platform."""
    CUSTOMER = "CUSTOMER"
    KITCHEN_OWNER = "KITCHEN_OWNER"


class OrderStatus(str, enum.Enum):
    """
    Known order statuses.

    The ``orders.status`` column is a plain string: kitchens may set values
    outside this list and they are stored and rendered as-is.
    """
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COOKING = "COOKING"
    READY = "READY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class User(Base):
    """
    Platform user. The id is the auth provider's user id.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    phone = Column(String(20), nullable=False, unique=True, index=True)
    name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, default="")
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CUSTOMER)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    kitchens = relationship("Kitchen", back_populates="owner")
    orders = relationship("Order", back_populates="user")

    def __repr__(self):
        return f"<User {self.id} - {self.phone} - {self.role.value}>"


class Kitchen(Base):
    """A seller running one storefront and menu."""
    __tablename__ = "kitchens"

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    logo = Column(String(500), nullable=True)
    address = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    owner = relationship("User", back_populates="kitchens")
    menu_items = relationship(
        "MenuItem",
        back_populates="kitchen",
        cascade="all, delete-orphan",
        order_by="MenuItem.name",
    )
    orders = relationship("Order", back_populates="kitchen")

    def __repr__(self):
        return f"<Kitchen {self.id} - {self.name}>"


class MenuItem(Base):
    """A purchasable product of one kitchen."""
    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    kitchen_id = Column(String(36), ForeignKey("kitchens.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    price = Column(Float, nullable=False)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)

    kitchen = relationship("Kitchen", back_populates="menu_items")

    def __repr__(self):
        return f"<MenuItem {self.id} - {self.name} - {self.price}>"


class Order(Base):
    """
    A checkout transaction.

    Created together with its items in one transaction. Pricing columns
    are computed once from the caller-supplied item prices.
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    kitchen_id = Column(String(36), ForeignKey("kitchens.id"), nullable=False, index=True)

    # =========================================================================
    # PRICING
    # =========================================================================
    subtotal = Column(Float, nullable=False)
    delivery_fee = Column(Float, nullable=False)
    tax = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    # =========================================================================
    # STATUS
    # =========================================================================
    status = Column(
        String(32),
        default=OrderStatus.PENDING.value,
        nullable=False,
        index=True,
    )

    # =========================================================================
    # DELIVERY DETAILS
    # =========================================================================
    delivery_address = Column(String(255), nullable=True)
    special_instructions = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    user = relationship("User", back_populates="orders")
    kitchen = relationship("Kitchen", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Order {self.id} - {self.status} - {self.total_price}>"


class OrderItem(Base):
    """One line of an order, priced at order time."""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_order_items_quantity_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_id)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    menu_item_id = Column(String(36), ForeignKey("menu_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")

    def __repr__(self):
        return f"<OrderItem {self.menu_item_id} x{self.quantity} @ {self.price}>"
