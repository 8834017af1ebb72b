"""
Database Models - Point-of-Sale Back Office

Read models for the tables the analytics engine aggregates over. The tables
are owned and written by the order-processing and catalog services; this
package only declares them so reports can be expressed as SQLAlchemy Core
queries (and so tests can create the schema on SQLite).

All rows carry a ``tenant_id``. Money is stored as integer minor units.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
import uuid

from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# Orders in these states never count towards revenue, cost or profit
EXCLUDED_ORDER_STATUSES = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)


# =============================================================================
# CATALOG
# =============================================================================

class Category(Base):
    """Product category"""
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    products: Mapped[List["Product"]] = relationship(back_populates="category")

    __table_args__ = (
        Index("ix_categories_tenant", "tenant_id"),
    )


class Brand(Base):
    """Product brand"""
    __tablename__ = "brands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    products: Mapped[List["Product"]] = relationship(back_populates="brand")

    __table_args__ = (
        Index("ix_brands_tenant", "tenant_id"),
    )


class Product(Base):
    """
    Product catalog entry.

    ``cost_price_cents`` is the *current* cost. Reports use it for every
    historical line, so a cost change rewrites past profitability.
    """
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    sku: Mapped[str] = mapped_column(String(64), nullable=False)

    category_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("categories.id"))
    brand_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("brands.id"))

    # Pricing
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_price_cents: Mapped[Optional[int]] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    brand: Mapped[Optional["Brand"]] = relationship(back_populates="products")
    order_items: Mapped[List["OrderItem"]] = relationship(back_populates="product")

    __table_args__ = (
        UniqueConstraint("tenant_id", "sku", name="uq_products_tenant_sku"),
        Index("ix_products_tenant_category", "tenant_id", "category_id"),
    )


# =============================================================================
# SALES
# =============================================================================

class Customer(Base):
    """Store customer"""
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    orders: Mapped[List["Order"]] = relationship(back_populates="customer")

    __table_args__ = (
        Index("ix_customers_tenant", "tenant_id"),
    )


class Order(Base):
    """
    Sales order header.

    Grain: one row per order. ``total_cents`` is what the customer paid and
    drives customer spend rankings; line revenue comes from ``OrderItem``.
    """
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    customer_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("customers.id"))

    status: Mapped[OrderStatus] = mapped_column(
        SQLEnum(
            OrderStatus,
            native_enum=False,
            length=20,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=OrderStatus.PENDING,
        nullable=False,
    )
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    customer: Mapped[Optional["Customer"]] = relationship(back_populates="orders")
    items: Mapped[List["OrderItem"]] = relationship(back_populates="order")

    __table_args__ = (
        Index("ix_orders_tenant_created", "tenant_id", "created_at"),
        Index("ix_orders_status", "status"),
        Index("ix_orders_customer", "customer_id"),
    )


class OrderItem(Base):
    """
    Order line.

    ``subtotal_cents`` is quantity times the unit price charged at sale time.
    """
    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False, default="default")
    order_id: Mapped[str] = mapped_column(String(36), ForeignKey("orders.id"), nullable=False)
    product_id: Mapped[str] = mapped_column(String(36), ForeignKey("products.id"), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    subtotal_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship(back_populates="order_items")

    __table_args__ = (
        Index("ix_order_items_order", "order_id"),
        Index("ix_order_items_product", "product_id"),
    )
