"""
Database Models - Restaurant Sales Schema

Read-only mappings of the restaurant sales schema. The tables are owned by
the order-taking system; this application only aggregates over them.

Fact Tables:
- Sale: one order, with status, amounts and delivery time
- ProductSale: order line items

Dimension Tables:
- Store, Channel, Customer, Product
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# =============================================================================
# ENUMERATIONS
# =============================================================================

class SaleStatus(str, Enum):
    """Terminal sale statuses used by the reports"""
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Money columns come back as floats so aggregates can be rounded directly
Money = Numeric(12, 2, asdecimal=False)


# =============================================================================
# DIMENSION TABLES
# =============================================================================

class Store(Base):
    """Restaurant store"""
    __tablename__ = "stores"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[Optional[str]] = mapped_column(String(100))
    state: Mapped[Optional[str]] = mapped_column(String(2))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    sales: Mapped[List["Sale"]] = relationship(back_populates="store")


class Channel(Base):
    """
    Sales channel (counter, own delivery app, marketplaces...)

    ``type`` is the channel kind code, e.g. P for presential and D for delivery.
    """
    __tablename__ = "channels"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(1))

    sales: Mapped[List["Sale"]] = relationship(back_populates="channel")


class Customer(Base):
    """Customer registered on at least one sale"""
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(100))
    phone_number: Mapped[Optional[str]] = mapped_column(String(50))

    sales: Mapped[List["Sale"]] = relationship(back_populates="customer")


class Product(Base):
    """Menu product"""
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(500), nullable=False)


# =============================================================================
# FACT TABLES
# =============================================================================

class Sale(Base):
    """
    Sale Fact Table

    Grain is one order. ``sale_status_desc`` is free text in the source system;
    only COMPLETED and CANCELLED are interpreted by the reports.
    """
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    store_id: Mapped[int] = mapped_column(Integer, ForeignKey("stores.id"), nullable=False)
    channel_id: Mapped[int] = mapped_column(Integer, ForeignKey("channels.id"), nullable=False)
    customer_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("customers.id"))

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    sale_status_desc: Mapped[str] = mapped_column(String(100), nullable=False)

    # Measures
    total_amount: Mapped[float] = mapped_column(Money, nullable=False)
    total_discount: Mapped[float] = mapped_column(Money, default=0)
    delivery_seconds: Mapped[Optional[int]] = mapped_column(Integer)

    store: Mapped["Store"] = relationship(back_populates="sales")
    channel: Mapped["Channel"] = relationship(back_populates="sales")
    customer: Mapped[Optional["Customer"]] = relationship(back_populates="sales")
    items: Mapped[List["ProductSale"]] = relationship(back_populates="sale")

    __table_args__ = (
        Index("ix_sales_created_at", "created_at"),
        Index("ix_sales_status_created", "sale_status_desc", "created_at"),
        Index("ix_sales_store", "store_id"),
        Index("ix_sales_channel", "channel_id"),
        Index("ix_sales_customer", "customer_id"),
    )


class ProductSale(Base):
    """Order line item"""
    __tablename__ = "product_sales"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sale_id: Mapped[int] = mapped_column(Integer, ForeignKey("sales.id"), nullable=False)
    product_id: Mapped[int] = mapped_column(Integer, ForeignKey("products.id"), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False)
    total_price: Mapped[float] = mapped_column(Money, nullable=False)

    sale: Mapped["Sale"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()

    __table_args__ = (
        Index("ix_product_sales_sale", "sale_id"),
        Index("ix_product_sales_product", "product_id"),
    )
