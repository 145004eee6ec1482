"""SQLAlchemy models for accounts and products.

Addresses and product images are embedded JSON lists owned by their parent
row; they have no table of their own.
"""
from __future__ import annotations

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    String,
    Text,
    JSON,
    func,
)

from .session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    role = Column(String(16), default="user", nullable=False)
    addresses = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True)
    title = Column(String(100), nullable=False)
    description = Column(Text, default="", nullable=False)
    price_amount = Column(Float, nullable=False)
    currency = Column(String(3), default="INR", nullable=False)
    seller_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    images = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
