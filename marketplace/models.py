# marketplace/models.py
from sqlalchemy import Column, Integer, String, Numeric, JSON, TIMESTAMP, func, Text, Boolean, ForeignKey
from .db import Base

ROLE_CUSTOMER = "customer"
ROLE_ARTISAN = "artisan"
ROLE_ADMIN = "admin"

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "cancelled")

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_CUSTOMER, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # artisan profile (see migrations/)
    bio = Column(Text, nullable=True)
    location = Column(String, nullable=True)
    specialties = Column(Text, nullable=True)  # comma-delimited
    experience = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False, index=True)
    image_url = Column(String, nullable=False)
    cultural_significance = Column(Text, nullable=True)
    materials = Column(String, nullable=True)
    artisan_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    items = Column(JSON, nullable=False)  # [{"productId": int, "quantity": int}]
    shipping_address = Column(Text, nullable=False)
    payment_method = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
