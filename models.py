# models.py
import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from db import Base


def utcnow() -> datetime:
    # naive UTC: одинаково ведёт себя в sqlite и postgres
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex


class Role(str, enum.Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, enum.Enum):
    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class User(Base):
    __tablename__ = "users"
    id = Column(String(32), primary_key=True, default=new_id)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=True)
    name = Column(String, nullable=False)
    lastname = Column(String, nullable=True)
    role = Column(Enum(Role), nullable=False, default=Role.STUDENT)
    age = Column(Integer, nullable=True)
    telegram = Column(String, nullable=True)
    programs = Column(JSON, nullable=False, default=list)  # теги программ ("master")
    reset_token = Column(String, unique=True, index=True, nullable=True)
    reset_token_expiry = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    orders = relationship("Order", back_populates="user")


class Course(Base):
    __tablename__ = "courses"
    id = Column(String(32), primary_key=True, default=new_id)
    slug = Column(String, unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    short_desc = Column(String, nullable=True)
    price = Column(Integer, nullable=False)         # в местной валюте
    price_usd = Column(Integer, nullable=True)
    currency = Column(String(3), nullable=False, default="ARS")
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    orders = relationship("Order", back_populates="course")


class Order(Base):
    __tablename__ = "orders"
    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=True, index=True)  # null = гостевая покупка
    buyer_name = Column(String, nullable=False)
    buyer_email = Column(String, nullable=False)
    course_id = Column(String(32), ForeignKey("courses.id"), nullable=False)
    status = Column(Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True)
    source = Column(String, nullable=False, default="SITE")
    payment_method = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    user = relationship("User", back_populates="orders")
    course = relationship("Course", back_populates="orders")
    payments = relationship(
        "Payment", back_populates="order", cascade="all, delete-orphan", order_by="Payment.created_at"
    )


class Payment(Base):
    __tablename__ = "payments"
    id = Column(String(32), primary_key=True, default=new_id)
    order_id = Column(String(32), ForeignKey("orders.id"), nullable=False, index=True)
    method = Column(String, nullable=False, default="TRANSFER")
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING_REVIEW)
    receipt_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    order = relationship("Order", back_populates="payments")
