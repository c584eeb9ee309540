# schemas.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PositiveInt
from pydantic.alias_generators import to_camel

from models import OrderStatus, PaymentStatus, Role

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class MessageResponse(CamelModel):
    message: str


# === AUTH ===
class RegisterRequest(CamelModel):
    name: str = Field(min_length=2)
    lastname: str = Field(min_length=2)
    age: PositiveInt | None = None
    telegram: str | None = None
    programs: list[str] = Field(alias="master")
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class ForgotPasswordRequest(CamelModel):
    email: EmailStr


class ResetPasswordRequest(CamelModel):
    token: str = Field(min_length=1)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class TokenResponse(CamelModel):
    token: str


class MeResponse(CamelModel):
    id: str
    email: str
    name: str
    role: Role


class UserSummary(CamelModel):
    id: str
    email: str
    name: str
    lastname: str | None = None


# === COURSES ===
class CourseOut(CamelModel):
    id: str
    slug: str
    title: str
    short_desc: str | None = None
    price: int
    price_usd: int | None = None
    currency: str
    is_active: bool
    created_at: datetime


# === ORDERS ===
class OrderCreate(CamelModel):
    buyer_name: str = Field(min_length=2)
    buyer_email: EmailStr
    course_slug: str = Field(min_length=1)
    method: str | None = None


class OrderCreated(CamelModel):
    id: str
    status: OrderStatus


class PaymentOut(CamelModel):
    id: str
    order_id: str
    method: str
    amount: int
    currency: str
    status: PaymentStatus
    receipt_url: str | None = None
    created_at: datetime
    updated_at: datetime


class OrderOut(CamelModel):
    id: str
    user_id: str | None = None
    buyer_name: str
    buyer_email: str
    course_id: str
    status: OrderStatus
    source: str
    payment_method: str | None = None
    notes: str | None = None
    created_at: datetime
    course: CourseOut
    payments: list[PaymentOut] = []


class AdminOrderOut(OrderOut):
    user: UserSummary | None = None


class StatusUpdate(CamelModel):
    status: OrderStatus


class ReceiptUploaded(CamelModel):
    message: str
    url: str


# === ACCOUNT / CRM ===
class AccountStats(CamelModel):
    total_purchases: int
    pending: int
    active_courses: int


class StudentRow(CamelModel):
    id: str
    name: str
    lastname: str | None = None
    email: str
    telegram: str | None = None
    created_at: datetime
    purchased_courses: list[str]
    total_spent: int
    spent_by_currency: dict[str, int]


class RevenueRow(CamelModel):
    id: str
    created_at: datetime
    student_name: str
    student_email: str
    course_title: str
    amount: int
    currency: str
