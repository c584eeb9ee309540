# admin.py
"""CRM projections for administrators: students and revenue."""
from collections import defaultdict

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session, joinedload, selectinload

from db import get_db
from models import Order, OrderStatus, Role, User
from schemas import RevenueRow, StudentRow
from security import TokenClaims, require_admin

router = APIRouter(prefix="/admin", tags=["admin"])


def student_row(user: User) -> StudentRow:
    paid = [o for o in user.orders if o.status == OrderStatus.PAID]
    by_currency: dict[str, int] = defaultdict(int)
    for order in paid:
        for payment in order.payments:
            by_currency[payment.currency] += payment.amount
    return StudentRow(
        id=user.id,
        name=user.name,
        lastname=user.lastname,
        email=user.email,
        telegram=user.telegram,
        created_at=user.created_at,
        purchased_courses=[o.course.title for o in paid],
        # суммирует разные валюты, разбивка в spent_by_currency
        total_spent=sum(by_currency.values()),
        spent_by_currency=dict(by_currency),
    )


def revenue_row(order: Order) -> RevenueRow:
    payment = order.payments[0] if order.payments else None
    if order.user:
        name = " ".join(p for p in (order.user.name, order.user.lastname) if p)
        email = order.user.email
    else:
        name, email = order.buyer_name, order.buyer_email
    return RevenueRow(
        id=order.id,
        created_at=order.created_at,
        student_name=name,
        student_email=email,
        course_title=order.course.title,
        amount=payment.amount if payment else order.course.price,
        currency=payment.currency if payment else order.course.currency,
    )


@router.get("/students", response_model=list[StudentRow])
def students(_: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
    users = (
        db.query(User)
        .options(selectinload(User.orders).joinedload(Order.course), selectinload(User.orders).selectinload(Order.payments))
        .filter(User.role == Role.STUDENT)
        .order_by(User.created_at.desc())
        .all()
    )
    return [student_row(u) for u in users]


@router.get("/revenue", response_model=list[RevenueRow])
def revenue(_: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
    orders = (
        db.query(Order)
        .options(joinedload(Order.user), joinedload(Order.course), selectinload(Order.payments))
        .filter(Order.status == OrderStatus.PAID)
        .order_by(Order.created_at.desc())
        .all()
    )
    return [revenue_row(o) for o in orders]
