# payments.py
"""Payment reconciliation for uploaded receipts.

An order holds at most one payment waiting for review. A new receipt for the
same order replaces the previous one on that row instead of adding a second.
"""
import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from models import Course, Order, Payment, PaymentStatus, utcnow

logger = logging.getLogger(__name__)

DEFAULT_METHOD = "TRANSFER"
# методы, которые рассчитываются в долларах
USD_METHODS = frozenset({"USDT", "SKRILL", "AIRTM", "PREX", "TIPFUNDER"})


@dataclass(frozen=True)
class Pricing:
    method: str
    amount: int
    currency: str


def normalize_method(method: str | None) -> str | None:
    if method is None:
        return None
    method = method.strip().upper()
    return method or None


def resolve_pricing(course: Course, method: str | None) -> Pricing:
    """Amount and currency a payment made with ``method`` must carry."""
    method = normalize_method(method) or DEFAULT_METHOD
    if method in USD_METHODS and course.price_usd is not None:
        return Pricing(method=method, amount=course.price_usd, currency="USD")
    return Pricing(method=method, amount=course.price, currency=course.currency)


def pending_payment(order: Order) -> Payment | None:
    for payment in order.payments:
        if payment.status == PaymentStatus.PENDING_REVIEW:
            return payment
    return None


def record_receipt(db: Session, order: Order, receipt_url: str) -> Payment:
    """Attach ``receipt_url`` to the order's pending payment, creating it if needed."""
    pricing = resolve_pricing(order.course, order.payment_method)
    payment = pending_payment(order)
    if payment is not None:
        payment.method = pricing.method
        payment.amount = pricing.amount
        payment.currency = pricing.currency
        payment.receipt_url = receipt_url
        payment.updated_at = utcnow()
        logger.info("Updated pending payment %s for order %s", payment.id, order.id)
    else:
        payment = Payment(
            order_id=order.id,
            method=pricing.method,
            amount=pricing.amount,
            currency=pricing.currency,
            status=PaymentStatus.PENDING_REVIEW,
            receipt_url=receipt_url,
        )
        order.payments.append(payment)
        logger.info("Created payment for order %s (%s %s)", order.id, pricing.amount, pricing.currency)
    db.commit()
    db.refresh(payment)
    return payment
