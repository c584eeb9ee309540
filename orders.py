# orders.py
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session, joinedload, selectinload

from config import get_settings
from db import get_db
from errors import BadRequestError, NotFoundError, PayloadTooLargeError
from models import Course, Order, OrderStatus
from payments import normalize_method, record_receipt
from schemas import AdminOrderOut, OrderCreate, OrderCreated, OrderOut, ReceiptUploaded, StatusUpdate
from security import TokenClaims, get_current_claims, get_optional_claims, require_admin
from storage import ReceiptStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


def load_order(db: Session, order_id: str, with_user: bool = False) -> Order | None:
    options = [joinedload(Order.course), selectinload(Order.payments)]
    if with_user:
        options.append(joinedload(Order.user))
    return db.query(Order).options(*options).filter(Order.id == order_id).first()


# === СОЗДАТЬ ЗАКАЗ ===
@router.post("", response_model=OrderCreated)
def create_order(
    body: OrderCreate,
    claims: TokenClaims | None = Depends(get_optional_claims),
    db: Session = Depends(get_db),
):
    course = db.query(Course).filter(Course.slug == body.course_slug).first()
    if not course or not course.is_active:
        raise BadRequestError("Course not found or inactive")

    method = normalize_method(body.method)
    order = Order(
        user_id=claims.sub if claims else None,
        buyer_name=body.buyer_name,
        buyer_email=body.buyer_email,
        course_id=course.id,
        status=OrderStatus.PENDING,
        source="SITE",
        payment_method=method,
        notes=f"Selected method: {method}" if method else None,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("Order %s created for course %s (user=%s, method=%s)", order.id, course.slug, order.user_id, method)
    return order


# === МОИ ПОКУПКИ ===
@router.get("/me", response_model=list[OrderOut])
def my_orders(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    return (
        db.query(Order)
        .options(joinedload(Order.course), selectinload(Order.payments))
        .filter(Order.user_id == claims.sub)
        .order_by(Order.created_at.desc())
        .all()
    )


# === ЗАГРУЗКА ЧЕКА ===
@router.post("/{order_id}/receipt", response_model=ReceiptUploaded)
def upload_receipt(
    order_id: str,
    file: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    storage: ReceiptStorage = Depends(get_storage),
):
    if file is None:
        raise BadRequestError("No file was sent")

    limit = get_settings().max_upload_bytes
    data = file.file.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLargeError(f"File too large. Maximum size: {limit // (1024 * 1024)}MB")

    stored = storage.save(data, file.content_type, file.filename)
    logger.info("Receipt for order %s stored at %s", order_id, stored.key)

    # файл уже в хранилище: при ошибке БД пытаемся его удалить
    try:
        order = load_order(db, order_id)
        if not order:
            raise NotFoundError("Order not found")
        record_receipt(db, order, stored.url)
    except Exception:
        db.rollback()
        try:
            storage.delete(stored.key)
            logger.info("Removed orphan receipt %s", stored.key)
        except Exception:
            logger.exception("Could not remove orphan receipt %s", stored.key)
        raise

    return {"message": "Receipt uploaded successfully", "url": stored.url}


# === АДМИН: СПИСОК ===
@router.get("/admin", response_model=list[AdminOrderOut])
def admin_orders(_: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
    return (
        db.query(Order)
        .options(joinedload(Order.course), joinedload(Order.user), selectinload(Order.payments))
        .order_by(Order.created_at.desc())
        .all()
    )


# === АДМИН: СТАТУС ===
@router.put("/{order_id}/status", response_model=AdminOrderOut)
def update_status(
    order_id: str,
    body: StatusUpdate,
    claims: TokenClaims = Depends(require_admin),
    db: Session = Depends(get_db),
):
    order = load_order(db, order_id, with_user=True)
    if not order:
        raise NotFoundError("Order not found")

    previous = order.status
    order.status = body.status
    db.commit()
    db.refresh(order)
    logger.info("Order %s status %s -> %s by admin %s", order.id, previous.value, order.status.value, claims.sub)
    return order
