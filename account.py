# account.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from models import Order, OrderStatus
from schemas import AccountStats
from security import TokenClaims, get_current_claims

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/stats", response_model=AccountStats)
def account_stats(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    mine = db.query(Order).filter(Order.user_id == claims.sub)
    return AccountStats(
        total_purchases=mine.count(),
        pending=mine.filter(Order.status == OrderStatus.PENDING).count(),
        active_courses=mine.filter(Order.status == OrderStatus.PAID).count(),
    )
