# courses.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from models import Course
from schemas import CourseOut

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=list[CourseOut])
def courses_index(db: Session = Depends(get_db)):
    return db.query(Course).filter(Course.is_active.is_(True)).order_by(Course.created_at).all()
