# seed.py
import logging

from sqlalchemy.orm import Session

from config import get_settings
from db import Base, SessionLocal, engine
from models import Course, Role, User
from security import hash_password

logger = logging.getLogger(__name__)

DEMO_COURSES = [
    {
        "slug": "fansly-master",
        "title": "Fansly Master",
        "short_desc": "Internal algorithm and sales",
        "price": 85000,
        "currency": "ARS",
    },
    {
        "slug": "fetichista-master",
        "title": "Fetichista Master",
        "short_desc": "Niche + DM + catalog",
        "price": 120000,
        "currency": "ARS",
    },
]


def seed_demo_data(db: Session) -> None:
    """Create the admin account and the demo catalog if they are missing."""
    settings = get_settings()
    if settings.admin_password and not db.query(User).filter(User.email == settings.admin_email).first():
        db.add(
            User(
                email=settings.admin_email,
                password_hash=hash_password(settings.admin_password),
                name="Admin",
                role=Role.ADMIN,
            )
        )
        logger.info("Seeded admin %s", settings.admin_email)

    for data in DEMO_COURSES:
        if not db.query(Course).filter(Course.slug == data["slug"]).first():
            db.add(Course(**data))
            logger.info("Seeded course %s", data["slug"])
    db.commit()


if __name__ == "__main__":
    from logging_config import configure_logging

    configure_logging()
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_demo_data(db)
    finally:
        db.close()
