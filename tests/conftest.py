import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="receipts-")
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["MAIL_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["FRONTEND_URL"] = "https://front.test"

import pytest
from fastapi.testclient import TestClient

from db import Base, SessionLocal, engine
from errors import StorageError
from main import app
from models import Course, Role, User
from security import create_access_token, hash_password
from storage import StoredFile, get_storage


class MemoryStorage:
    def __init__(self):
        self.files = {}
        self.deleted = []
        self.fail = False

    def save(self, data, content_type, filename):
        if self.fail:
            raise StorageError()
        key = f"receipts/{len(self.files) + 1}-{filename}"
        self.files[key] = (data, content_type)
        return StoredFile(key=key, url=f"https://cdn.test/{key}")

    def delete(self, key):
        self.deleted.append(key)
        self.files.pop(key, None)


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def client(db, storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(email="student@example.com", password="secret123", role=Role.STUDENT, **kwargs):
        user = User(
            email=email,
            password_hash=hash_password(password),
            name=kwargs.pop("name", "Ana"),
            lastname=kwargs.pop("lastname", "Perez"),
            role=role,
            programs=kwargs.pop("programs", []),
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_course(db):
    def _make_course(slug="fansly-master", price=85000, currency="ARS", price_usd=None, is_active=True, **kwargs):
        course = Course(
            slug=slug,
            title=kwargs.pop("title", slug.replace("-", " ").title()),
            short_desc=kwargs.pop("short_desc", "Demo course"),
            price=price,
            price_usd=price_usd,
            currency=currency,
            is_active=is_active,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
        return course

    return _make_course


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role=Role.ADMIN, name="Admin")
