# main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from account import router as account_router
from admin import router as admin_router
from auth import router as auth_router
from config import get_settings
from courses import router as courses_router
from db import Base, SessionLocal, engine
from errors import install_exception_handlers
from logging_config import configure_logging
from orders import router as orders_router
from seed import seed_demo_data

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    # --- База ---
    Base.metadata.create_all(bind=engine)
    if settings.seed_on_startup:
        db = SessionLocal()
        try:
            seed_demo_data(db)
        finally:
            db.close()
    logger.info("Application started")
    yield


# --- Создаём приложение ---
app = FastAPI(title="Course sales API", lifespan=lifespan)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# --- Чеки (локальное хранилище) ---
if settings.storage_backend == "local":
    upload_root = Path(settings.upload_dir)
    upload_root.mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=str(upload_root)), name="uploads")

# --- Роуты ---
app.include_router(auth_router)
app.include_router(account_router)
app.include_router(courses_router)
app.include_router(orders_router)
app.include_router(admin_router)


@app.get("/health")
def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port)
