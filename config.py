# config.py
import os
from functools import lru_cache

from dotenv import load_dotenv

# --- Загружаем .env ---
load_dotenv()


def _as_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    def __init__(self):
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./courses.db")
        self.port = int(os.getenv("PORT", "3000"))
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

        # CORS
        self.frontend_url = os.getenv("FRONTEND_URL", "http://localhost:5173")
        self.cors_origins = [o for o in (self.frontend_url, "http://localhost:5173") if o]

        # Tokens
        self.jwt_secret = os.getenv("JWT_SECRET", "dev")
        self.jwt_algorithm = os.getenv("JWT_ALGORITHM", "HS256")
        self.token_expire_minutes = int(os.getenv("TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))
        self.reset_token_ttl_minutes = int(os.getenv("RESET_TOKEN_TTL_MINUTES", "60"))

        # Receipts
        self.max_upload_bytes = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))
        self.storage_backend = os.getenv("STORAGE_BACKEND", "local")
        self.upload_dir = os.getenv("UPLOAD_DIR", "uploads")
        self.upload_folder = os.getenv("UPLOAD_FOLDER", "blue-team-comprobantes")
        self.public_base_url = os.getenv("PUBLIC_BASE_URL", f"http://localhost:{self.port}")
        self.s3_bucket = os.getenv("S3_BUCKET", "")
        self.s3_region = os.getenv("S3_REGION", "us-east-1")
        self.s3_public_url = os.getenv("S3_PUBLIC_URL", "")

        # Mail
        self.mail_enabled = _as_bool(os.getenv("MAIL_ENABLED"))
        self.mail_from = os.getenv("MAIL_FROM", "no-reply@localhost")
        self.smtp_host = os.getenv("SMTP_HOST", "localhost")
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_username = os.getenv("SMTP_USERNAME", "")
        self.smtp_password = os.getenv("SMTP_PASSWORD", "")

        # Seed
        self.seed_on_startup = _as_bool(os.getenv("SEED_ON_STARTUP"))
        self.admin_email = os.getenv("ADMIN_EMAIL", "admin@example.com")
        self.admin_password = os.getenv("ADMIN_PASSWORD", "")


@lru_cache
def get_settings() -> Settings:
    return Settings()
