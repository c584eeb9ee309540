# auth.py
import logging
import secrets
from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config import get_settings
from db import get_db
from errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from mailer import send_password_reset
from models import Role, User, utcnow
from schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
)
from security import TokenClaims, create_access_token, get_current_claims, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

FORGOT_ACK = "If the email exists, you will receive the instructions."


# === РЕГИСТРАЦИЯ ===
@router.post("/register", response_model=TokenResponse)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    exists = db.query(User).filter(User.email == body.email).first()
    if exists:
        raise ConflictError("Email is already registered")

    user = User(
        name=body.name,
        lastname=body.lastname,
        email=body.email,
        password_hash=hash_password(body.password),
        role=Role.STUDENT,
        age=body.age,
        telegram=body.telegram,
        programs=body.programs,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Registered user %s", user.id)
    return {"token": create_access_token(user)}


# === ЛОГИН ===
@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()
    if not user or not verify_password(body.password, user.password_hash):
        logger.warning("Failed login for %s", body.email)
        raise UnauthorizedError("Invalid credentials")
    return {"token": create_access_token(user)}


# === ЗАБЫЛИ ПАРОЛЬ ===
@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email).first()
    if not user:
        return {"message": FORGOT_ACK}

    ttl = get_settings().reset_token_ttl_minutes
    user.reset_token = secrets.token_hex(32)
    user.reset_token_expiry = utcnow() + timedelta(minutes=ttl)
    db.commit()
    logger.info("Password reset requested for user %s", user.id)

    try:
        send_password_reset(user.email, user.name, user.reset_token)
    except Exception:
        # ответ не должен выдавать, существует ли email
        logger.exception("Could not send reset email to user %s", user.id)
    return {"message": FORGOT_ACK}


# === СБРОС ПАРОЛЯ ===
@router.post("/reset-password", response_model=MessageResponse)
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    user = (
        db.query(User)
        .filter(User.reset_token == body.token, User.reset_token_expiry > utcnow())
        .first()
    )
    if not user:
        raise BadRequestError("The link is invalid or has expired")

    user.password_hash = hash_password(body.new_password)
    user.reset_token = None
    user.reset_token_expiry = None
    db.commit()
    logger.info("Password reset for user %s", user.id)
    return {"message": "Password updated successfully"}


# === ТЕКУЩИЙ ПОЛЬЗОВАТЕЛЬ ===
@router.get("/me", response_model=MeResponse)
def me(claims: TokenClaims = Depends(get_current_claims), db: Session = Depends(get_db)):
    user = db.get(User, claims.sub)
    if not user:
        raise NotFoundError("User not found")
    return user
