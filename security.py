# security.py
"""Password hashing, signed tokens and the auth dependencies for routes."""
import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from passlib.exc import PasswordSizeError
from pydantic import BaseModel

from config import get_settings
from errors import ForbiddenError, UnauthorizedError
from models import Role, User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer = HTTPBearer(auto_error=False)


class TokenClaims(BaseModel):
    sub: str
    role: Role
    email: str


def hash_password(p: str) -> str:
    return pwd_context.hash(p)


def verify_password(p: str, hp: str | None) -> bool:
    if not hp:
        return False
    try:
        return pwd_context.verify(p, hp)
    except PasswordSizeError:
        return False


def create_access_token(user: User, expires_minutes: int | None = None) -> str:
    settings = get_settings()
    minutes = expires_minutes if expires_minutes is not None else settings.token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    role = user.role.value if isinstance(user.role, Role) else user.role
    payload = {"sub": user.id, "role": role, "email": user.email, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> TokenClaims:
    """Verify signature and expiry; any failure is a 401."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return TokenClaims(sub=payload["sub"], role=payload["role"], email=payload["email"])
    except (JWTError, KeyError, ValueError) as e:
        logger.warning("Token rejected: %s", e)
        raise UnauthorizedError() from e


def get_optional_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> TokenClaims | None:
    # гостевая покупка: битый токен = аноним
    if credentials is None:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except UnauthorizedError:
        return None


def get_current_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> TokenClaims:
    if credentials is None:
        raise UnauthorizedError()
    return decode_access_token(credentials.credentials)


def require_role(role: Role):
    """Build a dependency that lets through only tokens carrying ``role``."""

    def checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role != role:
            logger.warning("User %s with role %s denied %s access", claims.sub, claims.role.value, role.value)
            raise ForbiddenError()
        return claims

    return checker


require_admin = require_role(Role.ADMIN)
