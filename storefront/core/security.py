# storefront/core/security.py
# Password hashing, signed session tokens and the session cookie.
import logging
import secrets
from datetime import datetime, timedelta, timezone

from fastapi import Response
from jose import jwt, JWTError
from passlib.context import CryptContext

from storefront.core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def get_password_hash(password: str) -> str:
    """Salted bcrypt hash for storage."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Completes the bcrypt comparison and returns a plain bool."""
    return bool(pwd_context.verify(plain_password, hashed_password))


def create_session_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Signed JWT with sub = user id."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.SESSION_MAX_AGE_DAYS)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": str(user_id), "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_session_token(token: str | None) -> int | None:
    """
    Recovers the user id from a session token.

    Absent, tampered, expired or malformed tokens yield None: the caller is
    treated as anonymous rather than rejected.
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.info(f"Ignoring invalid session token: {e}")
        return None
    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None


def set_session_cookie(response: Response, user_id: int) -> str:
    token = create_session_token(user_id)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return token


def clear_session_cookie(response: Response) -> None:
    # Stateless: the token itself stays valid until it expires.
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )


def generate_reset_token() -> str:
    """20 random bytes, hex encoded."""
    return secrets.token_hex(20)
