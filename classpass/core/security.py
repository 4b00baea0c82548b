"""Security and Authentication Utilities"""

from datetime import timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from classpass.config import settings
from classpass.utils.time import get_utc_now

# Bcrypt limit; longer passwords must be truncated
_BCRYPT_MAX_BYTES = 72

TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"
PURPOSE_PASSWORD_RESET = "password_reset"


def _truncate_password_for_bcrypt(password: str) -> bytes:
    """Truncate password to bcrypt's 72-byte limit, respecting UTF-8 boundaries."""
    encoded = password.encode("utf-8")
    if len(encoded) <= _BCRYPT_MAX_BYTES:
        return encoded
    truncated = encoded[:_BCRYPT_MAX_BYTES]
    while truncated:
        try:
            truncated.decode("utf-8")
            return truncated
        except UnicodeDecodeError:
            truncated = truncated[:-1]
    return b""


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt.

    Returns:
        Hashed password (ASCII string for DB storage)
    """
    hashed = bcrypt.hashpw(_truncate_password_for_bcrypt(password), bcrypt.gensalt())
    return hashed.decode("ascii")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its bcrypt hash."""
    hash_bytes = hashed_password.encode("ascii") if isinstance(hashed_password, str) else hashed_password
    try:
        return bcrypt.checkpw(_truncate_password_for_bcrypt(plain_password), hash_bytes)
    except ValueError:
        # Malformed stored hash
        return False


def _encode(claims: dict, expires_delta: timedelta) -> str:
    to_encode = claims.copy()
    to_encode["exp"] = get_utc_now() + expires_delta
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode (sub, role, school_id)
        expires_delta: Optional custom expiration time
    """
    expires = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode({**data, "type": TOKEN_TYPE_ACCESS}, expires)


def create_refresh_token(data: dict) -> str:
    """Create a JWT refresh token."""
    expires = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode({**data, "type": TOKEN_TYPE_REFRESH}, expires)


def decode_token(token: str) -> Optional[dict]:
    """
    Decode and validate a JWT token.

    Returns:
        Decoded token payload or None if invalid or expired
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def generate_password_reset_token(user_id: str) -> str:
    """Password reset token for a user, valid for PASSWORD_RESET_EXPIRE_MINUTES."""
    return _encode(
        {"sub": user_id, "purpose": PURPOSE_PASSWORD_RESET},
        timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES),
    )


def verify_password_reset_token(token: str) -> Optional[str]:
    """
    Verify a password reset token.

    Returns:
        user_id if valid, None otherwise
    """
    payload = decode_token(token)
    if not payload or payload.get("purpose") != PURPOSE_PASSWORD_RESET:
        return None
    return payload.get("sub")
