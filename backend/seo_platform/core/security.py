"""
Password hashing and session tokens
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import hashlib
import logging

import bcrypt
from jose import JWTError, jwt

from seo_platform.core.config import settings

logger = logging.getLogger(__name__)

# bcrypt rejects or truncates anything longer
MAX_PASSWORD_BYTES = 72


class TokenError(Exception):
    """Raised when a session token cannot be decoded"""
    pass


def hash_password(password: str) -> str:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    if not hashed or len(plain.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(user_id: str, email: str, expires_minutes: Optional[int] = None) -> str:
    """
    Create a signed session token for a user

    Args:
        user_id: User ID placed in the "sub" claim
        email: User email
        expires_minutes: Override for the configured lifetime

    Returns:
        Encoded JWT
    """
    lifetime = expires_minutes if expires_minutes is not None else settings.JWT_EXPIRE_MINUTES
    payload = {
        "sub": user_id,
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise TokenError(f"Invalid token: {e}")

    if not payload.get("sub"):
        raise TokenError("Invalid token: missing subject")
    return payload


def hash_api_key(api_key: str) -> str:
    """SHA-256 hex digest used to look up service account keys"""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()
