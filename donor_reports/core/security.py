"""
Password hashing and JWT access tokens.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Any
from jose import jwt, JWTError
from passlib.context import CryptContext
from .config import settings

logger = logging.getLogger(__name__)

# New hashes use pbkdf2_sha256; bcrypt hashes still verify and get upgraded on login
pwd_context = CryptContext(schemes=["pbkdf2_sha256", "bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"


def get_password_hash(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def verify_and_update_password(
    plain_password: str,
    hashed_password: str
) -> tuple[bool, Optional[str]]:
    """
    Verify a password against its hash.

    Returns (valid, new_hash); new_hash is set when the stored hash uses a
    deprecated scheme and should be replaced.
    """
    return pwd_context.verify_and_update(plain_password, hashed_password)


def create_access_token(
    subject: str,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """Create a signed access token for ``subject`` (a user id)."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(subject),
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
        "type": ACCESS_TOKEN_TYPE,
    }
    if additional_claims:
        claims.update(additional_claims)

    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    """Decode an access token; None when invalid, expired or of another type."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected token: {e}")
        return None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    return payload


def verify_token(token: str) -> Optional[str]:
    """Return the user id of a valid access token."""
    payload = decode_token(token)
    if payload is None:
        return None
    return payload.get("sub")
