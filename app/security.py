"""
Password hashing (bcrypt through passlib) and signed access tokens (JWT through python-jose).
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings
from app.errors import AuthError

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Constant-time check of ``password`` against a stored bcrypt hash."""
    try:
        return pwd_context.verify(password, hashed)
    except ValueError:
        # stored value is not a recognizable hash
        return False


def create_access_token(
    user_id: int,
    username: str,
    is_admin: bool,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Sign a token carrying the user's id, username and admin flag.

    Args:
        user_id: Primary key of the user
        username: Login name
        is_admin: Role flag copied into the ``isAdmin`` claim
        expires_delta: Lifetime, defaults to ACCESS_TOKEN_EXPIRE_MINUTES

    Returns:
        Encoded JWT string
    """
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {
        "id": user_id,
        "username": username,
        "isAdmin": bool(is_admin),
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry; raise ``AuthError`` when either fails."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise AuthError("Neispravan token.")
    if payload.get("id") is None or not payload.get("username"):
        raise AuthError("Neispravan token.")
    return payload
