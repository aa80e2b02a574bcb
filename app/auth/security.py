from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Sequence

import bcrypt
from jose import jwt

from app.core.config import settings

PASSWORD_ENCODING = "utf-8"


def hash_password(password: str) -> str:
    """bcrypt hash with a fresh salt, as stored in ``users.password_hash``."""
    return bcrypt.hashpw(password.encode(PASSWORD_ENCODING), bcrypt.gensalt()).decode(PASSWORD_ENCODING)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(PASSWORD_ENCODING), password_hash.encode(PASSWORD_ENCODING))
    except ValueError:
        # Malformed hash in the users table
        return False


def create_access_token(
    username: str,
    roles: Sequence[str],
    expires_minutes: Optional[int] = None,
) -> str:
    """Signed bearer token with ``sub`` (username), ``roles``, ``iat`` and ``exp`` claims."""
    if expires_minutes is None:
        expires_minutes = settings.access_token_expire_minutes
    issued_at = datetime.now(timezone.utc)
    claims = {
        "sub": username,
        "roles": list(roles),
        "iat": issued_at,
        "exp": issued_at + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Claims of a valid token. Raises ``jose.JWTError`` when the token is invalid or expired."""
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
