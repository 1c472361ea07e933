from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import jwt

from ..config import settings


def create_access_token(data: Dict[str, Any]) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + timedelta(days=settings.access_token_expire_days)
    to_encode.update({"iat": int(now.timestamp()), "exp": int(expire.timestamp())})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token; raises ``jose.JWTError`` (or ``ExpiredSignatureError``)."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
