import hashlib
import hmac
import logging
import os
from typing import Optional
import uuid

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session
from jose.exceptions import ExpiredSignatureError, JWTError

from ..database import get_session
from ..models.user import User
from .errors import AuthError, ForbiddenError
from .jwt import decode_access_token


logger = logging.getLogger(__name__)

ALGORITHM = "pbkdf2_sha256"
ITERATIONS = 100_000
SALT_BYTES = 16


def _pbkdf2_hash(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, ITERATIONS)


def hash_password(password: str) -> str:
    salt = os.urandom(SALT_BYTES)
    digest = _pbkdf2_hash(password, salt)
    return f"{ALGORITHM}${salt.hex()}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algorithm, salt_hex, hash_hex = stored.strip().split("$")
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    if algorithm != ALGORITHM:
        return False
    return hmac.compare_digest(_pbkdf2_hash(password, salt), expected)


# auto_error=False so a missing header goes through AuthError like every other auth failure
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
) -> User:
    if not token:
        raise AuthError("No token, authorization denied")

    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        logger.warning("Rejected expired token")
        raise AuthError("Token expired")
    except JWTError:
        logger.warning("Rejected invalid token")
        raise AuthError("Token is not valid")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthError("Token is not valid")

    user = session.get(User, user_id)
    if user is None:
        raise AuthError("User not found")
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning("User %s denied access to an admin route", current_user.id)
        raise ForbiddenError("Access denied. Admin only.")
    return current_user
