import logging
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import ConfigDict, EmailStr, field_validator
from sqlmodel import Session, select

from ..core.errors import AuthError, ConflictError, ValidationError
from ..core.jwt import create_access_token
from ..core.security import get_current_user, hash_password, verify_password
from ..database import get_session
from ..models.user import ROLES, User, normalize_email
from ..schemas import APIModel, AuthPayload, Envelope, UserRead


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
)


class CredentialsIn(APIModel):
    """Passwords are hashed and compared exactly as sent; only the other fields are trimmed."""

    model_config = ConfigDict(str_strip_whitespace=False)

    @field_validator("name", "email", "role", mode="before", check_fields=False)
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


# Fields are optional so missing ones produce the friendly message below
class RegisterIn(CredentialsIn):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[str] = None


class LoginIn(CredentialsIn):
    email: Optional[str] = None
    password: Optional[str] = None


def _issue(user: User) -> AuthPayload:
    token = create_access_token({"sub": str(user.id)})
    return AuthPayload(token=token, user=UserRead.model_validate(user))


@router.post(
    "/register",
    response_model=Envelope[AuthPayload],
    status_code=status.HTTP_201_CREATED,
)
def register_user(
    payload: RegisterIn,
    session: Session = Depends(get_session),
):
    if not payload.name or not payload.email or not payload.password:
        raise ValidationError("Please provide name, email, and password")

    email_norm = normalize_email(payload.email)
    existing = session.exec(select(User).where(User.email == email_norm)).first()
    if existing is not None:
        raise ConflictError("User already exists")

    user = User(
        name=payload.name,
        email=email_norm,
        hashed_password=hash_password(payload.password),
    )
    # Unrecognised roles are ignored rather than rejected
    if payload.role in ROLES:
        user.role = payload.role

    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("User created: %s", user.email)

    return Envelope(message="User created successfully", data=_issue(user))


@router.post(
    "/login",
    response_model=Envelope[AuthPayload],
    status_code=status.HTTP_200_OK,
)
def login(payload: LoginIn, session: Session = Depends(get_session)):
    if not payload.email or not payload.password:
        raise ValidationError("Please provide email and password")

    email_norm = normalize_email(payload.email)
    user = session.exec(select(User).where(User.email == email_norm)).first()
    # Same message for unknown email and wrong password
    if user is None or not verify_password(payload.password, user.hashed_password):
        logger.warning("Failed login for %s", email_norm)
        raise AuthError("Invalid email or password")

    logger.info("Login successful for %s", user.email)
    return Envelope(message="Login successful", data=_issue(user))


@router.get(
    "/me",
    response_model=Envelope[UserRead],
    status_code=status.HTTP_200_OK,
)
def me(current_user: User = Depends(get_current_user)):
    return Envelope(data=UserRead.model_validate(current_user))
