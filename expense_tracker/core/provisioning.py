import logging
from datetime import datetime, timezone
from typing import Tuple

from sqlmodel import Session, select

from ..models.user import User, normalize_email
from .security import hash_password


logger = logging.getLogger(__name__)


def ensure_admin(session: Session, name: str, email: str, password: str) -> Tuple[User, bool]:
    """Make sure an admin account exists for ``email``.

    Safe to run on every deploy: an existing account is promoted to admin
    if needed but its name and password are never touched. Returns the user
    and whether it was created.
    """
    if not name or not email or not password:
        raise ValueError("name, email and password are required")

    email_norm = normalize_email(email)
    user = session.exec(select(User).where(User.email == email_norm)).first()

    if user is not None:
        if not user.is_admin:
            user.role = "admin"
            user.updated_at = datetime.now(timezone.utc)
            session.add(user)
            session.commit()
            session.refresh(user)
            logger.info("Promoted existing user %s to admin", email_norm)
        return user, False

    user = User(
        name=name.strip(),
        email=email_norm,
        hashed_password=hash_password(password),
        role="admin",
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Admin user %s created", email_norm)
    return user, True
