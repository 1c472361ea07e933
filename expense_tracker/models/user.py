import uuid
from datetime import datetime, timezone
from typing import Literal

from sqlmodel import SQLModel, Field


Role = Literal["user", "admin"]

ROLES = ("user", "admin")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    name: str = Field(max_length=100)
    # Always stored through normalize_email
    email: str = Field(index=True, unique=True)
    hashed_password: str
    role: str = Field(default="user", max_length=10)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
