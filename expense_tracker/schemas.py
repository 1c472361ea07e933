import uuid
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .core.tax import TaxType
from .models.expense import EntryType


T = TypeVar("T")


class APIModel(BaseModel):
    """Base for request/response bodies: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


# ─────────────────────────────
#   USERS
# ─────────────────────────────

class UserRead(APIModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    created_at: datetime


class UserOwner(APIModel):
    id: uuid.UUID
    name: str
    email: str


class AuthPayload(APIModel):
    token: str
    user: UserRead


class UserList(APIModel):
    users: List[UserRead]


# ─────────────────────────────
#   EXPENSES
# ─────────────────────────────

class ExpenseIn(APIModel):
    description: str = Field(min_length=1, max_length=255)
    amount: float = Field(gt=0)
    type: EntryType
    tax_type: TaxType = "flat"
    tax_amount: float = Field(default=0, ge=0)


class TotalPreviewIn(APIModel):
    amount: float = Field(gt=0)
    tax_type: TaxType = "flat"
    tax_amount: float = Field(default=0, ge=0)


class TotalPreview(APIModel):
    total_amount: float


class ExpenseRead(APIModel):
    id: uuid.UUID
    user_id: uuid.UUID
    description: str
    amount: float
    type: str
    tax_type: str
    tax_amount: float
    total_amount: float
    created_at: datetime
    updated_at: datetime


class ExpenseWithOwner(ExpenseRead):
    user: Optional[UserOwner] = None


class ExpensePage(APIModel):
    expenses: List[ExpenseRead]
    current_page: int
    total_pages: int
    total_expenses: int


class ExpenseList(APIModel):
    expenses: List[ExpenseWithOwner]


class DashboardSummary(APIModel):
    total_income: float
    total_expense: float
    balance: float
    total_records: int
