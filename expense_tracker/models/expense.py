import uuid
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import event
from sqlmodel import SQLModel, Field

from ..core.tax import calculate_total


EntryType = Literal["income", "expense"]


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True
    )

    description: str = Field(max_length=255)
    amount: float
    # "income" | "expense"
    type: str = Field(max_length=10)
    tax_type: str = Field(default="flat", max_length=10)
    tax_amount: float = Field(default=0)
    # Derived from amount/tax_type/tax_amount on every flush
    total_amount: float = Field(default=0)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@event.listens_for(Expense, "before_insert")
@event.listens_for(Expense, "before_update")
def _sync_total_amount(mapper, connection, target: Expense) -> None:
    target.total_amount = calculate_total(target.amount, target.tax_type, target.tax_amount)
