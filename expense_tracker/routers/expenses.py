import logging
import math
import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func
from sqlmodel import Session, select

from ..core.errors import NotFoundError
from ..core.security import get_current_user
from ..core.tax import calculate_total
from ..database import get_session
from ..models.expense import Expense
from ..models.user import User
from ..schemas import (
    DashboardSummary,
    Envelope,
    ExpenseIn,
    ExpensePage,
    ExpenseRead,
    TotalPreview,
    TotalPreviewIn,
)


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/expenses",
    tags=["expenses"],
)


def apply_expense_fields(expense: Expense, expense_in: ExpenseIn) -> Expense:
    """Replace every mutable field of ``expense``; total_amount is recomputed on flush."""
    expense.description = expense_in.description
    expense.amount = expense_in.amount
    expense.type = expense_in.type
    expense.tax_type = expense_in.tax_type
    expense.tax_amount = expense_in.tax_amount
    expense.updated_at = datetime.now(timezone.utc)
    return expense


def _get_owned_expense(session: Session, expense_id: uuid.UUID, user: User) -> Expense:
    expense = session.exec(
        select(Expense).where(Expense.id == expense_id, Expense.user_id == user.id)
    ).first()
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.post(
    "",
    response_model=Envelope[ExpenseRead],
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    expense_in: ExpenseIn,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Create an entry owned by the authenticated user."""
    expense = apply_expense_fields(Expense(user_id=current_user.id), expense_in)

    session.add(expense)
    session.commit()
    session.refresh(expense)
    return Envelope(data=ExpenseRead.model_validate(expense))


@router.get(
    "",
    response_model=Envelope[ExpensePage],
)
def list_expenses(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1),
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    List the authenticated user's entries, newest first.

    - ``totalPages`` is ``ceil(totalExpenses / limit)``, so it is 0 when
      the user has no entries.
    """
    statement = select(Expense).where(Expense.user_id == current_user.id)
    statement = statement.order_by(Expense.created_at.desc())
    statement = statement.offset((page - 1) * limit).limit(limit)
    expenses = session.exec(statement).all()

    total = session.exec(
        select(func.count(Expense.id)).where(Expense.user_id == current_user.id)
    ).one()

    return Envelope(
        data=ExpensePage(
            expenses=[ExpenseRead.model_validate(e) for e in expenses],
            current_page=page,
            total_pages=math.ceil(total / limit),
            total_expenses=total,
        )
    )


@router.get(
    "/dashboard",
    response_model=Envelope[DashboardSummary],
)
def dashboard(
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    expenses = session.exec(select(Expense).where(Expense.user_id == current_user.id)).all()

    total_income = sum(e.total_amount for e in expenses if e.type == "income")
    total_expense = sum(e.total_amount for e in expenses if e.type == "expense")

    return Envelope(
        data=DashboardSummary(
            total_income=total_income,
            total_expense=total_expense,
            balance=total_income - total_expense,
            total_records=len(expenses),
        )
    )


@router.post(
    "/calculate-total",
    response_model=Envelope[TotalPreview],
)
def preview_total(
    preview_in: TotalPreviewIn,
    current_user: User = Depends(get_current_user),
):
    """Compute a total exactly as it would be stored, without persisting anything."""
    total = calculate_total(preview_in.amount, preview_in.tax_type, preview_in.tax_amount)
    return Envelope(data=TotalPreview(total_amount=total))


@router.get(
    "/{expense_id}",
    response_model=Envelope[ExpenseRead],
)
def get_expense(
    expense_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    expense = _get_owned_expense(session, expense_id, current_user)
    return Envelope(data=ExpenseRead.model_validate(expense))


@router.put(
    "/{expense_id}",
    response_model=Envelope[ExpenseRead],
)
def update_expense(
    expense_id: uuid.UUID,
    expense_in: ExpenseIn,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Replace all fields of one of the authenticated user's entries."""
    expense = apply_expense_fields(_get_owned_expense(session, expense_id, current_user), expense_in)

    session.add(expense)
    session.commit()
    session.refresh(expense)
    return Envelope(data=ExpenseRead.model_validate(expense))


@router.delete(
    "/{expense_id}",
    response_model=Envelope[None],
)
def delete_expense(
    expense_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    expense = _get_owned_expense(session, expense_id, current_user)

    session.delete(expense)
    session.commit()
    return Envelope(message="Expense deleted successfully")
