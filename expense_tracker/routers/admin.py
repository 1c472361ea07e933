import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import EmailStr
from sqlalchemy import delete, func
from sqlmodel import Session, select

from ..core.errors import NotFoundError, ValidationError
from ..core.security import require_admin
from ..database import get_session
from ..models.expense import Expense
from ..models.user import Role, User, normalize_email
from ..schemas import (
    APIModel,
    Envelope,
    ExpenseIn,
    ExpenseList,
    ExpenseRead,
    ExpenseWithOwner,
    UserList,
    UserOwner,
    UserRead,
)
from .expenses import apply_expense_fields


logger = logging.getLogger(__name__)

# Every route here is gated on the admin role
router = APIRouter(
    prefix="/api/expenses/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


class AdminUserUpdate(APIModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Optional[Role] = None


class AdminExpenseCreate(ExpenseIn):
    user_id: uuid.UUID


class AdminStats(APIModel):
    total_users: int
    total_expenses: int
    total_income: float
    recent_activity: List[ExpenseWithOwner]


def _with_owner(expense: Expense, owner: Optional[User]) -> ExpenseWithOwner:
    item = ExpenseWithOwner.model_validate(expense)
    if owner is not None:
        item.user = UserOwner.model_validate(owner)
    return item


def _expenses_with_owners(session: Session, limit: Optional[int] = None) -> List[ExpenseWithOwner]:
    statement = (
        select(Expense, User)
        .join(User, Expense.user_id == User.id, isouter=True)
        .order_by(Expense.created_at.desc())
    )
    if limit is not None:
        statement = statement.limit(limit)
    return [_with_owner(expense, owner) for expense, owner in session.exec(statement).all()]


def _get_user(session: Session, user_id: uuid.UUID) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _get_expense(session: Session, expense_id: uuid.UUID) -> Expense:
    expense = session.get(Expense, expense_id)
    if expense is None:
        raise NotFoundError("Expense not found")
    return expense


# ─────────────────────────────
#   USERS
# ─────────────────────────────

@router.get(
    "/users",
    response_model=Envelope[UserList],
)
def list_users(session: Session = Depends(get_session)):
    users = session.exec(select(User).order_by(User.created_at.desc())).all()
    return Envelope(data=UserList(users=[UserRead.model_validate(u) for u in users]))


@router.put(
    "/users/{user_id}",
    response_model=Envelope[UserRead],
)
def update_user(
    user_id: uuid.UUID,
    payload: AdminUserUpdate,
    session: Session = Depends(get_session),
):
    """Update name, email and/or role; omitted fields are left unchanged."""
    email_norm = normalize_email(payload.email) if payload.email else None
    if email_norm is not None:
        taken = session.exec(
            select(User).where(User.email == email_norm, User.id != user_id)
        ).first()
        if taken is not None:
            raise ValidationError("Email already exists")

    user = _get_user(session, user_id)

    if payload.name:
        user.name = payload.name
    if email_norm is not None:
        user.email = email_norm
    if payload.role is not None:
        user.role = payload.role
    user.updated_at = datetime.now(timezone.utc)

    session.add(user)
    session.commit()
    session.refresh(user)
    return Envelope(data=UserRead.model_validate(user))


@router.delete(
    "/users/{user_id}",
    response_model=Envelope[None],
)
def delete_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """Delete a user together with all of their entries, in one transaction."""
    user = _get_user(session, user_id)

    result = session.exec(delete(Expense).where(Expense.user_id == user.id))
    session.delete(user)
    session.commit()
    logger.info("Deleted user %s and %d expenses", user_id, result.rowcount)

    return Envelope(message="User and their expenses deleted successfully")


# ─────────────────────────────
#   EXPENSES
# ─────────────────────────────

@router.get(
    "/all-expenses",
    response_model=Envelope[ExpenseList],
)
def list_all_expenses(session: Session = Depends(get_session)):
    return Envelope(data=ExpenseList(expenses=_expenses_with_owners(session)))


@router.get(
    "/stats",
    response_model=Envelope[AdminStats],
)
def stats(session: Session = Depends(get_session)):
    total_users = session.exec(select(func.count(User.id))).one()
    total_expenses = session.exec(select(func.count(Expense.id))).one()
    total_income = session.exec(
        select(func.coalesce(func.sum(Expense.total_amount), 0)).where(Expense.type == "income")
    ).one()

    return Envelope(
        data=AdminStats(
            total_users=total_users,
            total_expenses=total_expenses,
            total_income=total_income,
            recent_activity=_expenses_with_owners(session, limit=5),
        )
    )


@router.post(
    "/create",
    response_model=Envelope[ExpenseWithOwner],
    status_code=status.HTTP_201_CREATED,
)
def create_expense_for_user(
    payload: AdminExpenseCreate,
    session: Session = Depends(get_session),
):
    owner = _get_user(session, payload.user_id)
    expense = apply_expense_fields(Expense(user_id=owner.id), payload)

    session.add(expense)
    session.commit()
    session.refresh(expense)
    return Envelope(data=_with_owner(expense, owner))


@router.put(
    "/expense/{expense_id}",
    response_model=Envelope[ExpenseRead],
)
def update_any_expense(
    expense_id: uuid.UUID,
    expense_in: ExpenseIn,
    session: Session = Depends(get_session),
):
    expense = apply_expense_fields(_get_expense(session, expense_id), expense_in)

    session.add(expense)
    session.commit()
    session.refresh(expense)
    return Envelope(data=ExpenseRead.model_validate(expense))


@router.delete(
    "/expense/{expense_id}",
    response_model=Envelope[None],
)
def delete_any_expense(
    expense_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    expense = _get_expense(session, expense_id)

    session.delete(expense)
    session.commit()
    return Envelope(message="Expense deleted successfully")
