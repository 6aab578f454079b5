"""Mapper functions to convert between domain models and SQLAlchemy models."""

from finwise.domain import entities as domain
from finwise.database.models import (
    User as ORMUser,
    Expense as ORMExpense,
)


def user_to_domain(orm_user: ORMUser) -> domain.User:
    """Convert SQLAlchemy User model to domain User entity."""
    return domain.User(
        id=orm_user.id,
        email=orm_user.email,
        created_at=orm_user.created_at,
    )


def expense_to_domain(orm_expense: ORMExpense) -> domain.StoredTransaction:
    """Convert SQLAlchemy Expense model to domain StoredTransaction entity."""
    return domain.StoredTransaction(
        id=orm_expense.id,
        user_id=orm_expense.user_id,
        date=orm_expense.date,
        description=orm_expense.description,
        amount=orm_expense.amount,
        type=orm_expense.type,
        category=orm_expense.category,
        source=orm_expense.source,
        created_at=orm_expense.created_at,
    )

