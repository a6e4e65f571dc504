"""
SQLAlchemy ORM models for budget tracking

All relationships use lazy="raise" to prevent implicit queries from async code.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

CATEGORY_KINDS = ("expense", "income")


class Base(DeclarativeBase):
    pass


# ============================================================================
# Category
# ============================================================================


class Category(Base):
    """Spending or income category; color is a component palette name"""

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default="expense")
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="primary")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    transactions: Mapped[list["Transaction"]] = relationship(back_populates="category", lazy="raise")
    budgets: Mapped[list["Budget"]] = relationship(back_populates="category", lazy="raise")

    __table_args__ = (
        CheckConstraint("kind IN ('expense', 'income')", name="category_kind_valid"),
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, kind={self.kind})>"


# ============================================================================
# Transaction
# ============================================================================


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    occurred_on: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    category: Mapped[Category] = relationship(back_populates="transactions", lazy="raise")

    __table_args__ = (
        CheckConstraint("amount > 0", name="transaction_amount_positive"),
        Index("idx_transactions_occurred_on", "occurred_on"),
        Index("idx_transactions_category_id", "category_id"),
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, amount={self.amount}, occurred_on={self.occurred_on})>"


# ============================================================================
# Budget (monthly limit per category)
# ============================================================================


class Budget(Base):
    __tablename__ = "budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    # First day of the month
    month: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    category: Mapped[Category] = relationship(back_populates="budgets", lazy="raise")

    __table_args__ = (
        UniqueConstraint("category_id", "month", name="unique_budget_month"),
        CheckConstraint("amount >= 0", name="budget_amount_non_negative"),
        Index("idx_budgets_month", "month"),
    )

    def __repr__(self) -> str:
        return f"<Budget(category_id={self.category_id}, month={self.month}, amount={self.amount})>"
