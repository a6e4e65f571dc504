"""
Budget Service
- Categories, transactions and monthly budgets (ORM for writes, raw SQL for aggregates)
- Every write broadcasts on the month's topic so live pages reload
- Sends an alert email when a transaction pushes a category over budget
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..mailer import Email, Mailer, get_mailer
from ..models.budget_orm import CATEGORY_KINDS, Budget, Category, Transaction
from ..pubsub import PubSub, get_pubsub
from ..utils.logger import get_logger
from ..utils.money import format_amount, parse_amount
from ..utils.periods import month_key, month_label, month_range, month_start, next_month
from .base_service import BaseService
from .reports import monthly_trend, summarize_month

logger = get_logger(__name__)

CATEGORY_COLORS = (
    "white", "primary", "secondary", "dark", "success",
    "warning", "danger", "info", "light", "misc", "dawn",
)


class BudgetValidationError(ValueError):
    """Invalid user input for a budget operation"""


def budget_topic(month: Union[date, datetime]) -> str:
    return f"budget:{month_key(month)}"


def _parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise BudgetValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD") from None


def _amount(value, allow_zero: bool) -> Decimal:
    try:
        amount = parse_amount(value)
    except ValueError as e:
        raise BudgetValidationError(str(e)) from None
    if amount < 0 or (amount == 0 and not allow_zero):
        raise BudgetValidationError(
            "Amount must be zero or more" if allow_zero else "Amount must be greater than zero"
        )
    return amount


def _category_dict(category: Category) -> Dict[str, Any]:
    return {"id": category.id, "name": category.name, "kind": category.kind, "color": category.color}


class BudgetService(BaseService):
    """Budget tracking operations on one session"""

    def __init__(
        self,
        session: AsyncSession,
        pubsub: Optional[PubSub] = None,
        mailer: Optional[Mailer] = None,
        settings: Optional[Settings] = None,
    ):
        super().__init__(session)
        self.pubsub = pubsub or get_pubsub()
        self._mailer = mailer
        self.settings = settings or get_settings()

    @property
    def mailer(self) -> Mailer:
        if self._mailer is None:
            self._mailer = get_mailer()
        return self._mailer

    def _broadcast(self, month: date, event: str, payload: Dict[str, Any]) -> None:
        self.pubsub.broadcast(budget_topic(month), (event, payload))

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    async def list_categories(self) -> List[Dict[str, Any]]:
        result = await self.session.execute(select(Category).order_by(Category.kind, Category.name))
        return [_category_dict(c) for c in result.scalars().all()]

    async def create_category(self, name: str, kind: str = "expense", color: str = "primary") -> Dict[str, Any]:
        name = (name or "").strip()
        if not name:
            raise BudgetValidationError("Category name is required")
        if kind not in CATEGORY_KINDS:
            raise BudgetValidationError(f"Unknown category kind {kind!r}")
        if color not in CATEGORY_COLORS:
            raise BudgetValidationError(f"Unknown color {color!r}")

        existing = await self.session.execute(select(Category.id).where(Category.name == name))
        if existing.scalar() is not None:
            raise BudgetValidationError(f"Category {name!r} already exists")

        category = Category(name=name, kind=kind, color=color)
        self.session.add(category)
        await self.session.commit()
        logger.info(f"Created category {name} ({kind})")
        return _category_dict(category)

    async def _get_category(self, category_id) -> Category:
        try:
            category_id = int(category_id)
        except (TypeError, ValueError):
            raise BudgetValidationError(f"Invalid category {category_id!r}") from None
        category = await self.session.get(Category, category_id)
        if category is None:
            raise BudgetValidationError(f"Category {category_id} does not exist")
        return category

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    async def list_transactions(self, month: date) -> List[Dict[str, Any]]:
        start = month_start(month)
        query = (
            select(Transaction, Category)
            .join(Category, Transaction.category_id == Category.id)
            .where(Transaction.occurred_on >= start, Transaction.occurred_on < next_month(start))
            .order_by(Transaction.occurred_on.desc(), Transaction.id.desc())
        )
        result = await self.session.execute(query)
        return [
            {
                "id": t.id,
                "category_id": c.id,
                "category": c.name,
                "color": c.color,
                "kind": c.kind,
                "amount": float(t.amount),
                "occurred_on": t.occurred_on.isoformat(),
                "description": t.description or "",
            }
            for t, c in result.all()
        ]

    async def add_transaction(
        self,
        category_id,
        amount,
        occurred_on: Union[str, date],
        description: str = "",
    ) -> Dict[str, Any]:
        category = await self._get_category(category_id)
        value = _amount(amount, allow_zero=False)
        day = _parse_date(occurred_on)
        month = month_start(day)

        was_over = await self._is_over_budget(category, month)

        transaction = Transaction(
            category_id=category.id,
            amount=value,
            occurred_on=day,
            description=(description or "").strip() or None,
        )
        self.session.add(transaction)
        await self.session.commit()

        payload = {
            "id": transaction.id,
            "category_id": category.id,
            "amount": float(value),
            "occurred_on": day.isoformat(),
        }
        logger.info(f"Added transaction {transaction.id}: {category.name} {value} on {day}")
        self._broadcast(month, "transaction_created", payload)

        if not was_over and await self._is_over_budget(category, month):
            await self._send_over_budget_alert(category, month)

        return payload

    async def delete_transaction(self, transaction_id: int) -> bool:
        try:
            transaction_id = int(transaction_id)
        except (TypeError, ValueError):
            raise BudgetValidationError(f"Invalid transaction {transaction_id!r}") from None
        transaction = await self.session.get(Transaction, transaction_id)
        if transaction is None:
            return False

        month = month_start(transaction.occurred_on)
        await self.session.delete(transaction)
        await self.session.commit()
        logger.info(f"Deleted transaction {transaction_id}")
        self._broadcast(month, "transaction_deleted", {"id": transaction_id})
        return True

    # =========================================================================
    # BUDGETS
    # =========================================================================

    async def set_budget(self, category_id, month: date, amount) -> Dict[str, Any]:
        category = await self._get_category(category_id)
        if category.kind != "expense":
            raise BudgetValidationError("Budgets can only be set on expense categories")
        value = _amount(amount, allow_zero=True)
        start = month_start(month)

        statement = insert(Budget).values(category_id=category.id, month=start, amount=value)
        statement = statement.on_conflict_do_update(
            constraint="unique_budget_month",
            set_={"amount": statement.excluded.amount},
        )
        await self.session.execute(statement)
        await self.session.commit()

        payload = {"category_id": category.id, "month": month_key(start), "amount": float(value)}
        logger.info(f"Budget for {category.name} in {month_key(start)} set to {value}")
        self._broadcast(start, "budget_updated", payload)
        return payload

    async def _month_budgets(self, month: date) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(Budget.category_id, Budget.amount).where(Budget.month == month_start(month))
        )
        return [{"category_id": row.category_id, "amount": row.amount} for row in result.all()]

    async def _month_spending(self, month: date) -> List[Dict[str, Any]]:
        start = month_start(month)
        query = text("""
            SELECT category_id, SUM(amount) AS total
            FROM transactions
            WHERE occurred_on >= :start AND occurred_on < :end
            GROUP BY category_id
        """)
        return await self.execute_query(query, {"start": start, "end": next_month(start)})

    async def _is_over_budget(self, category: Category, month: date) -> bool:
        if category.kind != "expense":
            return False
        budget = await self.session.execute(
            select(Budget.amount).where(Budget.category_id == category.id, Budget.month == month)
        )
        limit = budget.scalar()
        if limit is None:
            return False
        spent = await self.session.execute(text("""
            SELECT COALESCE(SUM(amount), 0)
            FROM transactions
            WHERE category_id = :category_id AND occurred_on >= :start AND occurred_on < :end
        """), {"category_id": category.id, "start": month, "end": next_month(month)})
        return Decimal(spent.scalar()) > Decimal(limit)

    async def _send_over_budget_alert(self, category: Category, month: date) -> None:
        if not self.settings.alert_email:
            return
        summary = await self.month_summary(month)
        row = next((r for r in summary["rows"] if r["category_id"] == category.id), None)
        if row is None:
            return

        currency = self.settings.currency
        body = (
            f"{category.name} is over budget for {month_label(month)}.\n\n"
            f"Budgeted: {format_amount(row['budgeted'], currency)}\n"
            f"Spent:    {format_amount(row['spent'], currency)}\n"
        )
        try:
            await self.mailer.deliver(Email(
                to=self.settings.alert_email,
                subject=f"Budget alert: {category.name} ({month_key(month)})",
                text_body=body,
            ))
        except Exception as e:
            logger.error(f"Failed to send budget alert for {category.name}: {e}")

    # =========================================================================
    # REPORTS
    # =========================================================================

    async def month_summary(self, month: date) -> Dict[str, Any]:
        categories = await self.list_categories()
        budgets = await self._month_budgets(month)
        spending = await self._month_spending(month)
        summary = summarize_month(categories, budgets, spending)
        summary["month"] = month_key(month)
        return summary

    async def monthly_trend(self, end_month: date, months: int = 6) -> List[Dict[str, Any]]:
        if months < 1:
            raise BudgetValidationError(f"Trend needs at least one month, got {months}")
        start = month_range(month_start(end_month), months)[0]
        query = text("""
            SELECT t.occurred_on, t.amount, c.kind
            FROM transactions t
            JOIN categories c ON c.id = t.category_id
            WHERE t.occurred_on >= :start AND t.occurred_on < :end
        """)
        rows = await self.execute_query(query, {"start": start, "end": next_month(end_month)})
        return monthly_trend(rows, month_start(end_month), months)
