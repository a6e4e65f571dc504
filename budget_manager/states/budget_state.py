"""
Budget States
- DashboardState: month summary, totals and the income/expense trend (overview page)
- BudgetState: per-category limits for the selected month (budgets page)
"""
from typing import Any, Dict, List

import reflex as rx
from reflex.utils import console

from ..config import get_settings
from ..db import get_async_session
from ..services.budget_service import BudgetService, BudgetValidationError
from ..utils.money import format_amount
from ..utils.periods import parse_month
from .base_state import BaseState, this_month_key

TREND_MONTHS = 6

STATUS_COLORS = {
    "over": "red",
    "near": "orange",
    "under": "green",
}


def _with_display(row: Dict[str, Any], currency: str) -> Dict[str, Any]:
    """Add pre-formatted amounts and a progress value to a summary row"""
    return {
        **row,
        "budgeted_text": format_amount(row["budgeted"], currency),
        "spent_text": format_amount(row["spent"], currency),
        "remaining_text": format_amount(row["remaining"], currency),
        "progress": min(int(row["percent"]), 100),
        "status_color": STATUS_COLORS.get(row["status"], "gray"),
    }


class DashboardState(BaseState):
    """Overview page state"""

    rows: List[Dict[str, Any]] = []
    trend: List[Dict[str, Any]] = []

    total_budgeted: str = ""
    total_spent: str = ""
    total_remaining: str = ""
    total_income: str = ""
    over_count: int = 0

    _listen_token: int = 0

    async def _fetch(self, month: str) -> Dict[str, Any]:
        period = parse_month(month)
        async with get_async_session() as session:
            service = BudgetService(session)
            summary = await service.month_summary(period)
            trend = await service.monthly_trend(period, TREND_MONTHS)
        return {"summary": summary, "trend": trend}

    def _apply(self, data: Dict[str, Any]) -> None:
        currency = get_settings().currency
        summary = data["summary"]
        totals = summary["totals"]

        self.rows = [_with_display(row, currency) for row in summary["rows"]]
        self.trend = data["trend"]
        self.total_budgeted = format_amount(totals["budgeted"], currency)
        self.total_spent = format_amount(totals["spent"], currency)
        self.total_remaining = format_amount(totals["remaining"], currency)
        self.total_income = format_amount(totals["income"], currency)
        self.over_count = totals["over_count"]

    @rx.var
    def has_rows(self) -> bool:
        return len(self.rows) > 0

    @rx.event(background=True)
    async def refresh(self):
        await self._reload()

    @rx.event(background=True)
    async def listen(self):
        await self._listen()

    @rx.event
    def stop_listening(self):
        self._listen_token += 1

    @rx.event
    def load(self):
        """on_load: initial data, then live updates"""
        return [DashboardState.refresh, DashboardState.listen]


class BudgetState(BaseState):
    """Budgets page state"""

    rows: List[Dict[str, Any]] = []
    categories: List[Dict[str, Any]] = []

    form_error: str = ""
    saving: bool = False

    _listen_token: int = 0

    async def _fetch(self, month: str) -> Dict[str, Any]:
        period = parse_month(month)
        async with get_async_session() as session:
            service = BudgetService(session)
            summary = await service.month_summary(period)
            categories = await service.list_categories()
        return {"summary": summary, "categories": categories}

    def _apply(self, data: Dict[str, Any]) -> None:
        currency = get_settings().currency
        self.rows = [_with_display(row, currency) for row in data["summary"]["rows"]]
        self.categories = [
            {"id": str(c["id"]), "name": c["name"], "color": c["color"]}
            for c in data["categories"]
            if c["kind"] == "expense"
        ]

    @rx.event(background=True)
    async def refresh(self):
        await self._reload()

    @rx.event(background=True)
    async def listen(self):
        await self._listen()

    @rx.event
    def stop_listening(self):
        self._listen_token += 1

    @rx.event
    def load(self):
        return [BudgetState.refresh, BudgetState.listen]

    @rx.event
    async def save_budget(self, form_data: dict):
        """Create or update the limit for one category in the selected month"""
        self.saving = True
        self.form_error = ""
        yield

        try:
            async with get_async_session() as session:
                service = BudgetService(session)
                await service.set_budget(
                    form_data.get("category_id"),
                    parse_month(self.month or this_month_key()),
                    form_data.get("amount"),
                )
        except BudgetValidationError as e:
            self.form_error = str(e)
            self.saving = False
            return
        except Exception as e:
            console.error(f"save_budget failed: {e}")
            self.form_error = "Could not save the budget"
            self.saving = False
            return

        self.saving = False
        yield rx.toast.success("Budget saved")
        yield BudgetState.refresh
