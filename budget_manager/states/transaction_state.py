"""
Transaction State
- Transactions of the selected month
- Add / delete transactions, create categories
"""
from typing import Any, Dict, List

import reflex as rx
from reflex.utils import console

from ..config import get_settings
from ..db import get_async_session
from ..services.budget_service import BudgetService, BudgetValidationError
from ..utils.money import format_amount
from ..utils.periods import parse_month, today
from .base_state import BaseState


class TransactionState(BaseState):
    """Transactions page state"""

    transactions: List[Dict[str, Any]] = []
    categories: List[Dict[str, Any]] = []

    # Add-transaction form
    form_error: str = ""
    saving: bool = False
    default_date: str = ""

    # New-category dialog
    category_dialog_open: bool = False
    category_error: str = ""

    _listen_token: int = 0

    async def _fetch(self, month: str) -> Dict[str, Any]:
        period = parse_month(month)
        async with get_async_session() as session:
            service = BudgetService(session)
            transactions = await service.list_transactions(period)
            categories = await service.list_categories()
        return {"transactions": transactions, "categories": categories}

    def _apply(self, data: Dict[str, Any]) -> None:
        currency = get_settings().currency
        self.transactions = [
            {
                **t,
                "amount_text": format_amount(
                    t["amount"] if t["kind"] == "income" else -t["amount"], currency
                ),
            }
            for t in data["transactions"]
        ]
        self.categories = [
            {"id": str(c["id"]), "name": c["name"], "kind": c["kind"], "color": c["color"]}
            for c in data["categories"]
        ]
        if not self.default_date:
            self.default_date = today(get_settings().timezone).isoformat()

    @rx.var
    def has_transactions(self) -> bool:
        return len(self.transactions) > 0

    @rx.var
    def has_categories(self) -> bool:
        return len(self.categories) > 0

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
        return [TransactionState.refresh, TransactionState.listen]

    # =========================================================================
    # FORMS
    # =========================================================================

    @rx.event
    async def add_transaction(self, form_data: dict):
        self.saving = True
        self.form_error = ""
        yield

        try:
            async with get_async_session() as session:
                service = BudgetService(session)
                await service.add_transaction(
                    form_data.get("category_id"),
                    form_data.get("amount"),
                    form_data.get("occurred_on") or self.default_date,
                    form_data.get("description", ""),
                )
        except BudgetValidationError as e:
            self.form_error = str(e)
            self.saving = False
            return
        except Exception as e:
            console.error(f"add_transaction failed: {e}")
            self.form_error = "Could not save the transaction"
            self.saving = False
            return

        self.saving = False
        yield rx.toast.success("Transaction added")
        yield TransactionState.refresh

    @rx.event
    async def delete_transaction(self, transaction_id: int):
        try:
            async with get_async_session() as session:
                deleted = await BudgetService(session).delete_transaction(transaction_id)
        except Exception as e:
            console.error(f"delete_transaction failed: {e}")
            yield rx.toast.error("Could not delete the transaction")
            return

        if not deleted:
            yield rx.toast.warning("Transaction was already removed")
        yield TransactionState.refresh

    @rx.event
    def set_category_dialog_open(self, value: bool):
        self.category_dialog_open = value
        self.category_error = ""

    @rx.event
    async def create_category(self, form_data: dict):
        try:
            async with get_async_session() as session:
                category = await BudgetService(session).create_category(
                    form_data.get("name", ""),
                    form_data.get("kind", "expense"),
                    form_data.get("color", "primary"),
                )
        except BudgetValidationError as e:
            self.category_error = str(e)
            return
        except Exception as e:
            console.error(f"create_category failed: {e}")
            self.category_error = "Could not create the category"
            return

        self.category_dialog_open = False
        yield rx.toast.success(f"Category {category['name']} created")
        yield TransactionState.refresh
