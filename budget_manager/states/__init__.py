from .base_state import BaseState
from .budget_state import BudgetState, DashboardState
from .transaction_state import TransactionState

__all__ = ["BaseState", "BudgetState", "DashboardState", "TransactionState"]
