from .budget_service import BudgetService, BudgetValidationError, budget_topic

__all__ = ["BudgetService", "BudgetValidationError", "budget_topic"]
