from .budget_orm import Base, Budget, Category, Transaction, CATEGORY_KINDS

__all__ = ["Base", "Budget", "Category", "Transaction", "CATEGORY_KINDS"]
