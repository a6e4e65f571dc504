from .budgets import budgets_page
from .home import home_page
from .transactions import transactions_page

__all__ = ["budgets_page", "home_page", "transactions_page"]
