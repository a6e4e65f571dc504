"""
Budget reports (pure functions over plain rows)
- summarize_month: budget vs. spending per expense category
- monthly_trend: income / expense / net per month
"""
from datetime import date
from typing import Any, Dict, Iterable, List

import numpy as np
import pandas as pd

from ..models.budget_orm import CATEGORY_KINDS
from ..utils.periods import month_key, month_range

NEAR_LIMIT_PERCENT = 80.0

CATEGORY_COLUMNS = ["id", "name", "kind", "color"]


def _series(rows: Iterable[Dict[str, Any]], value_key: str) -> pd.Series:
    frame = pd.DataFrame(list(rows), columns=["category_id", value_key])
    if frame.empty:
        return pd.Series(dtype="float64")
    frame[value_key] = frame[value_key].astype(float)
    return frame.groupby("category_id")[value_key].sum()


def summarize_month(
    categories: Iterable[Dict[str, Any]],
    budgets: Iterable[Dict[str, Any]],
    spending: Iterable[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Compare budgets with spending for one month

    Args:
        categories: dicts with id, name, kind, color
        budgets: dicts with category_id, amount
        spending: dicts with category_id, total (sum of transactions in the month)

    Returns:
        Dict with:
            - rows: expense categories that have a budget or spending, sorted by
              percent (desc) then name
            - totals: budgeted, spent, remaining, income, over_count
    """
    frame = pd.DataFrame(list(categories), columns=CATEGORY_COLUMNS).set_index("id")
    budgeted = _series(budgets, "amount")
    totals_by_category = _series(spending, "total")

    income_ids = frame.index[frame["kind"] == "income"]
    income = float(totals_by_category.reindex(income_ids).fillna(0.0).sum())

    frame = frame[frame["kind"] == "expense"].copy()
    frame["has_budget"] = frame.index.isin(budgeted.index)
    frame["budgeted"] = budgeted.reindex(frame.index).fillna(0.0)
    frame["spent"] = totals_by_category.reindex(frame.index).fillna(0.0)
    frame = frame[frame["has_budget"] | (frame["spent"] > 0)]

    positive_budget = frame["budgeted"].where(frame["budgeted"] > 0)
    frame["percent"] = np.where(
        frame["budgeted"] > 0,
        frame["spent"] / positive_budget * 100,
        np.where(frame["spent"] > 0, 100.0, 0.0),
    )
    frame["remaining"] = frame["budgeted"] - frame["spent"]
    frame["status"] = np.where(
        frame["spent"] > frame["budgeted"],
        "over",
        np.where(frame["percent"] >= NEAR_LIMIT_PERCENT, "near", "under"),
    )
    frame = frame.reset_index().sort_values(["percent", "name"], ascending=[False, True])

    rows = [
        {
            "category_id": int(row.id),
            "name": str(row.name),
            "color": str(row.color),
            "budgeted": round(float(row.budgeted), 2),
            "spent": round(float(row.spent), 2),
            "remaining": round(float(row.remaining), 2),
            "percent": round(float(row.percent), 1),
            "status": str(row.status),
        }
        for row in frame.itertuples(index=False)
    ]

    total_budgeted = round(float(frame["budgeted"].sum()), 2)
    total_spent = round(float(frame["spent"].sum()), 2)
    return {
        "rows": rows,
        "totals": {
            "budgeted": total_budgeted,
            "spent": total_spent,
            "remaining": round(total_budgeted - total_spent, 2),
            "income": round(income, 2),
            "over_count": int((frame["status"] == "over").sum()),
        },
    }


def monthly_trend(
    transactions: Iterable[Dict[str, Any]],
    end_month: date,
    months: int = 6,
) -> List[Dict[str, Any]]:
    """
    Income, expense and net per month for ``months`` months ending at ``end_month``

    Args:
        transactions: dicts with occurred_on (date), amount, kind (expense | income)

    Returns:
        One dict per month (oldest first, zero-filled): month, label, income, expense, net
    """
    periods = month_range(end_month, months)
    keys = [month_key(p) for p in periods]

    frame = pd.DataFrame(list(transactions), columns=["occurred_on", "amount", "kind"])
    if frame.empty:
        pivot = pd.DataFrame()
    else:
        frame["month"] = frame["occurred_on"].map(month_key)
        frame["amount"] = frame["amount"].astype(float)
        pivot = frame.pivot_table(
            index="month", columns="kind", values="amount", aggfunc="sum", fill_value=0.0
        )
    pivot = pivot.reindex(index=keys, columns=list(CATEGORY_KINDS), fill_value=0.0)

    trend = []
    for period, key in zip(periods, keys):
        income = round(float(pivot.at[key, "income"]), 2)
        expense = round(float(pivot.at[key, "expense"]), 2)
        trend.append({
            "month": key,
            "label": period.strftime("%b"),
            "income": income,
            "expense": expense,
            "net": round(income - expense, 2),
        })
    return trend
