"""
Budgets page - set the monthly limit per expense category
"""
import reflex as rx

from ..components.layouts import error_banner, page_header, shell
from ..states.budget_state import BudgetState


def category_option(category: rx.Var) -> rx.Component:
    return rx.select.item(category["name"], value=category["id"])


def budget_form() -> rx.Component:
    return rx.card(
        rx.form(
            rx.flex(
                rx.select.root(
                    rx.select.trigger(placeholder="Expense category"),
                    rx.select.content(rx.foreach(BudgetState.categories, category_option)),
                    name="category_id",
                    required=True,
                ),
                rx.input(name="amount", placeholder="Monthly limit", required=True),
                rx.button("Save", type="submit", loading=BudgetState.saving),
                gap="3",
                align="center",
                wrap="wrap",
            ),
            on_submit=BudgetState.save_budget,
            reset_on_submit=True,
        ),
        rx.cond(
            BudgetState.form_error != "",
            rx.text(BudgetState.form_error, size="2", color="red", class_name="mt-2"),
            rx.fragment(),
        ),
        class_name="bg-white border border-gray-200 mb-6",
    )


def budget_row(row: rx.Var) -> rx.Component:
    return rx.table.row(
        rx.table.cell(rx.text(row["name"], weight="medium")),
        rx.table.cell(row["budgeted_text"], text_align="right"),
        rx.table.cell(row["spent_text"], text_align="right"),
        rx.table.cell(row["remaining_text"], text_align="right"),
        rx.table.cell(
            rx.flex(
                rx.progress(value=row["progress"], color_scheme=row["status_color"], width="8rem"),
                rx.text(row["percent"], "%", size="1", color="#6b7280"),
                align="center",
                gap="2",
            ),
        ),
        rx.table.cell(rx.badge(row["status"], color_scheme=row["status_color"], variant="soft")),
    )


def budget_table() -> rx.Component:
    return rx.card(
        rx.table.root(
            rx.table.header(
                rx.table.row(
                    rx.table.column_header_cell("Category"),
                    rx.table.column_header_cell("Budgeted", text_align="right"),
                    rx.table.column_header_cell("Spent", text_align="right"),
                    rx.table.column_header_cell("Remaining", text_align="right"),
                    rx.table.column_header_cell("Used"),
                    rx.table.column_header_cell("Status"),
                ),
            ),
            rx.table.body(rx.foreach(BudgetState.rows, budget_row)),
            width="100%",
        ),
        class_name="bg-white border border-gray-200",
    )


def budgets_page() -> rx.Component:
    return shell(
        page_header("Budgets", on_month_change=BudgetState.refresh),
        error_banner(),
        budget_form(),
        budget_table(),
        on_unmount=BudgetState.stop_listening,
        active_route="/budgets",
    )
