"""
Transactions page
- Add form, month listing with delete, new-category dialog
"""
import reflex as rx

from ..components.layouts import error_banner, page_header, shell
from ..services.budget_service import CATEGORY_COLORS
from ..states.transaction_state import TransactionState


def category_dialog() -> rx.Component:
    return rx.dialog.root(
        rx.dialog.trigger(
            rx.button(rx.icon("plus", size=16), "New category", variant="soft"),
        ),
        rx.dialog.content(
            rx.dialog.title("New category"),
            rx.form(
                rx.vstack(
                    rx.input(name="name", placeholder="Name", required=True, width="100%"),
                    rx.select(["expense", "income"], name="kind", default_value="expense", width="100%"),
                    rx.select(list(CATEGORY_COLORS), name="color", default_value="primary", width="100%"),
                    rx.cond(
                        TransactionState.category_error != "",
                        rx.text(TransactionState.category_error, size="2", color="red"),
                        rx.fragment(),
                    ),
                    rx.flex(
                        rx.dialog.close(rx.button("Cancel", variant="soft", color_scheme="gray", type="button")),
                        rx.button("Create", type="submit"),
                        gap="3",
                        justify="end",
                        width="100%",
                    ),
                    spacing="3",
                ),
                on_submit=TransactionState.create_category,
                reset_on_submit=False,
            ),
        ),
        open=TransactionState.category_dialog_open,
        on_open_change=TransactionState.set_category_dialog_open,
    )


def category_option(category: rx.Var) -> rx.Component:
    return rx.select.item(category["name"], value=category["id"])


def add_form() -> rx.Component:
    return rx.card(
        rx.form(
            rx.flex(
                rx.select.root(
                    rx.select.trigger(placeholder="Category"),
                    rx.select.content(rx.foreach(TransactionState.categories, category_option)),
                    name="category_id",
                    required=True,
                ),
                rx.input(name="amount", placeholder="Amount", required=True),
                rx.input(name="occurred_on", type="date", default_value=TransactionState.default_date),
                rx.input(name="description", placeholder="Description", flex="1"),
                rx.button(
                    rx.icon("plus", size=16),
                    "Add",
                    type="submit",
                    loading=TransactionState.saving,
                ),
                gap="3",
                wrap="wrap",
                align="center",
                width="100%",
            ),
            on_submit=TransactionState.add_transaction,
            reset_on_submit=True,
        ),
        rx.cond(
            TransactionState.form_error != "",
            rx.text(TransactionState.form_error, size="2", color="red", class_name="mt-2"),
            rx.fragment(),
        ),
        class_name="bg-white border border-gray-200 mb-6",
    )


def transaction_row(transaction: rx.Var) -> rx.Component:
    return rx.table.row(
        rx.table.cell(transaction["occurred_on"]),
        rx.table.cell(
            rx.badge(transaction["category"], variant="soft"),
        ),
        rx.table.cell(transaction["description"]),
        rx.table.cell(
            rx.text(
                transaction["amount_text"],
                color=rx.cond(transaction["kind"] == "income", "green", "inherit"),
                weight="medium",
            ),
            text_align="right",
        ),
        rx.table.cell(
            rx.icon_button(
                rx.icon("trash-2", size=16),
                variant="ghost",
                color_scheme="red",
                on_click=TransactionState.delete_transaction(transaction["id"]),
                aria_label="Delete transaction",
            ),
        ),
    )


def transaction_table() -> rx.Component:
    return rx.card(
        rx.cond(
            TransactionState.has_transactions,
            rx.table.root(
                rx.table.header(
                    rx.table.row(
                        rx.table.column_header_cell("Date"),
                        rx.table.column_header_cell("Category"),
                        rx.table.column_header_cell("Description"),
                        rx.table.column_header_cell("Amount", text_align="right"),
                        rx.table.column_header_cell(""),
                    ),
                ),
                rx.table.body(rx.foreach(TransactionState.transactions, transaction_row)),
                width="100%",
            ),
            rx.text("No transactions this month.", size="2", color="#6b7280"),
        ),
        class_name="bg-white border border-gray-200",
    )


def transactions_page() -> rx.Component:
    return shell(
        page_header("Transactions", on_month_change=TransactionState.refresh),
        error_banner(),
        rx.flex(
            rx.cond(
                TransactionState.has_categories,
                rx.fragment(),
                rx.text("Create a category to start recording transactions.", size="2", color="#6b7280"),
            ),
            rx.spacer(),
            category_dialog(),
            align="center",
            width="100%",
            class_name="mb-4",
        ),
        add_form(),
        transaction_table(),
        on_unmount=TransactionState.stop_listening,
        active_route="/transactions",
    )
