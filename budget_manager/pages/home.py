"""
Overview page
- Totals for the selected month, per-category progress and a six-month trend
- Quick actions speed dial, optional onboarding video
"""
import reflex as rx

from ..components.layouts import error_banner, page_header, shell, stat_card
from ..components.speed_dial import speed_dial, speed_dial_item
from ..components.video import video, video_source
from ..config import get_settings
from ..states.budget_state import DashboardState


def category_progress(row: rx.Var) -> rx.Component:
    return rx.vstack(
        rx.flex(
            rx.text(row["name"], size="2", weight="medium"),
            rx.spacer(),
            rx.text(row["spent_text"], " / ", row["budgeted_text"], size="2", color="#6b7280"),
            rx.badge(row["status"], color_scheme=row["status_color"], variant="soft"),
            align="center",
            gap="2",
            width="100%",
        ),
        rx.progress(value=row["progress"], color_scheme=row["status_color"], width="100%"),
        spacing="1",
        width="100%",
    )


def category_overview() -> rx.Component:
    return rx.card(
        rx.vstack(
            rx.heading("Spending by category", size="4"),
            rx.cond(
                DashboardState.has_rows,
                rx.vstack(
                    rx.foreach(DashboardState.rows, category_progress),
                    spacing="4",
                    width="100%",
                ),
                rx.text(
                    "No budgets or spending this month yet.",
                    size="2",
                    color="#6b7280",
                ),
            ),
            spacing="4",
            width="100%",
        ),
        class_name="bg-white border border-gray-200",
    )


def trend_chart() -> rx.Component:
    return rx.card(
        rx.vstack(
            rx.heading("Income vs. spending", size="4"),
            rx.recharts.bar_chart(
                rx.recharts.bar(data_key="income", fill=rx.color("green", 8), name="Income"),
                rx.recharts.bar(data_key="expense", fill=rx.color("red", 8), name="Spending"),
                rx.recharts.x_axis(data_key="label"),
                rx.recharts.y_axis(),
                rx.recharts.cartesian_grid(stroke_dasharray="3 3"),
                rx.recharts.graphing_tooltip(),
                rx.recharts.legend(),
                data=DashboardState.trend,
                width="100%",
                height=280,
            ),
            spacing="4",
            width="100%",
        ),
        class_name="bg-white border border-gray-200",
    )


def quick_actions() -> rx.Component:
    return speed_dial(
        speed_dial_item("Add transaction", icon="plus", navigate="/transactions"),
        speed_dial_item("Set budgets", icon="piggy-bank", navigate="/budgets"),
        speed_dial_item("Health", icon="activity", href="/api/health"),
        id="quick-actions",
        icon="zap",
        action_position="bottom-end",
        position_size="medium",
        wrapper_position="top",
        color="primary",
        variant="shadow",
        space="small",
        icon_animated=True,
        class_name="z-20",
    )


def onboarding() -> rx.Component:
    url = get_settings().onboarding_video_url
    if not url:
        return rx.fragment()
    return rx.card(
        rx.vstack(
            rx.heading("Getting started", size="4"),
            video(
                video_source(url, "video/mp4"),
                ratio="video",
                rounded="large",
                controls=True,
                preload="metadata",
            ),
            spacing="3",
            width="100%",
        ),
        class_name="bg-white border border-gray-200",
    )


def home_page() -> rx.Component:
    return shell(
        page_header("Overview", on_month_change=DashboardState.refresh),
        error_banner(),
        rx.grid(
            stat_card("Budgeted", DashboardState.total_budgeted, "piggy-bank", "blue"),
            stat_card("Spent", DashboardState.total_spent, "wallet", "orange"),
            stat_card("Remaining", DashboardState.total_remaining, "scale", "green"),
            stat_card(
                "Income",
                DashboardState.total_income,
                "trending-up",
                "gray",
                subtitle=DashboardState.over_count.to_string() + " categories over budget",
            ),
            columns=rx.breakpoints(initial="1", sm="2", lg="4"),
            spacing="4",
            width="100%",
            class_name="mb-6",
        ),
        rx.grid(
            category_overview(),
            trend_chart(),
            columns=rx.breakpoints(initial="1", lg="2"),
            spacing="4",
            width="100%",
            class_name="mb-6",
        ),
        onboarding(),
        quick_actions(),
        on_unmount=DashboardState.stop_listening,
        active_route="/",
    )
