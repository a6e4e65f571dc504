import reflex as rx
from typing import Optional

# Import BaseState for sidebar toggle and month selection (shared across all pages)
from ..states.base_state import BaseState as B

MENU = [
    {"type": "header", "name": "Budget Manager"},
    {"icon": "layout-dashboard", "name": "Overview", "path": "/", "desc": "This month at a glance"},
    {"icon": "receipt", "name": "Transactions", "path": "/transactions", "desc": "Income and spending"},
    {"icon": "piggy-bank", "name": "Budgets", "path": "/budgets", "desc": "Monthly limits"},
]

NAV_ITEMS = [m for m in MENU if m.get("type") != "header"]

# Closes any open speed dial when the click lands outside it
CLICK_AWAY_SCRIPT = """
document.addEventListener("click", function (event) {
  document.querySelectorAll(".show-speed-dial").forEach(function (el) {
    var wrapper = el.parentElement;
    if (wrapper && !wrapper.contains(event.target)) {
      el.classList.remove("show-speed-dial");
    }
  });
});
"""


def click_away_script() -> rx.Component:
    return rx.script(CLICK_AWAY_SCRIPT)


def render_menu_item(menu: dict, active: str) -> rx.Component:
    """Menu entry (group header or link)"""
    if menu.get("type") == "header":
        return rx.text(
            menu["name"],
            size="1",
            weight="bold",
            color="#6b7280",
            class_name="px-3 py-2 uppercase tracking-wide",
        )

    is_active = active == menu["path"]

    return rx.link(
        rx.flex(
            rx.icon(menu["icon"], size=20, color="#2441de" if is_active else "#6b7280"),
            rx.vstack(
                rx.text(
                    menu["name"],
                    size="3",
                    weight="bold" if is_active else "medium",
                    color="#2441de" if is_active else "#111827",
                ),
                rx.text(menu["desc"], size="1", color="#6b7280"),
                spacing="0",
                align="start",
            ),
            align="center",
            gap="3",
        ),
        href=menu["path"],
        underline="none",
        width="100%",
        padding="0.75rem",
        border_radius="0.5rem",
        border_left=f"4px solid {'#2441de' if is_active else 'transparent'}",
        background="#eef1fd" if is_active else "transparent",
        _hover={"background": "#f3f4f6" if not is_active else "#eef1fd"},
        transition="all 0.2s ease",
        style={"text_decoration": "none"},
    )


def collapsed_sidebar() -> rx.Component:
    """Icon-only sidebar"""
    return rx.box(
        rx.flex(
            rx.button(
                rx.icon("panel-left-open", size=20, color="#6b7280"),
                variant="ghost",
                size="2",
                on_click=B.toggle_sidebar,
                style={"cursor": "pointer"},
            ),
            direction="column",
            align="center",
            padding_bottom="1rem",
            border_bottom="1px solid #e5e7eb",
        ),
        rx.vstack(
            *[
                rx.link(
                    rx.flex(
                        rx.icon(menu["icon"], size=18, color="#6b7280"),
                        justify="center",
                        align="center",
                        width="100%",
                        height="2.5rem",
                        border_radius="0.5rem",
                        _hover={"background": "#f3f4f6"},
                    ),
                    href=menu["path"],
                    underline="none",
                )
                for menu in NAV_ITEMS
            ],
            spacing="2",
            align="stretch",
            padding_top="1rem",
        ),
        height="100vh",
        width="64px",
        flex_shrink="0",
        padding="1rem 0.5rem",
        border_right="1px solid #e5e7eb",
        background="white",
        position="sticky",
        top="0",
        class_name="hidden lg:flex flex-col",
    )


def sidebar(active: str = "/") -> rx.Component:
    return rx.box(
        rx.flex(
            rx.button(
                rx.icon("panel-left-close", size=20, color="#6b7280"),
                variant="ghost",
                size="2",
                on_click=B.toggle_sidebar,
                style={"cursor": "pointer"},
            ),
            rx.text("Budget", weight="bold", size="5", color="#2441de"),
            align="center",
            gap="3",
            width="100%",
            padding_bottom="1rem",
            border_bottom="1px solid #e5e7eb",
        ),
        rx.vstack(
            *[render_menu_item(menu, active) for menu in MENU],
            spacing="2",
            align="stretch",
            padding_top="1.5rem",
            flex="1",
        ),
        rx.spacer(),
        height="100vh",
        width="240px",
        flex_shrink="0",
        padding="1.5rem",
        border_right="1px solid #e5e7eb",
        background="white",
        position="sticky",
        top="0",
        overflow_y="auto",
        class_name="hidden lg:flex flex-col",
    )


def month_switcher(on_change=None) -> rx.Component:
    """
    Previous / next month buttons around the selected month

    Args:
        on_change: Page event run after the month changes (e.g. PageState.refresh)
    """
    def handlers(event):
        return [event, on_change] if on_change is not None else event

    return rx.flex(
        rx.button(
            rx.icon("chevron-left", size=18),
            variant="ghost",
            on_click=handlers(B.previous_month),
            aria_label="Previous month",
        ),
        rx.text(B.month_title, size="4", weight="bold", class_name="min-w-40 text-center"),
        rx.button(
            rx.icon("chevron-right", size=18),
            variant="ghost",
            on_click=handlers(B.next_month),
            aria_label="Next month",
        ),
        rx.button(
            "Today",
            variant="soft",
            size="1",
            on_click=handlers(B.this_month),
        ),
        align="center",
        gap="2",
    )


def page_header(title: str, on_month_change=None) -> rx.Component:
    return rx.flex(
        rx.heading(title, size="6"),
        rx.spacer(),
        rx.cond(B.loading, rx.spinner(size="2"), rx.fragment()),
        month_switcher(on_month_change),
        align="center",
        gap="4",
        width="100%",
        class_name="mb-6",
    )


def error_banner() -> rx.Component:
    return rx.cond(
        B.error_message != "",
        rx.callout(
            B.error_message,
            icon="triangle-alert",
            color_scheme="red",
            class_name="mb-4",
        ),
        rx.fragment(),
    )


def stat_card(
    title: str,
    value: rx.Var | str,
    icon: str,
    color: str = "gray",
    subtitle: Optional[str | rx.Var] = None,
) -> rx.Component:
    """
    Summary card

    Args:
        title: Card title (e.g. "Spent")
        value: Display value
        icon: Lucide icon name
        color: "gray", "red", "orange", "blue", "green"
    """
    color_schemes = {
        "gray": {"icon_bg": "#f3f4f6", "icon_color": "#6b7280"},
        "red": {"icon_bg": "#fef2f2", "icon_color": "#ef4444"},
        "orange": {"icon_bg": "#fff7ed", "icon_color": "#f97316"},
        "blue": {"icon_bg": "#eff6ff", "icon_color": "#3b82f6"},
        "green": {"icon_bg": "#d1fae5", "icon_color": "#10b981"},
    }
    scheme = color_schemes.get(color, color_schemes["gray"])

    return rx.card(
        rx.flex(
            rx.box(
                rx.icon(icon, size=20, color=scheme["icon_color"]),
                padding="2",
                border_radius="md",
                bg=scheme["icon_bg"],
            ),
            rx.vstack(
                rx.text(title, size="1", color="#6b7280", weight="medium"),
                rx.text(value, size="6", weight="bold", color="#111827"),
                rx.text(subtitle, size="1", color="#6b7280") if subtitle is not None else rx.fragment(),
                spacing="1",
                align="start",
            ),
            align="center",
            gap="3",
        ),
        class_name="bg-white border border-gray-200",
    )


def shell(*children: rx.Component, on_mount=None, on_unmount=None, active_route: str = "/") -> rx.Component:
    return rx.el.div(
        rx.cond(
            B.sidebar_collapsed,
            collapsed_sidebar(),
            sidebar(active_route),
        ),
        rx.el.div(
            rx.el.div(
                *children,
                class_name="w-full min-h-screen p-6",
            ),
            class_name="flex-1 min-h-screen bg-gray-50",
        ),
        click_away_script(),
        class_name="w-full min-h-screen bg-white flex",
        on_mount=on_mount,
        on_unmount=on_unmount,
    )
