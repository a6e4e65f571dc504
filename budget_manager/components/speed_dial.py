"""
Speed dial - floating button that expands into a list of quick actions

Clicking the trigger toggles ``show-speed-dial`` on ``<id>-speed-dial-content``;
a click anywhere else closes it (see layouts.click_away_script). Without
``clickable`` the menu also opens on hover.

    speed_dial(
        speed_dial_item(icon="house", href="/", color="danger"),
        speed_dial_item(content="11", variant="shadow", color="misc"),
        id="quick-actions",
        icon="plus",
        icon_animated=True,
    )
"""
from typing import List, Optional, Union

import reflex as rx

VARIANTS = ["default", "unbordered", "shadow"]
COLORS = [
    "white", "primary", "secondary", "dark", "success",
    "warning", "danger", "info", "light", "misc", "dawn",
]

CONTENT = "[&_.speed-dial-content]"
BASE = "[&_.speed-dial-base]"
ICON_BASE = "[&_.speed-dial-icon-base]"

TRIGGER_ON_HOVER = f"{CONTENT}:hover:visible {CONTENT}:hover:opacity-100"

POSITION_CLASSES = {
    "top": f"{CONTENT}:bottom-full {CONTENT}:left-1/2 {CONTENT}:-translate-x-1/2 {CONTENT}:-translate-y-[6px]",
    "bottom": f"{CONTENT}:top-full {CONTENT}:left-1/2 {CONTENT}:-translate-x-1/2 {CONTENT}:translate-y-[6px]",
    "left": f"{CONTENT}:right-full {CONTENT}:top-1/2 {CONTENT}:-translate-y-1/2 {CONTENT}:-translate-x-[6px]",
    "right": f"{CONTENT}:left-full {CONTENT}:top-1/2 {CONTENT}:-translate-y-1/2 {CONTENT}:translate-x-[6px]",
}

WIDTH_CLASSES = {
    "extra_small": f"{CONTENT}:w-48",
    "small": f"{CONTENT}:w-52",
    "medium": f"{CONTENT}:w-56",
    "large": f"{CONTENT}:w-60",
    "extra_large": f"{CONTENT}:w-64",
    "double_large": f"{CONTENT}:w-72",
    "triple_large": f"{CONTENT}:w-80",
    "quadruple_large": f"{CONTENT}:w-96",
    "fit": f"{CONTENT}:w-fit",
}

SPACE_STEPS = {
    "extra_small": "2",
    "small": "3",
    "medium": "4",
    "large": "5",
    "extra_large": "6",
}

PADDING_CLASSES = {
    "none": f"{CONTENT}:p-0",
    "extra_small": f"{CONTENT}:p-1",
    "small": f"{CONTENT}:p-1.5",
    "medium": f"{CONTENT}:p-2",
    "large": f"{CONTENT}:p-2.5",
    "extra_large": f"{CONTENT}:p-3",
}

ROUNDED_CLASSES = {
    "extra_small": f"{BASE}:rounded-sm",
    "small": f"{BASE}:rounded",
    "medium": f"{BASE}:rounded-md",
    "large": f"{BASE}:rounded-lg",
    "extra_large": f"{BASE}:rounded-xl",
    "full": f"{BASE}:rounded-full",
}

# (content max width, icon size, button size)
SIZE_STEPS = {
    "extra_small": ("60", "2.5", "7"),
    "small": ("64", "3", "8"),
    "medium": ("72", "3.5", "9"),
    "large": ("80", "4", "10"),
    "extra_large": ("96", "5", "11"),
    "double_large": ("96", "6", "12"),
    "triple_large": ("96", "7", "14"),
    "quadruple_large": ("96", "8", "16"),
}

BORDER_CLASSES = {
    "none": f"{BASE}:border-0",
    "extra_small": f"{BASE}:border",
    "small": f"{BASE}:border-2",
    "medium": f"{BASE}:border-[3px]",
    "large": f"{BASE}:border-4",
    "extra_large": f"{BASE}:border-[5px]",
}

ACTION_POSITIONS = {
    "top-start": {
        "none": "top-0 start-0",
        "extra_small": "top-1 start-4",
        "small": "top-2 start-5",
        "medium": "top-3 start-6",
        "large": "top-4 start-7",
        "extra_large": "top-8 start-8",
    },
    "top-end": {
        "none": "top-0 end-0",
        "extra_small": "top-4 end-4",
        "small": "top-5 end-5",
        "medium": "top-6 end-6",
        "large": "top-7 end-7",
        "extra_large": "top-8 end-8",
    },
    "bottom-start": {
        "none": "bottom-0 start-0",
        "extra_small": "bottom-4 start-4",
        "small": "bottom-5 start-5",
        "medium": "bottom-6 start-6",
        "large": "bottom-8 start-8",
        "extra_large": "bottom-9 start-9",
    },
    "bottom-end": {
        "none": "bottom-0 end-0",
        "extra_small": "bottom-4 end-4",
        "small": "bottom-5 end-5",
        "medium": "bottom-6 end-6",
        "large": "bottom-8 end-8",
        "extra_large": "bottom-9 end-9",
    },
}

# (background, text, border) per color for the default variant
PALETTE = {
    "white": ("bg-white", "text-[#3E3E3E]", "border-[#DADADA]"),
    "primary": ("bg-[#4363EC]", "text-white", "border-[#2441de]"),
    "secondary": ("bg-[#6B6E7C]", "text-white", "border-[#877C7C]"),
    "success": ("bg-[#ECFEF3]", "text-[#047857]", "border-[#6EE7B7]"),
    "warning": ("bg-[#FFF8E6]", "text-[#FF8B08]", "border-[#FF8B08]"),
    "danger": ("bg-[#FFE6E6]", "text-[#E73B3B]", "border-[#E73B3B]"),
    "info": ("bg-[#E5F0FF]", "text-[#004FC4]", "border-[#004FC4]"),
    "misc": ("bg-[#FFE6FF]", "text-[#52059C]", "border-[#52059C]"),
    "dawn": ("bg-[#FFECDA]", "text-[#4D4137]", "border-[#4D4137]"),
    "light": ("bg-[#E3E7F1]", "text-[#707483]", "border-[#707483]"),
    "dark": ("bg-[#1E1E1E]", "text-white", "border-[#050404]"),
}

# The shadow variant uses its own fill for success and borders in the fill color
SHADOW_PALETTE = {
    **{color: (bg, text) for color, (bg, text, _) in PALETTE.items()},
    "success": ("bg-[#AFEAD0]", "text-[#227A52]"),
}


def _lookup(table: dict, value, default: str) -> str:
    if value in table:
        return table[value]
    if isinstance(value, str):
        return value
    return table[default]


def width_class(width) -> str:
    return _lookup(WIDTH_CLASSES, width, "fit")


def padding_class(padding) -> str:
    return _lookup(PADDING_CLASSES, padding, "extra_small")


def border_class(border) -> str:
    return _lookup(BORDER_CLASSES, border, "extra_small")


def rounded_size(rounded) -> str:
    return ROUNDED_CLASSES.get(rounded, ROUNDED_CLASSES["full"])


def position_class(position) -> str:
    return POSITION_CLASSES.get(position, "")


def size_class(size) -> str:
    if size in SIZE_STEPS:
        max_width, icon, button = SIZE_STEPS[size]
        return f"{CONTENT}:max-w-{max_width} {ICON_BASE}:size-{icon} {BASE}:size-{button}"
    if isinstance(size, str):
        return size
    return size_class("extra_large")


def space_class(space, wrapper_position) -> str:
    axis = {"top": "y", "bottom": "y", "left": "x", "right": "x"}.get(wrapper_position, "y")
    step = SPACE_STEPS.get(space, SPACE_STEPS["extra_small"])
    return f"{CONTENT}:space-{axis}-{step}"


def action_position_class(position_size, position) -> str:
    return ACTION_POSITIONS.get(position, {}).get(position_size, "")


def color_variant(variant, color) -> str:
    if variant == "default" and color in PALETTE:
        return " ".join(PALETTE[color])
    if variant == "unbordered" and color in PALETTE:
        bg, text, _ = PALETTE[color]
        return f"{bg} border-transparent {text}"
    if variant == "shadow" and color in SHADOW_PALETTE:
        bg, text = SHADOW_PALETTE[color]
        border = "border-[#DADADA]" if color == "white" else bg.replace("bg-", "border-", 1)
        return f"{bg} {text} {border} shadow"
    return color_variant("default", "primary")


def _classes(*parts: Optional[Union[str, bool]]) -> str:
    return " ".join(p for p in parts if isinstance(p, str) and p)


def wrapper_class(
    clickable: bool = False,
    action_position: str = "bottom-end",
    position_size: str = "large",
    wrapper_position: str = "top",
    rounded: str = "full",
    size: str = "medium",
    space: str = "extra_small",
    width: str = "fit",
    border: str = "extra_small",
    padding: str = "extra_small",
    class_name: Optional[str] = None,
) -> str:
    """Classes of the outer element; hidden content is revealed by ``show-speed-dial``"""
    return _classes(
        "fixed group",
        f"{CONTENT}:invisible {CONTENT}:opacity-0",
        "[&_.speed-dial-content.show-speed-dial]:visible [&_.speed-dial-content.show-speed-dial]:opacity-100",
        f"{BASE}:flex {BASE}:items-center {BASE}:justify-center",
        not clickable and TRIGGER_ON_HOVER,
        action_position_class(position_size, action_position),
        space_class(space, wrapper_position),
        position_class(wrapper_position),
        rounded_size(rounded),
        border_class(border),
        padding_class(padding),
        width_class(width),
        size_class(size),
        class_name,
    )


def content_id(id: str) -> str:
    return f"{id}-speed-dial-content"


def toggle_script(id: str) -> str:
    return (
        f"document.getElementById('{content_id(id)}')"
        f"?.classList.toggle('show-speed-dial')"
    )


def speed_dial_item(
    content: Optional[Union[str, rx.Component]] = None,
    icon: Optional[str] = None,
    navigate: Optional[str] = None,
    patch: Optional[str] = None,
    href: Optional[str] = None,
    color: str = "primary",
    variant: str = "default",
    icon_position: Optional[str] = None,
    icon_class: Optional[str] = None,
    content_class: Optional[str] = None,
    class_name: Optional[str] = None,
) -> dict:
    """Describe one action; rendered by speed_dial()"""
    return {
        "content": content,
        "icon": icon,
        "navigate": navigate,
        "patch": patch,
        "href": href,
        "color": color,
        "variant": variant,
        "icon_position": icon_position,
        "icon_class": icon_class,
        "content_class": content_class,
        "class_name": class_name,
    }


def _item_body(item: dict) -> List[rx.Component]:
    if item["icon"]:
        return [rx.icon(item["icon"], class_name=_classes("speed-dial-icon-base", item["icon_class"]))]
    return [
        rx.el.span(
            item["content"] if item["content"] is not None else "",
            class_name=_classes("block text-xs text-center", item["content_class"]),
        )
    ]


def _item_content(dial_id: str, index: int, item: dict) -> rx.Component:
    colors = color_variant(item["variant"], item["color"])
    target = item["navigate"] or item["patch"] or item["href"]
    if target:
        return rx.link(
            *_item_body(item),
            id=f"{dial_id}-speed-dial-item-{index}",
            href=target,
            is_external=bool(item["href"]) and not (item["navigate"] or item["patch"]),
            underline="none",
            class_name=_classes("block speed-dial-base flex flex-col", colors),
        )
    return rx.el.div(
        *_item_body(item),
        id=f"{dial_id}-speed-dial-item-{index}",
        class_name=_classes("speed-dial-base flex flex-col", colors),
    )


def speed_dial(
    *items: dict,
    id: str,
    icon: Optional[str] = None,
    trigger_content: Optional[Union[str, rx.Component]] = None,
    trigger_class: Optional[str] = None,
    action_position: str = "bottom-end",
    position_size: str = "large",
    wrapper_position: str = "top",
    rounded: str = "full",
    size: str = "medium",
    color: str = "primary",
    variant: str = "default",
    space: str = "extra_small",
    width: str = "fit",
    border: str = "extra_small",
    padding: str = "extra_small",
    clickable: bool = False,
    icon_animated: bool = False,
    class_name: Optional[str] = None,
    children: Optional[List[rx.Component]] = None,
) -> rx.Component:
    """
    Floating quick-action menu

    Args:
        items: speed_dial_item() dicts, rendered in order
        id: Unique element id (required for the toggle)
        icon: Lucide icon for the trigger; trigger_content is shown when None
        clickable: Only open on click (no hover)
        icon_animated: Rotate the trigger icon on hover
        children: Extra components appended after the items
    """
    if not id:
        raise ValueError("speed_dial requires an id")

    wrapper = wrapper_class(
        clickable=clickable,
        action_position=action_position,
        position_size=position_size,
        wrapper_position=wrapper_position,
        rounded=rounded,
        size=size,
        space=space,
        width=width,
        border=border,
        padding=padding,
        class_name=class_name,
    )

    item_nodes = [
        rx.el.div(
            _item_content(id, index, item),
            id=f"{id}-item-{index}",
            class_name=_classes(
                "speed-dial-item w-fit h-fit",
                item["icon_position"] == "end" and "flex-row-reverse",
                item["class_name"],
            ),
        )
        for index, item in enumerate(items, start=1)
    ]

    if icon is not None:
        trigger_body = rx.icon(
            icon,
            class_name=_classes(
                "speed-dial-icon-base",
                icon_animated and "transition-transform group-hover:rotate-45",
            ),
        )
    else:
        trigger_body = rx.el.span(trigger_content or "", class_name=trigger_class or "")

    return rx.el.div(
        rx.el.div(
            *item_nodes,
            *(children or []),
            id=content_id(id),
            class_name=_classes(
                "speed-dial-content flex items-center",
                "absolute z-10 w-full transition-all ease-in-out delay-100 duration-500",
                wrapper_position in ("top", "bottom") and "flex-col",
            ),
        ),
        rx.el.button(
            trigger_body,
            rx.el.span("Open actions menu", class_name="sr-only"),
            type="button",
            class_name=_classes("speed-dial-base", color_variant(variant, color)),
            on_click=rx.call_script(toggle_script(id)),
        ),
        id=id,
        class_name=wrapper,
    )
