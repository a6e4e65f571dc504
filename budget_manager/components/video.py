"""
Video player - HTML5 <video> with sources, caption tracks and caption styling

Serve the video and its .vtt captions from the same origin (or set CORS
headers); browsers drop cross-origin tracks. Base64 data: URLs avoid this.

    video(
        video_source("/media/intro.webm", "video/webm"),
        video_source("/media/intro.mp4", "video/mp4"),
        video_track("/media/intro.en.vtt", default=True),
        ratio="video",
        caption_background="danger",
        controls=True,
    )
"""
from typing import Optional

import reflex as rx

COLORS = [
    "white", "primary", "secondary", "dark", "success", "warning",
    "danger", "info", "light", "misc", "dawn", "silver",
]

WIDTH_CLASSES = {
    "extra_small": "w-3/12",
    "small": "w-5/12",
    "medium": "w-6/12",
    "large": "w-9/12",
    "extra_large": "w-11/12",
    "full": "w-full",
}

HEIGHT_CLASSES = {
    "extra_small": "h-60",
    "small": "h-64",
    "medium": "h-72",
    "large": "h-80",
    "extra_large": "h-96",
    "auto": "h-auto",
}

ASPECT_RATIOS = {
    "auto": "aspect-auto",
    "square": "aspect-square",
    "video": "aspect-video",
    "4:3": "aspect-[4/3]",
    "3:2": "aspect-[3/2]",
    "21:9": "aspect-[21/9]",
}

ROUNDED_CLASSES = {
    "extra_small": "rounded-sm",
    "small": "rounded",
    "medium": "rounded-md",
    "large": "rounded-lg",
    "extra_large": "rounded-xl",
    "none": "rounded-none",
}

CAPTION_SIZES = {
    "extra_small": "[&::cue]:text-xs",
    "small": "[&::cue]:text-sm",
    "medium": "[&::cue]:text-base",
    "large": "[&::cue]:text-lg",
    "extra_large": "[&::cue]:text-xl",
    "double_large": "[&::cue]:text-2xl",
    "triple_large": "[&::cue]:text-3xl",
    "quadruple_large": "[&::cue]:text-4xl",
}

# (cue background color, cue text class)
CAPTION_BACKGROUNDS = {
    "white": ("#fff", "[&::cue]:text-[#1E1E1E]"),
    "primary": ("#2441de", "[&::cue]:text-white"),
    "secondary": ("#877C7C", "[&::cue]:text-white"),
    "success": ("#6EE7B7", "[&::cue]:text-[#1E1E1E]"),
    "warning": ("#FF8B08", "[&::cue]:text-[#1E1E1E]"),
    "danger": ("#E73B3B", "[&::cue]:text-[#1E1E1E]"),
    "info": ("#004FC4", "[&::cue]:text-[#1E1E1E]"),
    "misc": ("#52059C", "[&::cue]:text-[#1E1E1E]"),
    "dawn": ("#4D4137", "[&::cue]:text-[#1E1E1E]"),
    "light": ("#707483", "[&::cue]:text-[#1E1E1E]"),
    "dark": ("#1E1E1E", "[&::cue]:text-white"),
}

CAPTION_OPACITIES = {
    "transparent": "[&::cue]:bg-opacity-10",
    "translucent": "[&::cue]:bg-opacity-20",
    "semi_transparent": "[&::cue]:bg-opacity-30",
    "lightly_tinted": "[&::cue]:bg-opacity-40",
    "tinted": "[&::cue]:bg-opacity-50",
    "semi_opaque": "[&::cue]:bg-opacity-60",
    "opaque": "[&::cue]:bg-opacity-70",
    "heavily_tinted": "[&::cue]:bg-opacity-80",
    "almost_solid": "[&::cue]:bg-opacity-90",
    "solid": "[&::cue]:bg-opacity-100",
}

UNSUPPORTED_MESSAGE = "Your browser does not support the video tag."


def _lookup(table: dict, value, default: str) -> str:
    if value in table:
        return table[value]
    if isinstance(value, str):
        return value
    return table[default]


def width_class(width) -> str:
    return _lookup(WIDTH_CLASSES, width, "full")


def height_class(height) -> str:
    return _lookup(HEIGHT_CLASSES, height, "auto")


def aspect_ratio(ratio) -> str:
    return _lookup(ASPECT_RATIOS, ratio, "video")


def rounded_size(rounded) -> str:
    return ROUNDED_CLASSES.get(rounded, ROUNDED_CLASSES["none"])


def caption_size(size) -> str:
    return _lookup(CAPTION_SIZES, size, "extra_small")


def caption_background(color) -> str:
    if color in CAPTION_BACKGROUNDS:
        hex_color, text = CAPTION_BACKGROUNDS[color]
        return f"[&::cue]:bg-[linear-gradient({hex_color},{hex_color})] {text}"
    if isinstance(color, str):
        return color
    return caption_background("white")


def caption_opacity(opacity) -> str:
    return _lookup(CAPTION_OPACITIES, opacity, "solid")


def video_class(
    width="full",
    height="auto",
    rounded="none",
    ratio="auto",
    caption_size_name="extra_small",
    caption_background_name="dark",
    caption_opacity_name="solid",
    class_name: Optional[str] = None,
) -> str:
    parts = [
        width_class(width),
        height_class(height),
        rounded_size(rounded),
        aspect_ratio(ratio),
        caption_size(caption_size_name),
        caption_background(caption_background_name),
        caption_opacity(caption_opacity_name),
        class_name,
    ]
    return " ".join(p for p in parts if p)


def video_source(src: str, type: str) -> rx.Component:
    return rx.el.source(src=src, type=type)


def video_track(
    src: str,
    label: Optional[str] = None,
    kind: Optional[str] = None,
    srclang: Optional[str] = None,
    default: bool = False,
) -> rx.Component:
    return rx.el.track(
        src=src,
        label=label or "English",
        kind=kind or "subtitles",
        src_lang=srclang or "en",
        default=default,
    )


def video(
    *children: rx.Component,
    id: Optional[str] = None,
    thumbnail: Optional[str] = None,
    width: str = "full",
    height: str = "auto",
    rounded: str = "none",
    ratio: str = "auto",
    caption_size: str = "extra_small",
    caption_background: str = "dark",
    caption_opacity: str = "solid",
    class_name: Optional[str] = None,
    controls: bool = False,
    auto_play: bool = False,
    loop: bool = False,
    muted: bool = False,
    preload: Optional[str] = None,
) -> rx.Component:
    """
    Embedded video

    Args:
        children: video_source() and video_track() components
        thumbnail: Poster image shown before playback
        ratio: auto | square | video | 4:3 | 3:2 | 21:9 (other strings are used as classes)
    """
    if not any(getattr(c, "tag", None) == "source" for c in children):
        raise ValueError("video requires at least one video_source()")

    props = {}
    if id is not None:
        props["id"] = id
    if thumbnail is not None:
        props["poster"] = thumbnail
    if preload is not None:
        props["preload"] = preload

    return rx.el.video(
        *children,
        UNSUPPORTED_MESSAGE,
        class_name=video_class(
            width, height, rounded, ratio,
            caption_size, caption_background, caption_opacity,
            class_name,
        ),
        controls=controls,
        auto_play=auto_play,
        loop=loop,
        muted=muted,
        **props,
    )
