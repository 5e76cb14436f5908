from __future__ import annotations
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

from ..scenario.models import DeviceFrameConfig
from .config import ccfg

Inset = Tuple[int, int]


def content_inset(config: DeviceFrameConfig) -> Inset:
    """Top-left offset of the page content once the device frame is drawn."""
    if not config.enabled:
        return (0, 0)
    if config.type == "browser":
        return (0, ccfg.TITLE_BAR_HEIGHT)
    if config.type in ccfg.BEZELS:
        sides, top, _ = ccfg.BEZELS[config.type]
        return (sides, top)
    return (0, 0)


def _rounded_mask(size: Tuple[int, int], radius: int) -> Image.Image:
    mask = Image.new("L", size, 0)
    ImageDraw.Draw(mask).rounded_rectangle((0, 0, size[0] - 1, size[1] - 1), radius=radius, fill=255)
    return mask


def _browser_frame(image: Image.Image, dark: bool) -> Image.Image:
    width, height = image.size
    bar = ccfg.TITLE_BAR_HEIGHT
    canvas = Image.new("RGBA", (width, height + bar), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)

    draw.rectangle((0, 0, width, bar - 1), fill="#2d2d2d" if dark else "#e8e8e8")
    r = ccfg.TRAFFIC_LIGHT_RADIUS
    for i, color in enumerate(ccfg.TRAFFIC_LIGHT_COLORS):
        cx = ccfg.TRAFFIC_LIGHTS_START_X + i * ccfg.TRAFFIC_LIGHT_GAP
        cy = ccfg.TRAFFIC_LIGHT_Y
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill=color)

    bar_x0 = ccfg.ADDRESS_BAR_MARGIN
    bar_x1 = width - ccfg.ADDRESS_BAR_MARGIN
    if bar_x1 > bar_x0:
        bar_y0 = (bar - ccfg.ADDRESS_BAR_HEIGHT) // 2
        draw.rounded_rectangle(
            (bar_x0, bar_y0, bar_x1, bar_y0 + ccfg.ADDRESS_BAR_HEIGHT),
            radius=6,
            fill="#1a1a1a" if dark else "#ffffff",
            outline="#444444" if dark else "#d0d0d0",
        )
        font = ImageFont.load_default(size=12)
        draw.text(
            (width / 2, bar_y0 + ccfg.ADDRESS_BAR_HEIGHT / 2),
            ccfg.ADDRESS_BAR_TEXT,
            fill="#999999" if dark else "#666666",
            font=font,
            anchor="mm",
        )

    canvas.alpha_composite(image, (0, bar))
    return canvas


def _mobile_frame(image: Image.Image, device: str, dark: bool) -> Image.Image:
    width, height = image.size
    sides, top, bottom = ccfg.BEZELS[device]
    outer, inner = ccfg.BEZEL_RADII[device]
    total_w, total_h = width + sides * 2, height + top + bottom

    canvas = Image.new("RGBA", (total_w, total_h), (0, 0, 0, 0))
    draw = ImageDraw.Draw(canvas)
    body = "#1a1a1a" if dark else ("#e8e8e8" if device == "android" else "#f5f5f7")
    draw.rounded_rectangle((0, 0, total_w - 1, total_h - 1), radius=outer, fill=body)

    screen = image.copy()
    screen.putalpha(_rounded_mask(screen.size, inner))
    canvas.alpha_composite(screen, (sides, top))

    if device == "iphone":
        island_w, island_h = ccfg.IPHONE_ISLAND
        x0 = (total_w - island_w) / 2
        y0 = (top - island_h) / 2 + 4
        draw.rounded_rectangle(
            (x0, y0, x0 + island_w, y0 + island_h),
            radius=island_h / 2,
            fill="#000000" if dark else "#1a1a1a",
        )
        bar_w, bar_h = ccfg.IPHONE_HOME_BAR
        x0 = (total_w - bar_w) / 2
        y0 = total_h - bottom / 2 - bar_h / 2
        draw.rounded_rectangle(
            (x0, y0, x0 + bar_w, y0 + bar_h),
            radius=bar_h / 2,
            fill="#555555" if dark else "#333333",
        )
    else:
        r = ccfg.IPAD_CAMERA_RADIUS if device == "ipad" else ccfg.ANDROID_CAMERA_RADIUS
        cx, cy = total_w / 2, top / 2
        draw.ellipse((cx - r, cy - r, cx + r, cy + r), fill="#2a2a2a" if dark else "#3a3a3a")
    return canvas


def apply_device_frame(image: Image.Image, config: DeviceFrameConfig) -> Image.Image:
    """Wrap ``image`` in browser chrome or a phone/tablet bezel.

    ``macbook`` and ``none`` pass the image through unchanged.
    """
    if not config.enabled or config.type == "none":
        return image
    if config.type == "browser":
        return _browser_frame(image, config.dark_mode)
    if config.type in ccfg.BEZELS:
        return _mobile_frame(image, config.type, config.dark_mode)
    return image
