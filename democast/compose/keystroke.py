from __future__ import annotations
import math
from typing import Sequence

from PIL import Image, ImageDraw, ImageFont

from ..capture.telemetry import KeystrokeEvent
from ..scenario.models import KeystrokeConfig
from ..colors import parse_color, with_opacity
from .config import ccfg


def hud_opacity(age_ms: float, fade_after_ms: float) -> float:
    """Full opacity until 60% of ``fade_after_ms``, then a linear fade to 0."""
    fade_start = fade_after_ms * ccfg.HUD_FADE_START
    if age_ms <= fade_start:
        return 1.0
    span = fade_after_ms - fade_start
    if span <= 0:
        return 0.0
    return max(0.0, 1.0 - (age_ms - fade_start) / span)


def draw_keystroke_hud(
    image: Image.Image,
    keystrokes: Sequence[KeystrokeEvent],
    timestamp: float,
    config: KeystrokeConfig,
) -> Image.Image:
    """Pill near the bottom edge showing the keys typed within ``fade_after``."""
    recent = [k for k in keystrokes if timestamp - k.timestamp < config.fade_after]
    text = "".join(k.key for k in recent).replace("\n", "⏎")
    if not text:
        return image
    opacity = hud_opacity(timestamp - recent[-1].timestamp, config.fade_after)
    if opacity <= 0:
        return image

    width, height = image.size
    font = ImageFont.load_default(size=config.font_size)
    pad_h = config.padding * 2
    pad_v = config.padding * 1.5
    hud_w = min(math.ceil(font.getlength(text)) + pad_h * 2, width - 40)
    hud_h = math.ceil(config.font_size + pad_v * 2)

    # keep the newest characters when the text is wider than the pill
    while len(text) > 1 and font.getlength(text) > hud_w - pad_h * 2:
        text = text[1:]

    if config.position == "bottom-left":
        x = ccfg.HUD_SIDE_MARGIN
    elif config.position == "bottom-right":
        x = width - hud_w - ccfg.HUD_SIDE_MARGIN
    else:
        x = round((width - hud_w) / 2)
    y = height - hud_h - ccfg.HUD_BOTTOM_MARGIN

    layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)
    draw.rounded_rectangle(
        (x, y, x + hud_w, y + hud_h),
        radius=ccfg.HUD_CORNER_RADIUS,
        fill=with_opacity(parse_color(config.background_color), opacity),
    )
    draw.text(
        (x + pad_h, y + hud_h / 2),
        text,
        font=font,
        fill=with_opacity(parse_color(config.text_color), opacity),
        anchor="lm",
    )
    return Image.alpha_composite(image, layer)
