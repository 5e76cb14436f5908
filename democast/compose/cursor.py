from __future__ import annotations
import math
from typing import Sequence, Tuple

from PIL import Image, ImageDraw, ImageFilter

from ..capture.paths import Point
from ..scenario.models import CursorConfig
from ..utils import clamp, clamp01, round_half_up
from ..colors import parse_color, with_opacity
from .config import ccfg


def _layer(image: Image.Image) -> Tuple[Image.Image, ImageDraw.ImageDraw]:
    layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    return layer, ImageDraw.Draw(layer)


def draw_highlight(image: Image.Image, position: Point, config: CursorConfig) -> Image.Image:
    """Soft glow centred on the cursor."""
    r = config.highlight_radius
    if r <= 0:
        return image
    layer, draw = _layer(image)
    x, y = position
    # solid core out to 70% of the radius, blur supplies the falloff
    core = r * 0.7
    draw.ellipse((x - core, y - core, x + core, y + core), fill=parse_color(config.highlight_color))
    layer = layer.filter(ImageFilter.GaussianBlur(max(1.0, r * ccfg.HIGHLIGHT_BLUR_RATIO)))
    return Image.alpha_composite(image, layer)


def draw_trail(image: Image.Image, positions: Sequence[Point], config: CursorConfig) -> Image.Image:
    """Line segments through recent cursor positions, oldest faintest and thinnest."""
    if len(positions) < 2:
        return image
    layer, draw = _layer(image)
    color = parse_color(config.trail_color)
    n = len(positions)
    for i in range(1, n):
        weight = i / n
        draw.line(
            (positions[i - 1], positions[i]),
            fill=with_opacity(color, weight * ccfg.TRAIL_MAX_OPACITY),
            width=max(1, round_half_up(1 + weight * 2)),
            joint="curve",
        )
    return Image.alpha_composite(image, layer)


def draw_cursor(image: Image.Image, position: Point, config: CursorConfig) -> Image.Image:
    """Arrow pointer with its bounding box anchored at ``position``."""
    width, height = image.size
    left = clamp(round_half_up(position[0]), 0, width - 1)
    top = clamp(round_half_up(position[1]), 0, height - 1)
    scale = config.size / ccfg.CURSOR_BOX
    shape = [(left + px * scale, top + py * scale) for px, py in ccfg.CURSOR_SHAPE]

    layer, draw = _layer(image)
    draw.polygon(
        shape,
        fill=parse_color(config.color),
        outline=ccfg.CURSOR_OUTLINE,
        width=max(1, round_half_up(1.5 * scale)),
    )
    return Image.alpha_composite(image, layer)


def draw_click_ripple(
    image: Image.Image, position: Point, config: CursorConfig, progress: float
) -> Image.Image:
    """Expanding, fading ring plus a soft inner disc.

    At ``progress`` 0 the ripple is a point at full opacity; at 1 it has
    reached ``click_radius`` and vanished.
    """
    progress = clamp01(progress)
    opacity = 1.0 - progress
    radius = config.click_radius * progress
    if radius <= 0 or opacity <= 0:
        return image

    width, height = image.size
    box = math.ceil(config.click_radius * 2 + 4)
    left = clamp(round_half_up(position[0] - box / 2), 0, max(0, width - box))
    top = clamp(round_half_up(position[1] - box / 2), 0, max(0, height - box))
    cx, cy = left + box / 2, top + box / 2

    color = parse_color(config.click_color)
    layer, draw = _layer(image)
    inner = radius * ccfg.RIPPLE_INNER_RATIO
    draw.ellipse(
        (cx - inner, cy - inner, cx + inner, cy + inner),
        fill=with_opacity(color, opacity * ccfg.RIPPLE_INNER_OPACITY),
    )
    draw.ellipse(
        (cx - radius, cy - radius, cx + radius, cy + radius),
        outline=with_opacity(color, opacity),
        width=ccfg.RIPPLE_STROKE,
    )
    return Image.alpha_composite(image, layer)
