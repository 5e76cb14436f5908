from __future__ import annotations
import re
from typing import List, Tuple

from PIL import ImageColor

from .utils import clamp01, round_half_up

RGBA = Tuple[int, int, int, int]
GradientStop = Tuple[float, RGBA]

DEFAULT_GRADIENT_ANGLE = 135.0

_RGBA_RE = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+%?)\s*)?\)$",
    re.IGNORECASE,
)
_GRADIENT_RE = re.compile(r"linear-gradient\(\s*(?:([-\d.]+)deg\s*,)?\s*(.+)\)\s*$", re.IGNORECASE)
# split on commas that are not inside rgb()/rgba() parentheses
_STOP_SPLIT_RE = re.compile(r",(?![^(]*\))")


def parse_color(value: str) -> RGBA:
    """CSS-ish colour string to an RGBA tuple.

    Handles ``rgba()`` with a 0-1 (or percent) alpha and ``transparent`` on
    top of everything ``PIL.ImageColor`` understands.
    """
    text = value.strip()
    if text.lower() == "transparent":
        return (0, 0, 0, 0)
    match = _RGBA_RE.match(text)
    if match:
        r, g, b = (max(0, min(255, round_half_up(float(c)))) for c in match.groups()[:3])
        alpha = match.group(4)
        if alpha is None:
            a = 255
        elif alpha.endswith("%"):
            a = round_half_up(clamp01(float(alpha[:-1]) / 100.0) * 255)
        else:
            a = round_half_up(clamp01(float(alpha)) * 255)
        return (r, g, b, a)
    try:
        return ImageColor.getcolor(text, "RGBA")
    except ValueError:
        raise ValueError(f"Unrecognised colour: {value!r}") from None


def with_opacity(color: RGBA, opacity: float) -> RGBA:
    """Scale the alpha channel of ``color`` by ``opacity``."""
    r, g, b, a = color
    return (r, g, b, round_half_up(a * clamp01(opacity)))


def parse_gradient(value: str) -> Tuple[float, List[GradientStop]]:
    """``linear-gradient(<deg>, <color> <pct>, ...)`` to (angle, stops).

    Stops without a percentage are spread evenly. A string that is not a
    gradient is treated as a single solid stop.
    """
    match = _GRADIENT_RE.match(value.strip())
    if not match:
        color = parse_color(value)
        return DEFAULT_GRADIENT_ANGLE, [(0.0, color), (1.0, color)]

    angle = float(match.group(1)) if match.group(1) else 180.0
    parts = [p.strip() for p in _STOP_SPLIT_RE.split(match.group(2)) if p.strip()]
    if not parts:
        raise ValueError(f"Gradient has no colour stops: {value!r}")
    stops: List[GradientStop] = []
    for i, part in enumerate(parts):
        pct = re.search(r"\s([-\d.]+)%$", part)
        if pct:
            offset = float(pct.group(1)) / 100.0
            color_text = part[: pct.start()].strip()
        else:
            offset = i / max(1, len(parts) - 1)
            color_text = part
        stops.append((offset, parse_color(color_text)))
    if len(stops) == 1:
        stops.append((1.0, stops[0][1]))
    stops.sort(key=lambda s: s[0])
    return angle, stops
