from __future__ import annotations
from typing import Callable, Dict, List, Sequence, Tuple

from ..utils import clamp
from .config import cfg

Point = Tuple[float, float]
Easing = Callable[[float], float]


def ease_in_out_cubic(t: float) -> float:
    """Cubic ease-in/ease-out; symmetric, f(t) + f(1 - t) == 1."""
    if t < 0.5:
        return 4 * t * t * t
    return 1 - ((-2 * t + 2) ** 3) / 2


def ease_in_cubic(t: float) -> float:
    return t * t * t


def ease_out_cubic(t: float) -> float:
    return 1 - (1 - t) ** 3


def linear(t: float) -> float:
    return t


_EASINGS: Dict[str, Easing] = {
    "ease-in-out": ease_in_out_cubic,
    "ease-in": ease_in_cubic,
    "ease-out": ease_out_cubic,
    "linear": linear,
}


def get_easing(name: str) -> Easing:
    """Look up an easing function by its scenario name."""
    try:
        return _EASINGS[name]
    except KeyError:
        raise ValueError(f"Unknown easing: {name!r}") from None


def interpolate_path(start: Point, end: Point, steps: int) -> List[Point]:
    """Curved cursor path from ``start`` to ``end`` with ``steps + 1`` points.

    The path is a cubic Bézier whose control points sit a quarter and three
    quarters of the way along the segment, pushed sideways by a tenth of its
    length in opposite directions, which gives a gentle S-shaped arc. Each
    parameter is eased so the cursor accelerates and decelerates.
    """
    if steps <= 0:
        return [end]
    if steps == 1:
        return [start, end]

    start_x, start_y = start
    end_x, end_y = end
    delta_x, delta_y = end_x - start_x, end_y - start_y

    cp1_x = start_x + delta_x * 0.25 + delta_y * 0.1
    cp1_y = start_y + delta_y * 0.25 - delta_x * 0.1
    cp2_x = start_x + delta_x * 0.75 - delta_y * 0.1
    cp2_y = start_y + delta_y * 0.75 + delta_x * 0.1

    points: List[Point] = []
    for i in range(steps + 1):
        t = ease_in_out_cubic(i / steps)
        u = 1 - t
        x = u * u * u * start_x + 3 * u * u * t * cp1_x + 3 * u * t * t * cp2_x + t * t * t * end_x
        y = u * u * u * start_y + 3 * u * u * t * cp1_y + 3 * u * t * t * cp2_y + t * t * t * end_y
        points.append((x, y))
    return points


def smooth_path(points: Sequence[Point], tension: float = 0.5) -> List[Point]:
    """One pass of Chaikin corner-cutting smoothing. Preserves endpoints."""
    if len(points) < 3:
        return list(points)

    cut = 0.25 * clamp(tension, 0.0, 1.0)
    smoothed: List[Point] = [points[0]]
    for i in range(len(points) - 1):
        (x0, y0), (x1, y1) = points[i], points[i + 1]
        smoothed.append((x0 + (x1 - x0) * cut, y0 + (y1 - y0) * cut))
        smoothed.append((x0 + (x1 - x0) * (1 - cut), y0 + (y1 - y0) * (1 - cut)))
    smoothed.append(points[-1])
    return smoothed


def speed_preset(name: str) -> Tuple[int, int]:
    """(steps, per-step delay ms) for a cursor speed name."""
    try:
        return cfg.CURSOR_SPEED_PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown cursor speed: {name!r}") from None
