from __future__ import annotations
import dataclasses
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from ..capture.paths import Easing, Point, ease_in_out_cubic, get_easing
from ..capture.resampler import ResolvedFrame
from ..scenario.models import EffectsConfig, SpeedRampConfig, Step
from ..utils import round_half_up
from .config import ccfg
from .transition import blend

logger = logging.getLogger(__name__)


@dataclass
class FrameContext:
    """Per-frame render parameters derived from the whole sequence."""

    zoom_scale: float = 1.0
    click_progress: Optional[float] = None
    cursor_trail: List[Point] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Speed ramp
# ---------------------------------------------------------------------------


def action_frame_indices(frames: Sequence[ResolvedFrame], radius: int) -> Set[int]:
    """Indices within ``radius`` frames of any frame that carries a click."""
    marked: Set[int] = set()
    last = len(frames) - 1
    for i, frame in enumerate(frames):
        if frame.click_position is not None:
            marked.update(range(max(0, i - radius), min(last, i + radius) + 1))
    return marked


def apply_speed_ramp(
    frames: List[ResolvedFrame], config: SpeedRampConfig, fps: float
) -> List[ResolvedFrame]:
    """Slow down around clicks and speed up idle stretches.

    Frames within one second of a click are repeated
    ``round(1 / action_speed)`` times; of the remaining frames only every
    ``round(idle_speed)``-th (by original index) is kept. Returns a new,
    contiguously re-indexed list.
    """
    if not config.enabled or not frames:
        return frames

    action = action_frame_indices(frames, round_half_up(fps * ccfg.SPEED_RAMP_RADIUS_S))
    copies = max(1, round_half_up(1 / config.action_speed))
    skip = max(1, round_half_up(config.idle_speed))

    out: List[ResolvedFrame] = []
    for i, frame in enumerate(frames):
        if i in action:
            repeat = copies
        elif i % skip == 0:
            repeat = 1
        else:
            continue
        for _ in range(repeat):
            out.append(dataclasses.replace(frame, index=len(out)))

    logger.debug(
        "Speed ramp: %d -> %d frames (%d action frames)", len(frames), len(out), len(action)
    )
    return out


# ---------------------------------------------------------------------------
# Adaptive zoom
# ---------------------------------------------------------------------------


def click_distances(frames: Sequence[ResolvedFrame]) -> List[Optional[int]]:
    """Frame distance from every index to the nearest click frame (None without clicks)."""
    n = len(frames)
    dist: List[Optional[int]] = [None] * n
    last = None
    for i in range(n):
        if frames[i].click_position is not None:
            last = i
        if last is not None:
            dist[i] = i - last
    last = None
    for i in range(n - 1, -1, -1):
        if frames[i].click_position is not None:
            last = i
        if last is not None and (dist[i] is None or last - i < dist[i]):
            dist[i] = last - i
    return dist


def zoom_for_distance(
    distance: Optional[int],
    max_scale: float,
    transition_frames: int,
    easing: Easing = ease_in_out_cubic,
) -> float:
    if distance is None or max_scale <= 1:
        return 1.0
    if transition_frames <= 0:
        return max_scale if distance == 0 else 1.0
    if distance > transition_frames:
        return 1.0
    return 1.0 + (max_scale - 1.0) * easing(1.0 - distance / transition_frames)


def calculate_adaptive_zoom(
    frames: Sequence[ResolvedFrame],
    index: int,
    max_scale: float,
    transition_frames: int,
    easing: Easing = ease_in_out_cubic,
) -> float:
    """Zoom scale at ``index`` from its distance to the nearest click frame.

    ``max_scale`` on a click frame, easing down to 1 at ``transition_frames``
    away and beyond; 1 everywhere when no frame carries a click.
    """
    return zoom_for_distance(click_distances(frames)[index], max_scale, transition_frames, easing)


def transition_frame_count(fps: float, duration_ms: float) -> int:
    return round_half_up(fps * duration_ms / 1000.0)


# ---------------------------------------------------------------------------
# Frame contexts
# ---------------------------------------------------------------------------


def calculate_frame_contexts(
    frames: Sequence[ResolvedFrame], effects: EffectsConfig, fps: float
) -> List[FrameContext]:
    zoom = effects.zoom
    transition = transition_frame_count(fps, zoom.duration)
    easing = get_easing(zoom.easing)
    distances = click_distances(frames) if zoom.enabled else [None] * len(frames)
    trail_length = effects.cursor.trail_length

    contexts: List[FrameContext] = []
    for i, frame in enumerate(frames):
        if frame.click_position is None:
            progress = None
        elif frame.click_progress is None:
            progress = ccfg.CLICK_PROGRESS_FALLBACK
        else:
            progress = frame.click_progress

        trail = [
            f.cursor_position
            for f in frames[max(0, i - trail_length) : i + 1]
            if f.cursor_position is not None
        ]
        contexts.append(
            FrameContext(
                zoom_scale=zoom_for_distance(distances[i], zoom.scale, transition, easing),
                click_progress=progress,
                cursor_trail=trail,
            )
        )
    return contexts


# ---------------------------------------------------------------------------
# Crossfades
# ---------------------------------------------------------------------------


def find_fade_boundaries(frames: Sequence[ResolvedFrame], steps: Sequence[Step]) -> List[int]:
    """Indices where the step changes into a step whose transition is ``fade``."""
    boundaries = []
    for i in range(1, len(frames)):
        step_index = frames[i].step_index
        if step_index == frames[i - 1].step_index:
            continue
        if 0 <= step_index < len(steps) and steps[step_index].transition == "fade":
            boundaries.append(i)
    return boundaries


def crossfade_window(boundary: int, count: int, fps: float) -> Optional[Tuple[int, int]]:
    """(start, end) frame indices blended around ``boundary``, or None when too narrow."""
    width = max(2, round_half_up(fps * ccfg.CROSSFADE_SECONDS))
    start = max(0, boundary - width // 2)
    end = min(count - 1, boundary + math.ceil(width / 2))
    if end - start < 2:
        return None
    return start, end


def apply_crossfades(rendered, frames: Sequence[ResolvedFrame], steps: Sequence[Step], fps: float) -> None:
    """Blend rendered frames across every ``fade`` step boundary, in place.

    Each window blends between its two endpoint frames as they stand when
    the window is reached, so a window that overlaps an earlier one blends
    frames that were already blended.
    """
    for boundary in find_fade_boundaries(frames, steps):
        window = crossfade_window(boundary, len(rendered), fps)
        if window is None:
            continue
        start, end = window
        first, last = rendered[start].pixels, rendered[end].pixels
        for i in range(start + 1, end):
            rendered[i].pixels = blend(first, last, (i - start) / (end - start))
        logger.debug("Crossfade frames %d..%d around boundary %d", start, end, boundary)
