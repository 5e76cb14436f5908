from __future__ import annotations
import bisect
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..utils import clamp01, round_half_up
from .config import cfg
from .paths import Point
from .telemetry import CaptureTimeline, ClickEvent, KeystrokeEvent, Size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedFrame:
    """A screen image plus the interaction state at its timestamp."""

    index: int
    image: bytes
    timestamp: float
    cursor_position: Optional[Point]
    click_position: Optional[Point]
    click_progress: Optional[float]
    viewport: Size
    step_index: int
    step_name: Optional[str] = None
    keystrokes_active: Tuple[KeystrokeEvent, ...] = ()


# ---------------------------------------------------------------------------
# Timeline lookups
# ---------------------------------------------------------------------------


def cursor_at(timeline: CaptureTimeline, t: float) -> Point:
    """Cursor position at ``t``, linear between bracketing keyframes.

    Clamped to the first/last keyframe outside the recorded range.
    """
    keys = timeline.cursor
    if not keys:
        return (0.0, 0.0)
    if len(keys) == 1 or t <= keys[0].timestamp:
        return keys[0].position
    if t >= keys[-1].timestamp:
        return keys[-1].position

    times = [k.timestamp for k in keys]
    hi = bisect.bisect_right(times, t)
    before, after = keys[hi - 1], keys[hi]
    span = after.timestamp - before.timestamp
    if span <= 0:
        return after.position
    u = (t - before.timestamp) / span
    (x0, y0), (x1, y1) = before.position, after.position
    return (x0 + (x1 - x0) * u, y0 + (y1 - y0) * u)


def click_at(timeline: CaptureTimeline, t: float) -> Tuple[Optional[ClickEvent], Optional[float]]:
    """(click, progress) for the latest click at or before ``t``.

    Both are ``None`` once ``t`` is past the click effect window.
    """
    clicks = timeline.clicks
    if not clicks:
        return None, None
    times = [c.timestamp for c in clicks]
    pos = bisect.bisect_right(times, t)
    if pos == 0:
        return None, None
    click = clicks[pos - 1]
    elapsed = t - click.timestamp
    if elapsed > cfg.CLICK_EFFECT_MS:
        return None, None
    return click, clamp01(elapsed / cfg.CLICK_EFFECT_MS)


def keystrokes_until(timeline: CaptureTimeline, t: float) -> Tuple[KeystrokeEvent, ...]:
    times = [k.timestamp for k in timeline.keystrokes]
    return tuple(timeline.keystrokes[: bisect.bisect_right(times, t)])


def step_at(timeline: CaptureTimeline, t: float) -> Tuple[int, Optional[str]]:
    """(index, name) of the step running at ``t``; step 0 before the first mark."""
    steps = timeline.steps
    if not steps:
        return 0, None
    times = [s.timestamp for s in steps]
    pos = bisect.bisect_right(times, t)
    mark = steps[max(0, pos - 1)]
    return mark.index, mark.name


def _resolve(timeline: CaptureTimeline, index: int, image: bytes, t: float) -> ResolvedFrame:
    click, progress = click_at(timeline, t)
    step_index, step_name = step_at(timeline, t)
    return ResolvedFrame(
        index=index,
        image=image,
        timestamp=t,
        cursor_position=cursor_at(timeline, t),
        click_position=click.position if click is not None else None,
        click_progress=progress,
        viewport=timeline.viewport,
        step_index=step_index,
        step_name=step_name,
        keystrokes_active=keystrokes_until(timeline, t),
    )


# ---------------------------------------------------------------------------
# Passes
# ---------------------------------------------------------------------------


def build_frames(timeline: CaptureTimeline) -> List[ResolvedFrame]:
    """One ResolvedFrame per raw sample, dropping samples from before first paint."""
    samples = timeline.samples
    start = timeline.first_content_time
    if start is not None:
        samples = [s for s in samples if s.arrival_time >= start]
    frames = [_resolve(timeline, i, s.image, s.arrival_time) for i, s in enumerate(samples)]
    logger.debug("Built %d frames from %d raw samples", len(frames), len(timeline.samples))
    return frames


def nearest_frame(frames: Sequence[ResolvedFrame], t: float) -> ResolvedFrame:
    """Frame whose timestamp is closest to ``t``; the earliest wins a tie."""
    best = frames[0]
    best_dist = abs(best.timestamp - t)
    for frame in frames[1:]:
        dist = abs(frame.timestamp - t)
        if dist < best_dist:
            best, best_dist = frame, dist
    return best


def resample(
    frames: List[ResolvedFrame],
    recording_duration_ms: float,
    fps: float,
    timeline: CaptureTimeline,
) -> List[ResolvedFrame]:
    """Stretch ``frames`` to ``round(duration * fps)`` evenly spaced frames.

    Images are reused from the nearest raw frame; cursor, click, keystroke
    and step state are re-derived from ``timeline`` at each new timestamp.
    Never drops frames: when the target count does not exceed the input
    length the input list itself is returned.
    """
    if not frames:
        return frames
    target = max(len(frames), round_half_up(recording_duration_ms / 1000.0 * fps))
    if target <= len(frames):
        return frames

    start, end = frames[0].timestamp, frames[-1].timestamp
    out: List[ResolvedFrame] = []
    for i in range(target):
        t = end if i == target - 1 else start + (i / (target - 1)) * (end - start)
        source = nearest_frame(frames, t)
        out.append(_resolve(timeline, i, source.image, t))

    logger.debug("Resampled %d frames to %d at %.1f fps", len(frames), target, fps)
    return out
