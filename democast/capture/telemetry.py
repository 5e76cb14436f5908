from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
import logging

from ..utils import monotonic_ms
from .paths import Point

Size = Tuple[int, int]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawSample:
    """One encoded screen image as delivered by the sample channel."""

    image: bytes
    arrival_time: float  # ms, same clock as every timeline


@dataclass(frozen=True)
class CursorKeyframe:
    position: Point
    timestamp: float


@dataclass(frozen=True)
class ClickEvent:
    position: Point
    timestamp: float


@dataclass(frozen=True)
class KeystrokeEvent:
    key: str
    timestamp: float


@dataclass(frozen=True)
class StepMark:
    """Start of a scenario step."""

    index: int
    name: Optional[str]
    timestamp: float


@dataclass
class CaptureTimeline:
    """Everything recorded during one capture run.

    Responsibilities:
      - Owns the append-only cursor, click, keystroke and step timelines plus
        the raw screen samples, all stamped from a single monotonic clock.
      - Seeds the cursor timeline when capture starts so it is never empty.
      - Refuses appends once frozen, so later passes see a fixed history.

    A fresh instance is created for every recording; nothing here is shared
    between sessions.
    """

    viewport: Size
    clock: Callable[[], float] = monotonic_ms
    samples: List[RawSample] = field(default_factory=list)
    cursor: List[CursorKeyframe] = field(default_factory=list)
    clicks: List[ClickEvent] = field(default_factory=list)
    keystrokes: List[KeystrokeEvent] = field(default_factory=list)
    steps: List[StepMark] = field(default_factory=list)
    first_content_time: Optional[float] = None
    cursor_position: Point = (0.0, 0.0)
    frozen: bool = False

    def now(self) -> float:
        """Current time on the timeline clock (ms)."""
        return self.clock()

    def _check_open(self) -> None:
        if self.frozen:
            raise RuntimeError("Capture timeline is frozen")

    def log_sample(self, image: bytes) -> RawSample:
        """Append a raw screen sample stamped with its arrival time."""
        self._check_open()
        sample = RawSample(image, self.now())
        self.samples.append(sample)
        return sample

    def log_cursor(self, position: Point) -> None:
        """Append a cursor keyframe and remember it as the current position."""
        self._check_open()
        self.cursor_position = (float(position[0]), float(position[1]))
        self.cursor.append(CursorKeyframe(self.cursor_position, self.now()))

    def log_click(self, position: Point) -> None:
        self._check_open()
        self.clicks.append(ClickEvent((float(position[0]), float(position[1])), self.now()))

    def log_keystroke(self, key: str) -> None:
        self._check_open()
        self.keystrokes.append(KeystrokeEvent(key, self.now()))

    def mark_step(self, index: int, name: Optional[str] = None) -> None:
        self._check_open()
        self.steps.append(StepMark(index, name, self.now()))

    def mark_first_content(self) -> None:
        """Record when page content first painted; later calls are ignored."""
        if self.first_content_time is None:
            self.first_content_time = self.now()
            logger.debug("First content painted at %.1f ms", self.first_content_time)

    def freeze(self) -> None:
        """Stop accepting appends."""
        self.frozen = True
