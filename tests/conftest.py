"""Shared fixtures: a virtual clock and a scripted automation provider."""

import asyncio
import io
from typing import Any, Dict, List, Optional, Tuple

import pytest
from PIL import Image

from democast.driver.base import AutomationProvider

pytest_plugins = ["pytest_asyncio"]


def image_bytes(size=(160, 100), color=(200, 200, 200), fmt="JPEG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeClock:
    """Millisecond clock that only moves when something sleeps on it."""

    def __init__(self, start: float = 10_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms

    async def sleep(self, seconds: float) -> None:
        self.now += seconds * 1000.0
        # let the sample consumer run
        for _ in range(3):
            await asyncio.sleep(0)


def rect_at(cx: float, cy: float, w: float = 80, h: float = 30) -> Dict[str, float]:
    return {"x": cx - w / 2, "y": cy - h / 2, "width": w, "height": h, "cx": cx, "cy": cy}


class FakeProvider(AutomationProvider):
    """Emits one screen sample per ``evaluate`` call, gated on the previous ack."""

    def __init__(
        self,
        clock: FakeClock,
        elements: Optional[Dict[str, Dict[str, float]]] = None,
        *,
        frame: Optional[bytes] = None,
        ack_error: Optional[Exception] = None,
        launch_error: Optional[Exception] = None,
    ):
        self.clock = clock
        self.elements = elements or {}
        self.frame = frame or image_bytes()
        self.ack_error = ack_error
        self.launch_error = launch_error

        self.launched = False
        self.closed = False
        self.viewport: Optional[Tuple[int, int]] = None
        self.navigations: List[Tuple[str, str]] = []
        self.evaluations: List[str] = []
        self.moves: List[Tuple[float, float]] = []
        self.clicks: List[Tuple[str, Tuple[float, float]]] = []
        self.hovers: List[str] = []
        self.typed: List[str] = []
        self.scrolls: List[Tuple[Any, float, float, bool]] = []
        self.acked: List[int] = []
        self.emitted = 0

        self._handler = None
        self._pending = False

    async def _emit(self) -> None:
        if self._handler is None or self._pending:
            return
        self._pending = True
        self.emitted += 1
        await self._handler(self.frame, self.emitted)

    async def launch(self, viewport):
        if self.launch_error is not None:
            raise self.launch_error
        self.launched = True
        self.viewport = viewport

    async def close(self):
        self.closed = True

    async def start_screencast(self, handler):
        self._handler = handler
        await self._emit()

    async def ack_screencast(self, token):
        if self.ack_error is not None:
            raise self.ack_error
        self.acked.append(token)
        self._pending = False

    async def stop_screencast(self):
        self._handler = None

    async def navigate(self, url, wait_until="load"):
        self.navigations.append((url, wait_until))
        self.clock.advance(50)

    async def evaluate(self, expression, await_promise=False):
        self.evaluations.append(expression)
        await self._emit()

    async def element_rect(self, selector, timeout_s):
        rect = self.elements.get(selector)
        if rect is None:
            self.clock.advance(timeout_s * 1000.0)
        return rect

    async def mouse_move(self, x, y):
        self.moves.append((x, y))

    async def click(self, selector, point, delay_ms=None):
        self.clicks.append((selector, point))

    async def hover(self, selector, point):
        self.hovers.append(selector)

    async def type_char(self, char, delay_ms=0):
        self.typed.append(char)
        self.clock.advance(delay_ms)

    async def scroll(self, selector, x, y, smooth=True):
        self.scrolls.append((selector, x, y, smooth))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def provider(clock):
    return FakeProvider(clock, {"#cta": rect_at(640, 400), "#email": rect_at(300, 200)})
