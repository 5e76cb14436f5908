from __future__ import annotations
import abc
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

Point = Tuple[float, float]
Size = Tuple[int, int]

# handler(image_bytes, ack_token)
ScreencastHandler = Callable[[bytes, Any], Awaitable[None]]


class AutomationProvider(abc.ABC):
    """Browser session the capture builder drives.

    One instance serves one recording: ``launch`` opens the session and
    ``close`` releases everything, and must be safe to call more than once.
    Screen samples are pushed to the handler given to ``start_screencast``;
    the provider must not emit the next sample until ``ack_screencast`` is
    called with the previous sample's token.
    """

    @abc.abstractmethod
    async def launch(self, viewport: Size) -> None: ...

    @abc.abstractmethod
    async def close(self) -> None: ...

    @abc.abstractmethod
    async def start_screencast(self, handler: ScreencastHandler) -> None: ...

    @abc.abstractmethod
    async def ack_screencast(self, token: Any) -> None: ...

    @abc.abstractmethod
    async def stop_screencast(self) -> None: ...

    @abc.abstractmethod
    async def navigate(self, url: str, wait_until: str = "load") -> None:
        """Load ``url`` and wait for the given readiness state.

        Raises NavigationError when the page cannot be loaded.
        """

    @abc.abstractmethod
    async def evaluate(self, expression: str, await_promise: bool = False) -> Any: ...

    @abc.abstractmethod
    async def element_rect(self, selector: str, timeout_s: float) -> Optional[Dict[str, float]]:
        """{x, y, width, height, cx, cy} of the first visible match, or None on timeout."""

    @abc.abstractmethod
    async def mouse_move(self, x: float, y: float) -> None: ...

    @abc.abstractmethod
    async def click(self, selector: str, point: Point, delay_ms: Optional[float] = None) -> None: ...

    @abc.abstractmethod
    async def hover(self, selector: str, point: Point) -> None: ...

    @abc.abstractmethod
    async def type_char(self, char: str, delay_ms: float = 0) -> None: ...

    @abc.abstractmethod
    async def scroll(self, selector: Optional[str], x: float, y: float, smooth: bool = True) -> None: ...
