from __future__ import annotations
import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Tuple

from ..errors import CaptureError
from .config import cfg

logger = logging.getLogger(__name__)

SampleSink = Callable[[bytes], Any]
Sleep = Callable[[float], Awaitable[Any]]


class SampleChannel:
    """Capacity-1 handoff between the provider's screencast and a recording.

    The provider calls :meth:`deliver` for every frame it produces. The
    consumer task stores the image through ``sink`` and only then
    acknowledges the frame back to the provider, which withholds the next
    frame until that acknowledgement arrives. At most one frame is ever
    buffered.
    """

    def __init__(self, provider, sink: SampleSink, *, sleep: Sleep = asyncio.sleep):
        self.provider = provider
        self.sink = sink
        self.sleep = sleep
        self.delivered = 0
        self.failure: Optional[CaptureError] = None
        self._queue: "asyncio.Queue[Tuple[bytes, Any]]" = asyncio.Queue(maxsize=1)
        self._consumer: Optional[asyncio.Task] = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        """Start the consumer task and the provider's screencast."""
        if self._open:
            return
        self._open = True
        self._consumer = asyncio.create_task(self._consume())
        try:
            await self.provider.start_screencast(self.deliver)
        except Exception as exc:
            self._open = False
            self._consumer.cancel()
            raise CaptureError(f"Could not start screen capture: {exc}") from exc
        logger.debug("Sample channel open")

    async def deliver(self, image: bytes, ack_token: Any) -> None:
        """Producer side: hand one frame to the consumer (waits while full)."""
        if not self._open:
            return
        await self._queue.put((image, ack_token))

    async def _consume(self) -> None:
        while True:
            image, ack_token = await self._queue.get()
            try:
                self.sink(image)
                self.delivered += 1
                if self._open:
                    await self.provider.ack_screencast(ack_token)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.failure = CaptureError(f"Sample channel failed: {exc}")
                self.failure.__cause__ = exc
                logger.warning("Sample channel failed after %d samples", self.delivered, exc_info=True)
                return
            finally:
                self._queue.task_done()

    def raise_if_failed(self) -> None:
        if self.failure is not None:
            raise self.failure

    async def close(self, grace_ms: float = cfg.FLUSH_GRACE_MS) -> None:
        """Stop the screencast, let queued samples drain, then stop the consumer."""
        if not self._open:
            return
        self._open = False
        try:
            await self.provider.stop_screencast()
        except Exception:
            logger.warning("Stopping the screencast failed", exc_info=True)
        if grace_ms > 0:
            await self.sleep(grace_ms / 1000.0)
        if self._consumer is not None:
            self._consumer.cancel()
            try:
                await self._consumer
            except asyncio.CancelledError:
                pass
            self._consumer = None
        logger.debug("Sample channel closed after %d samples", self.delivered)
