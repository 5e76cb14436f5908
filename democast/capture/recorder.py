from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Optional

from ..errors import (
    ActionExecutionError,
    CaptureFailure,
    ElementNotFound,
    InvalidSelector,
)
from ..scenario.models import (
    ClickAction,
    HoverAction,
    NavigateAction,
    Scenario,
    ScreenshotAction,
    ScrollAction,
    Step,
    TypeAction,
    WaitAction,
    is_safe_selector,
)
from ..utils import monotonic_ms, round_half_up
from .channel import SampleChannel
from .config import cfg
from .paths import Point, interpolate_path, smooth_path, speed_preset
from .resampler import ResolvedFrame, build_frames, resample
from .telemetry import CaptureTimeline, Size

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[Any]]


@dataclass
class CaptureSession:
    """Result of one recording (complete, or partial when attached to an error)."""

    scenario: Scenario
    frames: List[ResolvedFrame]
    start_time: float
    end_time: float
    timeline: CaptureTimeline

    @property
    def duration_ms(self) -> float:
        return self.end_time - self.start_time


class CaptureTimelineBuilder:
    """Runs a scenario against an automation provider and records it.

    Actions execute strictly one after another on the calling task while the
    sample channel collects screen images in the background. Every action
    appends to the session's timelines using the same clock that stamps the
    images, so the two are reconciled later purely by timestamp.

    ``clock`` (ms) and ``sleep`` (seconds) are injectable so the whole run can
    be driven by a virtual clock.
    """

    def __init__(self, provider, *, clock: Clock = monotonic_ms, sleep: Sleep = asyncio.sleep):
        self.provider = provider
        self.clock = clock
        self.sleep = sleep
        self.timeline: Optional[CaptureTimeline] = None
        self.channel: Optional[SampleChannel] = None
        self.fps: float = 30
        self.cursor_speed = "fast"
        self.smoothing = False

    @property
    def capturing(self) -> bool:
        return self.channel is not None and self.channel.is_open

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    async def init(
        self, viewport: Size, fps: float, cursor_speed: str = "fast", smoothing: bool = False
    ) -> None:
        """Fresh timelines plus one launched provider session."""
        self.timeline = CaptureTimeline(viewport=viewport, clock=self.clock)
        self.channel = None
        self.fps = fps
        self.cursor_speed = cursor_speed
        self.smoothing = smoothing
        await self.provider.launch(viewport)

    async def start_capture(self) -> None:
        self.channel = SampleChannel(self.provider, self.timeline.log_sample, sleep=self.sleep)
        await self.channel.open()
        self.timeline.log_cursor(self.timeline.cursor_position)

    async def stop_capture(self) -> None:
        """Close the channel (flushing queued samples) and freeze the timelines."""
        if self.channel is not None:
            await self.channel.close()
        self.timeline.freeze()

    async def record(self, scenario: Scenario) -> CaptureSession:
        """Execute every step of ``scenario`` and return the resampled session.

        Any failure aborts the remaining steps; capture is still stopped and
        the error is re-raised carrying the best-effort partial session. The
        provider is closed on every path.
        """
        viewport = (scenario.viewport.width, scenario.viewport.height)
        cursor = scenario.effects.cursor
        try:
            await self.init(viewport, scenario.output.fps, cursor.speed, cursor.smoothing)
            start_time = self.clock()
            try:
                await self.start_capture()
                for index, step in enumerate(scenario.steps):
                    await self.run_step(index, step, total=len(scenario.steps))
                await self.stop_capture()
                self.channel.raise_if_failed()
            except Exception as exc:
                logger.warning("Recording of %r aborted: %s", scenario.name, exc)
                try:
                    await self.stop_capture()
                except Exception:
                    logger.warning("Stopping capture after failure failed", exc_info=True)
                self.timeline.freeze()
                session = self._finish(scenario, start_time)
                failure = exc
                if not isinstance(failure, CaptureFailure):
                    failure = ActionExecutionError(f"Recording failed: {exc}")
                raise failure.with_partial_session(session) from exc
            return self._finish(scenario, start_time)
        finally:
            await self.provider.close()

    def _finish(self, scenario: Scenario, start_time: float) -> CaptureSession:
        end_time = self.clock()
        raw = build_frames(self.timeline)
        frames = resample(raw, end_time - start_time, self.fps, self.timeline)
        logger.info(
            "Captured %d samples -> %d frames over %.0f ms",
            len(self.timeline.samples),
            len(frames),
            end_time - start_time,
        )
        return CaptureSession(scenario, frames, start_time, end_time, self.timeline)

    async def run_step(self, index: int, step: Step, total: Optional[int] = None) -> None:
        logger.info("Step %d/%s%s", index + 1, total or "?", f": {step.name}" if step.name else "")
        self.timeline.mark_step(index, step.name)
        for action in step.actions:
            await self.execute_action(action)
            self.channel.raise_if_failed()
        await self.wait_with_repaints(step.capture_delay)
        await self.wait_with_repaints(step.hold_duration)

    # ------------------------------------------------------------------
    # Waiting
    # ------------------------------------------------------------------

    async def wait_with_repaints(self, duration_ms: float) -> None:
        """Wait while toggling an invisible style so the screencast keeps emitting."""
        if duration_ms <= 0:
            return
        end = self.clock() + duration_ms
        toggle = False
        while self.clock() < end and self.capturing:
            try:
                await self.provider.evaluate(
                    cfg.REPAINT_EXPRESSION.format(toggle="true" if toggle else "false")
                )
            except Exception:
                logger.debug("Repaint toggle failed", exc_info=True)
            toggle = not toggle
            remaining = end - self.clock()
            if remaining > 0:
                await self.sleep(min(cfg.REPAINT_INTERVAL_MS, remaining) / 1000.0)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def execute_action(self, action) -> None:
        handler = self._HANDLERS.get(type(action))
        if handler is None:
            raise ActionExecutionError(f"Unsupported action: {action!r}")
        logger.debug("Action %s", action.action)
        try:
            await handler(self, action)
        except CaptureFailure:
            raise
        except Exception as exc:
            raise ActionExecutionError(
                f"{action.action} failed: {exc}",
                action=action.action,
                selector=getattr(action, "selector", None),
            ) from exc
        await self.wait_with_repaints(cfg.ACTION_GAP_MS)

    async def _navigate(self, action: NavigateAction) -> None:
        await self.provider.navigate(action.url, action.wait_until)
        try:
            await self.provider.evaluate(cfg.PAINT_EXPRESSION, await_promise=True)
        except Exception:
            logger.debug("Paint wait failed", exc_info=True)
        self.timeline.mark_first_content()
        await self.wait_with_repaints(cfg.NAVIGATE_HOLD_MS)

    async def _click(self, action: ClickAction) -> None:
        target = await self.resolve_target(action.selector, "click")
        await self.move_cursor_smooth(target)
        self.timeline.log_click(target)
        await self.provider.click(action.selector, target, action.delay)

    async def _type(self, action: TypeAction) -> None:
        target = await self.resolve_target(action.selector, "type")
        await self.move_cursor_smooth(target)
        self.timeline.log_click(target)
        await self.provider.click(action.selector, target)
        for char in action.text:
            await self.provider.type_char(char, action.delay)
            self.timeline.log_keystroke(char)

    async def _scroll(self, action: ScrollAction) -> None:
        target = None
        if action.selector:
            target = await self.resolve_target(action.selector, "scroll")
        await self.provider.scroll(action.selector, action.x, action.y, action.smooth)
        if target is not None:
            self.timeline.log_cursor(target)

        distance = abs(action.x) + abs(action.y)
        if action.smooth:
            settle = max(cfg.SCROLL_MIN_SMOOTH_MS, round_half_up(distance * cfg.SCROLL_MS_PER_PX))
        else:
            settle = cfg.SCROLL_INSTANT_MS
        await self.wait_with_repaints(settle)
        await self.wait_with_repaints(cfg.SCROLL_SETTLE_MS)

    async def _wait(self, action: WaitAction) -> None:
        await self.wait_with_repaints(action.duration)

    async def _hover(self, action: HoverAction) -> None:
        target = await self.resolve_target(action.selector, "hover")
        await self.move_cursor_smooth(target)
        await self.provider.hover(action.selector, target)

    async def _screenshot(self, action: ScreenshotAction) -> None:
        # the screencast is continuous, so this only gives it time to catch up
        await self.wait_with_repaints(cfg.SCREENSHOT_SETTLE_MS)

    _HANDLERS = {
        NavigateAction: _navigate,
        ClickAction: _click,
        TypeAction: _type,
        ScrollAction: _scroll,
        WaitAction: _wait,
        HoverAction: _hover,
        ScreenshotAction: _screenshot,
    }

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------

    async def resolve_target(self, selector: str, action: str) -> Point:
        """Centre of the element matching ``selector``, rounded to whole pixels."""
        if not is_safe_selector(selector):
            raise InvalidSelector(f"Invalid selector: {selector}", action=action, selector=selector)
        rect = await self.provider.element_rect(selector, cfg.ELEMENT_TIMEOUT_S)
        if not rect:
            raise ElementNotFound(
                f'Element "{selector}" not visible within {cfg.ELEMENT_TIMEOUT_S:.0f}s',
                action=action,
                selector=selector,
            )
        return (float(round_half_up(rect["cx"])), float(round_half_up(rect["cy"])))

    async def move_cursor_smooth(self, target: Point) -> None:
        """Walk the cursor to ``target`` along a curved path, one keyframe per point."""
        steps, delay_ms = speed_preset(self.cursor_speed)
        path = interpolate_path(self.timeline.cursor_position, target, steps)
        if self.smoothing:
            smoothed = smooth_path(path, cfg.SMOOTH_TENSION)
            # same total travel time over more points
            delay_ms = delay_ms * len(path) / len(smoothed)
            path = smoothed

        for x, y in path:
            await self.provider.mouse_move(x, y)
            self.timeline.log_cursor((x, y))
            await self.sleep(delay_ms / 1000.0)

        await self.wait_with_repaints(cfg.MOVE_SETTLE_MS)
