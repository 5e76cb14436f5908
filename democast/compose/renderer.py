from __future__ import annotations
import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from PIL import Image

from ..capture.paths import Point
from ..capture.resampler import ResolvedFrame
from ..scenario.models import EffectsConfig, OutputConfig, Step
from .background import apply_background
from .config import ccfg
from .cursor import draw_click_ripple, draw_cursor, draw_highlight, draw_trail
from .frame import apply_device_frame, content_inset
from .keystroke import draw_keystroke_hud
from .timeline import (
    FrameContext,
    apply_crossfades,
    apply_speed_ramp,
    calculate_frame_contexts,
)
from .watermark import draw_watermark
from .zoom import apply_zoom

logger = logging.getLogger(__name__)


@dataclass
class RenderedFrame:
    index: int
    pixels: Image.Image
    timestamp: float


class FrameRenderer:
    """Fixed-order compositing pipeline for ResolvedFrames.

    Stages, each skipped when disabled or missing input:
      device frame -> cursor glow -> trail -> cursor -> click ripple ->
      keystroke HUD -> zoom -> background -> watermark -> resize to output.

    Overlays drawn after the device frame are shifted by its content inset so
    they stay aligned with the page. The output image is always exactly
    ``output.width`` x ``output.height``.
    """

    def __init__(self, effects: EffectsConfig, output: OutputConfig, steps: Optional[Sequence[Step]] = None):
        self.effects = effects
        self.output = output
        self.steps = list(steps or [])
        self._decoded_source: Optional[bytes] = None
        self._decoded: Optional[Image.Image] = None

    @property
    def output_size(self):
        return (self.output.width, self.output.height)

    def decode(self, frame: ResolvedFrame) -> Image.Image:
        """Screen sample as RGBA at the frame's viewport size.

        Resampled frames share image bytes, so the last decode is reused.
        """
        if self._decoded is None or frame.image is not self._decoded_source:
            with Image.open(io.BytesIO(frame.image)) as source:
                image = source.convert("RGBA")
            if image.size != tuple(frame.viewport):
                image = image.resize(tuple(frame.viewport), Image.Resampling.LANCZOS)
            self._decoded_source, self._decoded = frame.image, image
        return self._decoded.copy()

    def render_frame(self, frame: ResolvedFrame, context: Optional[FrameContext] = None) -> RenderedFrame:
        ctx = context or FrameContext()
        fx = self.effects
        cursor = fx.cursor
        image = self.decode(frame)

        image = apply_device_frame(image, fx.device_frame)
        dx, dy = content_inset(fx.device_frame)

        def shift(point: Point) -> Point:
            return (point[0] + dx, point[1] + dy)

        if cursor.enabled:
            if cursor.highlight and frame.cursor_position is not None:
                image = draw_highlight(image, shift(frame.cursor_position), cursor)
            if cursor.trail and len(ctx.cursor_trail) >= 2:
                image = draw_trail(image, [shift(p) for p in ctx.cursor_trail], cursor)
            if frame.cursor_position is not None:
                image = draw_cursor(image, shift(frame.cursor_position), cursor)
            if cursor.click_effect and frame.click_position is not None:
                progress = ctx.click_progress
                if progress is None:
                    progress = frame.click_progress if frame.click_progress is not None else ccfg.CLICK_PROGRESS_FALLBACK
                image = draw_click_ripple(image, shift(frame.click_position), cursor, progress)

        if fx.keystroke.enabled and frame.keystrokes_active:
            image = draw_keystroke_hud(image, frame.keystrokes_active, frame.timestamp, fx.keystroke)

        if fx.zoom.enabled and ctx.zoom_scale > 1:
            vw, vh = frame.viewport
            focus = frame.click_position or frame.cursor_position or (vw / 2, vh / 2)
            image = apply_zoom(image, shift(focus), ctx.zoom_scale)

        if fx.background.enabled:
            image = apply_background(image, fx.background, self.output_size)

        if fx.watermark.enabled:
            image = draw_watermark(image, fx.watermark)

        if image.size != self.output_size:
            image = image.resize(self.output_size, Image.Resampling.LANCZOS)

        return RenderedFrame(frame.index, image, frame.timestamp)

    def render_all(self, frames: List[ResolvedFrame]) -> List[RenderedFrame]:
        """Speed ramp, per-frame contexts, render, then step crossfades."""
        if not frames:
            return []
        fps = self.output.fps
        if self.effects.speed_ramp.enabled:
            frames = apply_speed_ramp(frames, self.effects.speed_ramp, fps)

        contexts = calculate_frame_contexts(frames, self.effects, fps)
        rendered = []
        for i, (frame, ctx) in enumerate(zip(frames, contexts)):
            rendered.append(self.render_frame(frame, ctx))
            if (i + 1) % 100 == 0:
                logger.debug("Rendered %d/%d frames", i + 1, len(frames))

        if self.steps:
            apply_crossfades(rendered, frames, self.steps, fps)
        logger.info("Rendered %d frames at %dx%d", len(rendered), *self.output_size)
        return rendered
