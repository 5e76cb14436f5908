from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .capture.recorder import CaptureSession, CaptureTimelineBuilder
from .compose.encoder import save_output
from .compose.renderer import FrameRenderer, RenderedFrame
from .errors import CaptureFailure
from .scenario.models import EffectsConfig, Scenario
from .scenario.validator import ensure_valid

logger = logging.getLogger(__name__)


@dataclass
class DemoResult:
    session: CaptureSession
    output_path: Path
    frame_count: int


def render_session(session: CaptureSession, effects: Optional[EffectsConfig] = None) -> List[RenderedFrame]:
    """Composite every frame of ``session`` with ``effects`` (the scenario's by default)."""
    scenario = session.scenario
    renderer = FrameRenderer(effects or scenario.effects, scenario.output, scenario.steps)
    return renderer.render_all(session.frames)


def render_and_save(session: CaptureSession, effects: Optional[EffectsConfig] = None) -> DemoResult:
    rendered = render_session(session, effects)
    path = save_output(rendered, session.scenario.output)
    return DemoResult(session, path, len(rendered))


async def record_demo(
    scenario: Scenario,
    provider=None,
    *,
    effects: bool = True,
    keep_partial: bool = False,
    headless: bool = True,
    builder_kwargs: Optional[dict] = None,
) -> DemoResult:
    """Record ``scenario``, composite it and write the configured output.

    With ``keep_partial`` a failed recording still renders whatever was
    captured before the failure; the original error is re-raised afterwards,
    even when saving the partial output fails too. Compositing and encoding
    run in a worker thread.

    Raises:
        ScenarioError: when the scenario fails the logical checks. Nothing is
            launched in that case.
    """
    ensure_valid(scenario)
    if provider is None:
        from .driver.chrome import ZendriverProvider

        provider = ZendriverProvider(headless=headless)

    effects_config = None if effects else EffectsConfig.disabled()
    builder = CaptureTimelineBuilder(provider, **(builder_kwargs or {}))
    logger.info("Recording %r (%d steps)", scenario.name, len(scenario.steps))
    try:
        session = await builder.record(scenario)
    except CaptureFailure as err:
        partial = err.partial_session
        if keep_partial and partial is not None and partial.frames:
            logger.warning("Saving %d frames captured before the failure", len(partial.frames))
            try:
                result = await asyncio.to_thread(render_and_save, partial, effects_config)
            except Exception:
                logger.warning("Saving the partial output failed", exc_info=True)
            else:
                logger.warning("Partial output written to %s", result.output_path)
        raise

    result = await asyncio.to_thread(render_and_save, session, effects_config)
    return result
