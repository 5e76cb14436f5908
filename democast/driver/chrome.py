from __future__ import annotations
import asyncio
import base64
import json
import logging
from typing import Any, Dict, Optional

import zendriver as zd
from zendriver import cdp

from ..capture.config import cfg
from ..errors import NavigationError, ResourceError
from .base import AutomationProvider, Point, ScreencastHandler, Size
from .cdp import (
    _emit_click,
    _emit_insert_text,
    _emit_mouse_event,
    _press_enter,
    get_element_rect,
)

logger = logging.getLogger(__name__)

READY_STATES = {
    "load": "complete",
    "domcontentloaded": "interactive",
    "networkidle": "complete",
}
NETWORK_IDLE_GRACE_S = 0.5
NAVIGATION_TIMEOUT_S = 30.0

SCROLL_EXPRESSION = """
(() => {{
  const sel = {selector};
  const target = sel ? document.querySelector(sel) : window;
  if (!target) return false;
  target.scrollBy({{left: {x}, top: {y}, behavior: {behavior}}});
  return true;
}})()
"""


class ZendriverProvider(AutomationProvider):
    """Chrome over the DevTools protocol, driven through zendriver."""

    def __init__(self, *, headless: bool = True, browser_args=None):
        self.headless = headless
        self.browser_args = list(browser_args or [])
        self.browser = None
        self.tab = None
        self.viewport: Size = (1280, 800)
        self._handler: Optional[ScreencastHandler] = None
        self._screencasting = False

    def _require_tab(self):
        if self.tab is None:
            raise ResourceError("Browser session is not running")
        return self.tab

    async def launch(self, viewport: Size) -> None:
        self.viewport = (int(viewport[0]), int(viewport[1]))
        width, height = self.viewport
        try:
            self.browser = await zd.start(
                headless=self.headless,
                browser_args=[f"--window-size={width},{height}"] + self.browser_args,
            )
            self.tab = self.browser.main_tab
            await self.tab.send(
                cdp.emulation.set_device_metrics_override(
                    width=width, height=height, device_scale_factor=1, mobile=False
                )
            )
        except Exception as exc:
            await self.close()
            raise ResourceError(f"Could not launch browser: {exc}") from exc
        logger.info("Browser launched (%dx%d, headless=%s)", width, height, self.headless)

    async def close(self) -> None:
        browser, self.browser, self.tab = self.browser, None, None
        self._screencasting = False
        if browser is None:
            return
        try:
            await browser.stop()
        except Exception:
            logger.warning("Browser did not stop cleanly", exc_info=True)

    # --- Screencast ---

    async def _on_screencast_frame(self, event: cdp.page.ScreencastFrame) -> None:
        if not self._screencasting or self._handler is None:
            return
        await self._handler(base64.b64decode(event.data), event.session_id)

    async def start_screencast(self, handler: ScreencastHandler) -> None:
        tab = self._require_tab()
        self._handler = handler
        self._screencasting = True
        tab.add_handler(cdp.page.ScreencastFrame, self._on_screencast_frame)
        width, height = self.viewport
        await tab.send(
            cdp.page.start_screencast(
                format_=cfg.SCREENCAST_FORMAT,
                quality=cfg.SCREENCAST_QUALITY,
                max_width=width,
                max_height=height,
                every_nth_frame=1,
            )
        )

    async def ack_screencast(self, token: Any) -> None:
        if self.tab is None:
            return
        await self.tab.send(cdp.page.screencast_frame_ack(session_id=token))

    async def stop_screencast(self) -> None:
        self._screencasting = False
        if self.tab is None:
            return
        await self.tab.send(cdp.page.stop_screencast())
        self.tab.remove_handlers(cdp.page.ScreencastFrame, self._on_screencast_frame)

    # --- Page ---

    async def navigate(self, url: str, wait_until: str = "load") -> None:
        tab = self._require_tab()
        try:
            result = await tab.send(cdp.page.navigate(url=url))
        except Exception as exc:
            raise NavigationError(f"Navigation to {url} failed: {exc}", action="navigate") from exc
        error_text = result[2] if isinstance(result, tuple) and len(result) > 2 else None
        if error_text:
            raise NavigationError(f"Navigation to {url} failed: {error_text}", action="navigate")

        try:
            await tab.wait_for_ready_state(
                until=READY_STATES.get(wait_until, "complete"), timeout=int(NAVIGATION_TIMEOUT_S)
            )
        except asyncio.TimeoutError as exc:
            raise NavigationError(
                f"{url} did not reach {wait_until!r} within {NAVIGATION_TIMEOUT_S:.0f}s",
                action="navigate",
            ) from exc
        if wait_until == "networkidle":
            await asyncio.sleep(NETWORK_IDLE_GRACE_S)

    async def evaluate(self, expression: str, await_promise: bool = False) -> Any:
        tab = self._require_tab()
        return await tab.evaluate(expression, await_promise=await_promise, return_by_value=True)

    async def element_rect(self, selector: str, timeout_s: float) -> Optional[Dict[str, float]]:
        return await get_element_rect(self._require_tab(), selector, timeout_seconds=timeout_s)

    # --- Input ---

    async def mouse_move(self, x: float, y: float) -> None:
        await _emit_mouse_event(self._require_tab(), "mouseMoved", x, y)

    async def click(self, selector: str, point: Point, delay_ms: Optional[float] = None) -> None:
        hold_s = (delay_ms or 0) / 1000.0
        await _emit_click(self._require_tab(), point[0], point[1], hold_s=hold_s)

    async def hover(self, selector: str, point: Point) -> None:
        await _emit_mouse_event(self._require_tab(), "mouseMoved", point[0], point[1])

    async def type_char(self, char: str, delay_ms: float = 0) -> None:
        tab = self._require_tab()
        if char == "\n":
            await _press_enter(tab)
        else:
            await _emit_insert_text(tab, char)
        if delay_ms > 0:
            await asyncio.sleep(delay_ms / 1000.0)

    async def scroll(self, selector: Optional[str], x: float, y: float, smooth: bool = True) -> None:
        expression = SCROLL_EXPRESSION.format(
            selector=json.dumps(selector),
            x=json.dumps(x),
            y=json.dumps(y),
            behavior=json.dumps("smooth" if smooth else "instant"),
        )
        await self.evaluate(expression)
