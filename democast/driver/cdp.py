from __future__ import annotations
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from zendriver import cdp

logger = logging.getLogger(__name__)

CDP_SEND_TIMEOUT_S: float = 0.25


async def _send_cdp_event(
    tab, fn: Callable[[], Awaitable[Any]], *, label: str, timeout_s: float = CDP_SEND_TIMEOUT_S
) -> None:
    """Bounded-time CDP send with shielded task.

    A send that takes longer than ``timeout_s`` keeps running in the
    background; failures are logged and the event is skipped.
    """
    task = asyncio.create_task(fn())
    try:
        await asyncio.wait_for(asyncio.shield(task), timeout=timeout_s)
    except asyncio.TimeoutError:
        logger.warning(
            "CDP %s stalled >%.0f ms; continuing in background", label, timeout_s * 1000.0
        )
    except Exception:
        logger.warning("CDP %s failed (skipped this event)", label, exc_info=True)


def _quad_to_bounding_rect(quad: Sequence[float]) -> Dict[str, float]:
    """Convert an 8-number quad to a bounding rect dict."""
    xs = [quad[0], quad[2], quad[4], quad[6]]
    ys = [quad[1], quad[3], quad[5], quad[7]]
    x_min, y_min = min(xs), min(ys)
    width = max(0.0, max(xs) - x_min)
    height = max(0.0, max(ys) - y_min)
    return {
        "x": x_min,
        "y": y_min,
        "width": width,
        "height": height,
        "cx": x_min + width / 2.0,
        "cy": y_min + height / 2.0,
    }


async def _box_for_object(tab, object_id: str) -> Optional[Dict[str, float]]:
    try:
        box_model = await tab.send(cdp.dom.get_box_model(object_id=object_id))
    except Exception:
        return None
    content = getattr(box_model, "content", None)
    if not content or len(content) < 8:
        return None
    return _quad_to_bounding_rect(content)


async def get_element_rect(
    tab,
    selector: str,
    *,
    timeout_seconds: float = 5.0,
    poll_interval_seconds: float = 0.1,
) -> Optional[Dict[str, float]]:
    """Rect of the first element matching ``selector`` once it has a visible box.

    Polls ``Runtime.evaluate`` + ``DOM.getBoxModel`` until the element has a
    non-empty box or ``timeout_seconds`` elapses, then returns None.
    """
    start = time.perf_counter()
    while True:
        try:
            remote, _ = await tab.send(
                cdp.runtime.evaluate(
                    expression=f"document.querySelector({selector!r})",
                    return_by_value=False,
                    await_promise=False,
                )
            )
            object_id = getattr(remote, "object_id", None)
            if object_id:
                box = await _box_for_object(tab, object_id)
                if box and box["width"] > 0 and box["height"] > 0:
                    return box
        except Exception:
            logger.debug("Element lookup for %r failed; retrying", selector, exc_info=True)

        if (time.perf_counter() - start) >= timeout_seconds:
            return None
        await asyncio.sleep(poll_interval_seconds)


async def _emit_mouse_event(tab, type_: str, x: float, y: float, **extra: Any) -> None:
    await _send_cdp_event(
        tab,
        lambda: tab.send(
            cdp.input_.dispatch_mouse_event(type_=type_, x=float(x), y=float(y), **extra)
        ),
        label=type_,
    )


async def _emit_click(tab, x: float, y: float, *, hold_s: float = 0.0) -> None:
    await _emit_mouse_event(
        tab, "mousePressed", x, y, button=cdp.input_.MouseButton.LEFT, click_count=1
    )
    if hold_s > 0:
        await asyncio.sleep(hold_s)
    await _emit_mouse_event(
        tab, "mouseReleased", x, y, button=cdp.input_.MouseButton.LEFT, click_count=1
    )


async def _emit_insert_text(tab, text: str) -> None:
    await _send_cdp_event(
        tab,
        lambda: tab.send(cdp.input_.insert_text(text=text)),
        label="insertText",
    )


async def _press_enter(tab) -> None:
    for type_ in ("keyDown", "keyUp"):
        await _send_cdp_event(
            tab,
            lambda type_=type_: tab.send(
                cdp.input_.dispatch_key_event(
                    type_=type_,
                    key="Enter",
                    code="Enter",
                    text="\r" if type_ == "keyDown" else None,
                    windows_virtual_key_code=13,
                    native_virtual_key_code=13,
                )
            ),
            label=f"enter{type_[3:]}",
        )
