from __future__ import annotations
from typing import Dict, Tuple


class cfg:
    """Capture timing (all durations in milliseconds unless noted)."""

    # --- Click overlay window ---
    CLICK_EFFECT_MS = 500

    # --- Repaint-forced waits ---
    REPAINT_INTERVAL_MS = 50
    REPAINT_EXPRESSION = (
        "document.documentElement.style.outline = "
        "{toggle} ? '0.001px solid transparent' : 'none'"
    )

    # --- Action pacing ---
    ACTION_GAP_MS = 30
    NAVIGATE_HOLD_MS = 300
    MOVE_SETTLE_MS = 100
    SCREENSHOT_SETTLE_MS = 100
    SCROLL_MIN_SMOOTH_MS = 600
    SCROLL_MS_PER_PX = 0.8
    SCROLL_INSTANT_MS = 100
    SCROLL_SETTLE_MS = 150

    # --- Element lookup ---
    ELEMENT_TIMEOUT_S = 5.0

    # --- Sample channel ---
    FLUSH_GRACE_MS = 200
    SCREENCAST_FORMAT = "jpeg"
    SCREENCAST_QUALITY = 95

    # --- Cursor movement: (steps, per-step delay ms) ---
    CURSOR_SPEED_PRESETS: Dict[str, Tuple[int, int]] = {
        "fast": (12, 6),
        "normal": (18, 8),
        "slow": (24, 12),
    }
    SMOOTH_TENSION = 0.5

    # Double requestAnimationFrame resolves only after the page has painted
    PAINT_EXPRESSION = (
        "new Promise(r => requestAnimationFrame(() => requestAnimationFrame(r)))"
    )
