from __future__ import annotations
from typing import Dict, Tuple


class ccfg:
    """Compositor geometry and encoder settings (pixels / ms unless noted)."""

    # --- Device frames ---
    TITLE_BAR_HEIGHT = 40
    TRAFFIC_LIGHT_Y = 14
    TRAFFIC_LIGHT_RADIUS = 6
    TRAFFIC_LIGHTS_START_X = 16
    TRAFFIC_LIGHT_GAP = 22
    TRAFFIC_LIGHT_COLORS = ("#ff5f57", "#febc2e", "#28c840")
    ADDRESS_BAR_HEIGHT = 24
    ADDRESS_BAR_MARGIN = 70
    ADDRESS_BAR_TEXT = "localhost"

    # (sides, top, bottom)
    BEZELS: Dict[str, Tuple[int, int, int]] = {
        "iphone": (12, 50, 34),
        "ipad": (20, 24, 24),
        "android": (8, 32, 20),
    }
    # (outer, inner) corner radius
    BEZEL_RADII: Dict[str, Tuple[int, int]] = {
        "iphone": (47, 39),
        "ipad": (18, 12),
        "android": (35, 30),
    }
    IPHONE_ISLAND = (120, 36)
    IPHONE_HOME_BAR = (134, 5)
    IPAD_CAMERA_RADIUS = 4
    ANDROID_CAMERA_RADIUS = 6

    # --- Cursor ---
    # Arrow outline in a 24x24 box, tip at (4, 0)
    CURSOR_SHAPE = ((4, 0), (4, 22), (10, 16), (16, 24), (20, 22), (14, 14), (22, 14))
    CURSOR_BOX = 24
    CURSOR_OUTLINE = "#ffffff"
    RIPPLE_STROKE = 2
    RIPPLE_INNER_RATIO = 0.6
    RIPPLE_INNER_OPACITY = 0.4
    TRAIL_MAX_OPACITY = 0.6
    HIGHLIGHT_BLUR_RATIO = 0.3
    CLICK_PROGRESS_FALLBACK = 0.5

    # --- Keystroke HUD ---
    HUD_BOTTOM_MARGIN = 30
    HUD_SIDE_MARGIN = 30
    HUD_CORNER_RADIUS = 8
    HUD_FADE_START = 0.6  # fraction of fade_after before fading begins

    # --- Background ---
    SHADOW_OFFSET_Y = 4
    SHADOW_BLUR = 16
    SHADOW_COLOR = (0, 0, 0, 77)
    GRADIENT_DOWNSAMPLE = 8

    # --- Watermark ---
    WATERMARK_MARGIN = 16

    # --- Transitions ---
    CROSSFADE_SECONDS = 0.3
    SPEED_RAMP_RADIUS_S = 1.0

    # --- Encoders ---
    FFMPEG = "ffmpeg"
    STDERR_TAIL_CHARS = 500
    H264_MAX_CRF = 51
    VP9_MAX_CRF = 63
