from .models import (
    Scenario,
    Step,
    StepAction,
    NavigateAction,
    ClickAction,
    TypeAction,
    ScrollAction,
    WaitAction,
    HoverAction,
    ScreenshotAction,
    EffectsConfig,
    ZoomConfig,
    CursorConfig,
    BackgroundConfig,
    DeviceFrameConfig,
    SpeedRampConfig,
    KeystrokeConfig,
    WatermarkConfig,
    OutputConfig,
    Viewport,
    is_safe_selector,
)
from .loader import parse_scenario, load_scenario, resolve_relative_urls
from .validator import ValidationResult, validate_scenario, ensure_valid

__all__ = [
    "Scenario",
    "Step",
    "StepAction",
    "NavigateAction",
    "ClickAction",
    "TypeAction",
    "ScrollAction",
    "WaitAction",
    "HoverAction",
    "ScreenshotAction",
    "EffectsConfig",
    "ZoomConfig",
    "CursorConfig",
    "BackgroundConfig",
    "DeviceFrameConfig",
    "SpeedRampConfig",
    "KeystrokeConfig",
    "WatermarkConfig",
    "OutputConfig",
    "Viewport",
    "is_safe_selector",
    "parse_scenario",
    "load_scenario",
    "resolve_relative_urls",
    "ValidationResult",
    "validate_scenario",
    "ensure_valid",
]
