from .paths import (
    ease_in_out_cubic,
    get_easing,
    interpolate_path,
    smooth_path,
    speed_preset,
)
from .telemetry import CaptureTimeline
from .channel import SampleChannel
from .resampler import ResolvedFrame, build_frames, resample
from .recorder import CaptureSession, CaptureTimelineBuilder

__all__ = [
    "ease_in_out_cubic",
    "get_easing",
    "interpolate_path",
    "smooth_path",
    "speed_preset",
    "CaptureTimeline",
    "SampleChannel",
    "ResolvedFrame",
    "build_frames",
    "resample",
    "CaptureSession",
    "CaptureTimelineBuilder",
]
