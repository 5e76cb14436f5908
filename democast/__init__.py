from __future__ import annotations
from .capture import CaptureSession, CaptureTimelineBuilder, ResolvedFrame, resample
from .compose import FrameRenderer, RenderedFrame, save_output
from .pipeline import DemoResult, record_demo
from .scenario import Scenario, load_scenario, parse_scenario, validate_scenario

__version__ = "0.1.0"

__all__ = [
    "CaptureSession",
    "CaptureTimelineBuilder",
    "ResolvedFrame",
    "resample",
    "FrameRenderer",
    "RenderedFrame",
    "save_output",
    "DemoResult",
    "record_demo",
    "Scenario",
    "load_scenario",
    "parse_scenario",
    "validate_scenario",
]
