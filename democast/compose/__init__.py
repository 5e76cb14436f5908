from .timeline import (
    FrameContext,
    apply_crossfades,
    apply_speed_ramp,
    calculate_adaptive_zoom,
    calculate_frame_contexts,
    crossfade_window,
    find_fade_boundaries,
)
from .transition import blend
from .renderer import FrameRenderer, RenderedFrame
from .encoder import EncoderResult, encode_gif, encode_video, run_encoder, save_output

__all__ = [
    "FrameContext",
    "apply_crossfades",
    "apply_speed_ramp",
    "calculate_adaptive_zoom",
    "calculate_frame_contexts",
    "crossfade_window",
    "find_fade_boundaries",
    "blend",
    "FrameRenderer",
    "RenderedFrame",
    "EncoderResult",
    "encode_gif",
    "encode_video",
    "run_encoder",
    "save_output",
]
