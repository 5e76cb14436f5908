from __future__ import annotations

from PIL import Image

from ..capture.paths import Point
from ..utils import clamp, round_half_up


def zoom_crop_box(focus: Point, scale: float, size):
    """(left, top, right, bottom) of the region shown at ``scale``, centred on
    ``focus`` and clamped inside the image."""
    width, height = size
    crop_w = max(1, round_half_up(width / scale))
    crop_h = max(1, round_half_up(height / scale))
    left = clamp(round_half_up(focus[0] - crop_w / 2), 0, width - crop_w)
    top = clamp(round_half_up(focus[1] - crop_h / 2), 0, height - crop_h)
    return (left, top, left + crop_w, top + crop_h)


def apply_zoom(image: Image.Image, focus: Point, scale: float) -> Image.Image:
    """Crop around ``focus`` and scale back up to the original size."""
    if scale <= 1:
        return image
    box = zoom_crop_box(focus, scale, image.size)
    return image.crop(box).resize(image.size, Image.Resampling.LANCZOS)
