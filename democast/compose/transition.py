from __future__ import annotations
from fractions import Fraction

from PIL import Image, ImageMath

# crossfade weights are resolved to this many steps
_WEIGHT_STEPS = 1000


def blend(a: Image.Image, b: Image.Image, t: float) -> Image.Image:
    """Per-channel weighted average ``a*(1-t) + b*t``, rounded half up.

    ``t <= 0`` returns ``a`` and ``t >= 1`` returns ``b`` as-is. ``b`` is
    resized to ``a`` when their sizes differ.
    """
    if t <= 0:
        return a
    if t >= 1:
        return b
    if a.mode != "RGBA":
        a = a.convert("RGBA")
    if b.mode != "RGBA":
        b = b.convert("RGBA")
    if b.size != a.size:
        b = b.resize(a.size, Image.Resampling.BILINEAR)

    weight = Fraction(t).limit_denominator(_WEIGHT_STEPS)
    num, den = weight.numerator, weight.denominator
    # floor((a*(den-num) + b*num) / den + 1/2) in integer arithmetic
    channels = [
        ImageMath.lambda_eval(
            lambda args: (args["a"] * (2 * (den - num)) + args["b"] * (2 * num) + den) / (2 * den),
            a=ca,
            b=cb,
        ).convert("L")
        for ca, cb in zip(a.split(), b.split())
    ]
    return Image.merge("RGBA", channels)
