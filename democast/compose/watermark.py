from __future__ import annotations

from PIL import Image, ImageDraw, ImageFont

from ..scenario.models import WatermarkConfig
from ..colors import parse_color, with_opacity
from .config import ccfg


def draw_watermark(image: Image.Image, config: WatermarkConfig) -> Image.Image:
    if not config.text:
        return image
    width, height = image.size
    margin = ccfg.WATERMARK_MARGIN
    font = ImageFont.load_default(size=config.font_size)
    text_w = font.getlength(config.text)

    x = margin if config.position.endswith("left") else width - text_w - margin
    if config.position.startswith("top"):
        y, anchor = margin, "la"
    else:
        y, anchor = height - margin, "ls"

    layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    ImageDraw.Draw(layer).text(
        (x, y),
        config.text,
        font=font,
        fill=with_opacity(parse_color(config.color), config.opacity),
        anchor=anchor,
    )
    return Image.alpha_composite(image, layer)
