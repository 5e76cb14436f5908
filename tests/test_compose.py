"""Compositing layers and the frame renderer."""

import pytest
from PIL import Image

from democast.capture.resampler import ResolvedFrame
from democast.capture.telemetry import KeystrokeEvent
from democast.colors import parse_color, parse_gradient, with_opacity
from democast.compose.background import apply_background
from democast.compose.cursor import draw_click_ripple
from democast.compose.frame import apply_device_frame, content_inset
from democast.compose.keystroke import hud_opacity
from democast.compose.renderer import FrameRenderer
from democast.compose.timeline import FrameContext
from democast.compose.transition import blend
from democast.compose.zoom import apply_zoom, zoom_crop_box
from democast.scenario.models import (
    BackgroundConfig,
    CursorConfig,
    DeviceFrameConfig,
    EffectsConfig,
    OutputConfig,
)

from conftest import image_bytes


def resolved(image, **overrides):
    fields = dict(
        index=0,
        image=image,
        timestamp=1000.0,
        cursor_position=(80.0, 50.0),
        click_position=None,
        click_progress=None,
        viewport=(160, 100),
        step_index=0,
    )
    fields.update(overrides)
    return ResolvedFrame(**fields)


class TestColors:
    def test_rgba(self):
        assert parse_color("rgba(59, 130, 246, 0.5)") == (59, 130, 246, 128)
        assert parse_color("rgb(1, 2, 3)") == (1, 2, 3, 255)

    def test_named_and_hex(self):
        assert parse_color("#fff") == (255, 255, 255, 255)
        assert parse_color("black") == (0, 0, 0, 255)
        assert parse_color("transparent") == (0, 0, 0, 0)

    def test_unknown(self):
        with pytest.raises(ValueError):
            parse_color("not-a-colour")

    def test_with_opacity(self):
        assert with_opacity((10, 20, 30, 200), 0.5) == (10, 20, 30, 100)


class TestBlend:
    def test_endpoints_are_identity(self):
        a = Image.new("RGBA", (2, 2), (100, 50, 20, 255))
        b = Image.new("RGBA", (2, 2), (200, 150, 60, 255))
        assert blend(a, b, 0) is a
        assert blend(a, b, 1) is b

    def test_midpoint(self):
        a = Image.new("RGBA", (2, 2), (100, 50, 20, 255))
        b = Image.new("RGBA", (2, 2), (200, 150, 60, 255))
        assert blend(a, b, 0.5).getpixel((1, 1)) == (150, 100, 40, 255)

    def test_odd_sum_rounds_half_up(self):
        black = Image.new("RGBA", (2, 2), (0, 0, 0, 255))
        white = Image.new("RGBA", (2, 2), (255, 255, 255, 255))
        assert blend(black, white, 0.5).getpixel((0, 0)) == (128, 128, 128, 255)
        assert blend(white, black, 0.5).getpixel((0, 0)) == (128, 128, 128, 255)

    def test_fractional_weight(self):
        a = Image.new("RGBA", (1, 1), (0, 0, 10, 0))
        b = Image.new("RGBA", (1, 1), (90, 1, 11, 255))
        # 30, 1/3 -> 0, 10.33 -> 10, 85
        assert blend(a, b, 1 / 3).getpixel((0, 0)) == (30, 0, 10, 85)


class TestZoom:
    def test_crop_box_is_clamped(self):
        assert zoom_crop_box((0, 0), 2, (100, 100)) == (0, 0, 50, 50)
        assert zoom_crop_box((100, 100), 2, (100, 100)) == (50, 50, 100, 100)
        assert zoom_crop_box((50, 50), 2, (100, 100)) == (25, 25, 75, 75)

    def test_keeps_size(self):
        image = Image.new("RGBA", (100, 60), (0, 0, 0, 255))
        assert apply_zoom(image, (10, 10), 1.0) is image
        assert apply_zoom(image, (10, 10), 2.5).size == (100, 60)


class TestDeviceFrame:
    def test_insets(self):
        assert content_inset(DeviceFrameConfig()) == (0, 0)
        assert content_inset(DeviceFrameConfig(enabled=True, type="browser")) == (0, 40)
        assert content_inset(DeviceFrameConfig(enabled=True, type="none")) == (0, 0)
        sides, top = content_inset(DeviceFrameConfig(enabled=True, type="iphone"))
        assert sides > 0 and top > 0

    @pytest.mark.parametrize("device", ["browser", "macbook", "iphone", "ipad", "android"])
    def test_frame_grows_image(self, device):
        image = Image.new("RGBA", (160, 100), (255, 255, 255, 255))
        framed = apply_device_frame(image, DeviceFrameConfig(enabled=True, type=device))
        dx, dy = content_inset(DeviceFrameConfig(enabled=True, type=device))
        assert framed.width >= 160 + dx
        assert framed.height >= 100 + dy


class TestOverlays:
    def test_ripple_invisible_at_ends(self):
        image = Image.new("RGBA", (60, 60), (255, 255, 255, 255))
        config = CursorConfig()
        assert draw_click_ripple(image, (30, 30), config, 0.0) is image
        assert draw_click_ripple(image, (30, 30), config, 1.0) is image
        assert draw_click_ripple(image, (30, 30), config, 0.5) is not image

    def test_hud_fade(self):
        assert hud_opacity(0, 1500) == 1.0
        assert hud_opacity(800, 1500) == 1.0
        assert hud_opacity(1200, 1500) == pytest.approx(0.5)
        assert hud_opacity(2000, 1500) == 0.0

    def test_gradient_parsing(self):
        angle, stops = parse_gradient("linear-gradient(135deg, #667eea 0%, #764ba2 100%)")
        assert angle == 135
        assert [offset for offset, _ in stops] == [0.0, 1.0]
        assert stops[0][1] == (0x66, 0x7E, 0xEA, 255)

    def test_background_fills_output(self):
        image = Image.new("RGBA", (160, 100), (255, 0, 0, 255))
        out = apply_background(image, BackgroundConfig(padding=10), (320, 200))
        assert out.size == (320, 200)
        # padding area shows the backdrop, not the content
        assert out.getpixel((2, 2))[:3] != (255, 0, 0)


class TestRenderer:
    def test_output_size_with_every_layer(self):
        effects = EffectsConfig.model_validate(
            {
                "deviceFrame": {"enabled": True, "type": "browser"},
                "cursor": {"trail": True, "highlight": True},
                "keystroke": {"enabled": True},
                "watermark": {"enabled": True, "text": "democast"},
            }
        )
        renderer = FrameRenderer(effects, OutputConfig(width=320, height=200))
        frame = resolved(
            image_bytes(),
            click_position=(80.0, 50.0),
            click_progress=0.25,
            keystrokes_active=(KeystrokeEvent("a", 900.0), KeystrokeEvent("b", 950.0)),
        )
        context = FrameContext(zoom_scale=1.5, click_progress=0.25, cursor_trail=[(70.0, 40.0), (80.0, 50.0)])

        out = renderer.render_frame(frame, context)
        assert out.pixels.size == (320, 200)
        assert out.index == 0
        assert out.timestamp == 1000.0

    def test_zoom_focus_follows_device_frame_inset(self, monkeypatch):
        focuses = []

        def fake_zoom(image, focus, scale):
            focuses.append((focus, scale, image.size))
            return image

        monkeypatch.setattr("democast.compose.renderer.apply_zoom", fake_zoom)
        effects = EffectsConfig.model_validate(
            {
                "deviceFrame": {"enabled": True, "type": "browser"},
                "cursor": {"enabled": False},
                "background": {"enabled": False},
            }
        )
        renderer = FrameRenderer(effects, OutputConfig(width=320, height=200))
        dx, dy = content_inset(effects.device_frame)

        renderer.render_frame(resolved(image_bytes(), click_position=(40.0, 30.0)), FrameContext(zoom_scale=2.0))
        renderer.render_frame(resolved(image_bytes(), cursor_position=None), FrameContext(zoom_scale=2.0))

        (click_focus, scale, size), (centre_focus, _, _) = focuses
        assert scale == 2.0
        assert click_focus == (40.0 + dx, 30.0 + dy)
        assert centre_focus == (80.0 + dx, 50.0 + dy)
        assert size[1] >= 100 + dy

    def test_disabled_effects_only_resize(self):
        renderer = FrameRenderer(EffectsConfig.disabled(), OutputConfig(width=320, height=200))
        frame = resolved(image_bytes(color=(10, 200, 30), fmt="PNG"))
        pixel = renderer.render_frame(frame).pixels.getpixel((160, 100))
        assert pixel == (10, 200, 30, 255)

    def test_decode_resizes_to_viewport(self):
        renderer = FrameRenderer(EffectsConfig.disabled(), OutputConfig(width=160, height=100))
        frame = resolved(image_bytes(size=(320, 200)))
        assert renderer.decode(frame).size == (160, 100)

    def test_render_all(self):
        renderer = FrameRenderer(EffectsConfig(), OutputConfig(width=200, height=150, fps=10))
        data = image_bytes()
        frames = [
            resolved(data, index=i, timestamp=i * 100.0, click_position=(80.0, 50.0) if i == 2 else None,
                     click_progress=0.0 if i == 2 else None)
            for i in range(5)
        ]
        rendered = renderer.render_all(frames)
        assert [r.index for r in rendered] == list(range(5))
        assert all(r.pixels.size == (200, 150) for r in rendered)
        assert renderer.render_all([]) == []
