"""Speed ramp, adaptive zoom, frame contexts and crossfades."""

import dataclasses

import pytest
from PIL import Image

from democast.capture.paths import linear
from democast.capture.resampler import ResolvedFrame
from democast.compose.renderer import RenderedFrame
from democast.compose.timeline import (
    apply_crossfades,
    apply_speed_ramp,
    calculate_adaptive_zoom,
    calculate_frame_contexts,
    crossfade_window,
    find_fade_boundaries,
    transition_frame_count,
)
from democast.scenario.models import EffectsConfig, SpeedRampConfig, Step


def make_frames(count, clicks=(), steps=None, fps=10):
    frames = []
    for i in range(count):
        clicked = i in clicks
        frames.append(
            ResolvedFrame(
                index=i,
                image=b"",
                timestamp=i * 1000.0 / fps,
                cursor_position=(float(i), float(i)),
                click_position=(50.0, 50.0) if clicked else None,
                click_progress=0.0 if clicked else None,
                viewport=(100, 100),
                step_index=steps[i] if steps else 0,
            )
        )
    return frames


def solid(value):
    return Image.new("RGBA", (4, 4), (value, value, value, 255))


def step(transition="none"):
    return Step.model_validate(
        {"actions": [{"action": "wait", "duration": 1}], "transition": transition}
    )


class TestSpeedRamp:
    def test_disabled_is_identity(self):
        frames = make_frames(5, clicks={2})
        assert apply_speed_ramp(frames, SpeedRampConfig(), 10) is frames

    def test_slow_around_clicks_fast_elsewhere(self):
        frames = make_frames(10, clicks={5})
        config = SpeedRampConfig(enabled=True, idle_speed=3, action_speed=0.5)

        out = apply_speed_ramp(frames, config, fps=2)

        # action window is 5 +/- 2; idle frames 0, 1, 2, 8, 9 keep every 3rd index
        sources = [int(f.cursor_position[0]) for f in out]
        assert sources == [0, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7, 9]
        assert [f.index for f in out] == list(range(len(out)))

    def test_no_clicks_only_drops(self):
        frames = make_frames(9)
        config = SpeedRampConfig(enabled=True, idle_speed=4, action_speed=1)
        out = apply_speed_ramp(frames, config, fps=10)
        assert [int(f.cursor_position[0]) for f in out] == [0, 4, 8]


class TestAdaptiveZoom:
    def test_no_clicks(self):
        frames = make_frames(6)
        assert all(calculate_adaptive_zoom(frames, i, 2.0, 3) == 1.0 for i in range(6))

    def test_peak_and_decay(self):
        frames = make_frames(12, clicks={5})
        zoom = [calculate_adaptive_zoom(frames, i, 2.0, 4, linear) for i in range(12)]
        assert zoom[5] == 2.0
        assert zoom[3] == pytest.approx(1.5)
        assert zoom[7] == pytest.approx(1.5)
        assert zoom[1] == pytest.approx(1.0)
        assert zoom[0] == 1.0
        assert zoom[10] == 1.0
        assert all(1.0 <= z <= 2.0 for z in zoom)

    def test_nearest_click_wins(self):
        frames = make_frames(12, clicks={2, 9})
        assert calculate_adaptive_zoom(frames, 8, 3.0, 2, linear) == pytest.approx(2.0)

    def test_zero_transition(self):
        frames = make_frames(5, clicks={2})
        zoom = [calculate_adaptive_zoom(frames, i, 1.8, 0) for i in range(5)]
        assert zoom == [1.0, 1.0, 1.8, 1.0, 1.0]

    def test_transition_frame_count(self):
        assert transition_frame_count(15, 600) == 9
        assert transition_frame_count(30, 0) == 0


class TestFrameContexts:
    def test_progress_trail_and_zoom(self):
        frames = make_frames(6, clicks={3})
        frames[3] = dataclasses.replace(frames[3], click_progress=None)
        effects = EffectsConfig.model_validate({"cursor": {"trailLength": 2}, "zoom": {"scale": 2}})

        contexts = calculate_frame_contexts(frames, effects, fps=10)

        assert contexts[0].click_progress is None
        assert contexts[3].click_progress == 0.5
        assert contexts[3].zoom_scale == 2.0
        assert contexts[4].cursor_trail == [(2.0, 2.0), (3.0, 3.0), (4.0, 4.0)]
        assert contexts[0].cursor_trail == [(0.0, 0.0)]

    def test_zoom_disabled(self):
        frames = make_frames(4, clicks={1})
        effects = EffectsConfig.model_validate({"zoom": {"enabled": False}})
        contexts = calculate_frame_contexts(frames, effects, fps=10)
        assert all(c.zoom_scale == 1.0 for c in contexts)


class TestCrossfades:
    def test_boundaries_only_for_fade_steps(self):
        frames = make_frames(8, steps=[0, 0, 1, 1, 2, 2, 2, 2])
        steps = [step(), step("fade"), step()]
        assert find_fade_boundaries(frames, steps) == [2]

    def test_window(self):
        assert crossfade_window(5, 20, 10) == (4, 7)
        assert crossfade_window(0, 20, 10) == (0, 2)
        assert crossfade_window(5, 6, 10) is None

    def test_blend_at_boundary(self):
        frames = make_frames(6, steps=[0, 0, 0, 1, 1, 1])
        rendered = [RenderedFrame(i, solid(v), 0.0) for i, v in enumerate([0, 0, 100, 0, 200, 200])]

        apply_crossfades(rendered, frames, [step(), step("fade")], fps=7)

        assert rendered[3].pixels.getpixel((0, 0)) == (150, 150, 150, 255)
        assert rendered[2].pixels.getpixel((0, 0)) == (100, 100, 100, 255)
        assert rendered[4].pixels.getpixel((0, 0)) == (200, 200, 200, 255)

    def test_blend_rounds_half_up(self):
        frames = make_frames(6, steps=[0, 0, 0, 1, 1, 1])
        rendered = [RenderedFrame(i, solid(v), 0.0) for i, v in enumerate([0, 0, 0, 255, 255, 255])]

        apply_crossfades(rendered, frames, [step(), step("fade")], fps=7)

        assert rendered[3].pixels.getpixel((0, 0)) == (128, 128, 128, 255)

    def test_overlapping_windows_reuse_blended_frames(self):
        frames = make_frames(8, steps=[0, 0, 0, 0, 0, 1, 2, 2])
        values = [0, 0, 0, 0, 0, 40, 200, 60]
        rendered = [RenderedFrame(i, solid(v), 0.0) for i, v in enumerate(values)]

        apply_crossfades(rendered, frames, [step(), step("fade"), step("fade")], fps=7)

        # window (4, 6) first: frame 5 = avg(0, 200)
        assert rendered[5].pixels.getpixel((0, 0))[0] == 100
        # window (5, 7) then starts from the already blended frame 5
        assert rendered[6].pixels.getpixel((0, 0))[0] == 80
