import pytest

from democast.capture.paths import (
    ease_in_cubic,
    ease_in_out_cubic,
    ease_out_cubic,
    get_easing,
    interpolate_path,
    linear,
    smooth_path,
    speed_preset,
)


class TestEasing:
    def test_ease_in_out_fixed_points(self):
        assert ease_in_out_cubic(0) == 0
        assert ease_in_out_cubic(1) == 1
        assert ease_in_out_cubic(0.5) == pytest.approx(0.5)

    @pytest.mark.parametrize("t", [0.1, 0.25, 0.4, 0.7, 0.93])
    def test_ease_in_out_is_symmetric(self, t):
        assert ease_in_out_cubic(t) + ease_in_out_cubic(1 - t) == pytest.approx(1.0)

    def test_lookup_by_name(self):
        assert get_easing("ease-in-out") is ease_in_out_cubic
        assert get_easing("ease-in") is ease_in_cubic
        assert get_easing("ease-out") is ease_out_cubic
        assert get_easing("linear") is linear

    def test_unknown_easing(self):
        with pytest.raises(ValueError):
            get_easing("bounce")


class TestInterpolatePath:
    def test_endpoints_and_length(self):
        path = interpolate_path((0, 0), (640, 400), 12)
        assert len(path) == 13
        assert path[0] == pytest.approx((0, 0))
        assert path[-1] == pytest.approx((640, 400))

    def test_degenerate_step_counts(self):
        assert interpolate_path((1, 2), (3, 4), 0) == [(3, 4)]
        assert interpolate_path((1, 2), (3, 4), -5) == [(3, 4)]
        assert interpolate_path((1, 2), (3, 4), 1) == [(1, 2), (3, 4)]

    def test_path_is_curved(self):
        # a straight horizontal move bows away from the line y == 0
        path = interpolate_path((0, 0), (100, 0), 10)
        assert any(abs(y) > 0.5 for _, y in path[1:-1])


class TestSmoothPath:
    def test_short_paths_unchanged(self):
        assert smooth_path([(0, 0), (5, 5)]) == [(0, 0), (5, 5)]
        assert smooth_path([]) == []

    def test_endpoints_preserved(self):
        points = [(0, 0), (10, 0), (10, 10), (20, 10)]
        out = smooth_path(points, 0.5)
        assert out[0] == (0, 0)
        assert out[-1] == (20, 10)
        assert len(out) == 2 * (len(points) - 1) + 2

    def test_tension_controls_cut(self):
        out = smooth_path([(0, 0), (100, 0), (100, 100)], 1.0)
        assert out[1] == pytest.approx((25, 0))
        assert out[2] == pytest.approx((75, 0))


class TestSpeedPresets:
    def test_presets(self):
        assert speed_preset("fast") == (12, 6)
        assert speed_preset("normal") == (18, 8)
        assert speed_preset("slow") == (24, 12)

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            speed_preset("warp")
