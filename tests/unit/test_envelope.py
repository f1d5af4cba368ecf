"""
Unit tests for the crown envelope.
"""

import numpy as np
import pytest


def _envelope():
    from treegen.core.envelope import CrownEnvelope

    return CrownEnvelope.for_crown(crown_base=5.0, crown_height=10.0)


class TestCrownEnvelope:
    """Tests for CrownEnvelope geometry."""

    def test_for_crown_dimensions(self):
        env = _envelope()
        assert env.center == pytest.approx((0.0, 0.0, 9.8))
        assert env.radii == pytest.approx((4.0, 4.0, 4.8))
        assert env.top == pytest.approx(14.6)

    def test_crown_width_scales_horizontal_axes(self):
        from treegen.core.envelope import CrownEnvelope

        env = CrownEnvelope.for_crown(5.0, 10.0, crown_width=1.5)
        assert env.radii[0] == pytest.approx(6.0)
        assert env.radii[2] == pytest.approx(4.8)

    def test_signed_distance(self):
        env = _envelope()
        assert env.signed_distance(env.center) == pytest.approx(-1.0)
        assert env.signed_distance((4.0, 0.0, 9.8)) == pytest.approx(0.0)
        assert env.signed_distance((8.0, 0.0, 9.8)) == pytest.approx(1.0)
        assert env.contains((0.0, 0.0, 14.0))
        assert not env.contains((0.0, 0.0, 15.0))

    def test_invalid_radii(self):
        from treegen.core.envelope import CrownEnvelope

        with pytest.raises(ValueError):
            CrownEnvelope(center=(0, 0, 0), radii=(1.0, 0.0, 1.0))

    def test_outward_direction_at_center_is_up(self):
        env = _envelope()
        assert np.allclose(env.outward_direction(env.center), [0, 0, 1])


class TestClipSegment:
    """Tests for clipping a branch to the envelope surface."""

    def test_inside_end_unchanged(self):
        env = _envelope()
        end = env.clip_segment(env.center, (1.0, 0.0, 10.0))
        assert np.allclose(end, [1.0, 0.0, 10.0])

    def test_outside_end_lands_on_surface(self):
        env = _envelope()
        start = np.array([0.0, 0.0, 9.0])
        end = env.clip_segment(start, (20.0, 3.0, 12.0))
        assert env.signed_distance(end) == pytest.approx(0.0, abs=1e-9)

        # Still on the original line
        direction = np.array([20.0, 3.0, 3.0])
        offset = end - start
        assert np.allclose(np.cross(offset, direction), 0.0, atol=1e-9)

    def test_outside_start_projects_radially(self):
        env = _envelope()
        end = env.clip_segment((0.0, 0.0, 0.0), (10.0, 0.0, 9.8))
        assert env.signed_distance(end) == pytest.approx(0.0, abs=1e-9)
        assert np.allclose(end, [4.0, 0.0, 9.8])

    def test_bounds(self):
        env = _envelope()
        lo, hi = env.bounds()
        assert lo == pytest.approx((-4.0, -4.0, 5.0))
        assert hi == pytest.approx((4.0, 4.0, 14.6))
