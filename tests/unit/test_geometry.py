"""
Unit tests for the canonical geometry helpers.
"""

import math

import numpy as np
import pytest


DIRECTIONS = [
    (1.0, 0.0, 0.0),
    (0.0, 1.0, 0.0),
    (0.0, 0.0, 1.0),
    (0.0, 0.0, -1.0),
    (1.0, 2.0, 3.0),
    (-0.3, 0.4, -2.0),
    (0.0005, 0.0, 1.0),
    (-1.0, -1.0, 0.2),
]


class TestVectorHelpers:
    """Tests for normalize, lerp and spherical coordinates."""

    def test_normalize_unit_length(self):
        from treegen.utils.geometry import normalize

        v = normalize([3.0, 4.0, 0.0])
        assert np.allclose(v, [0.6, 0.8, 0.0])

    def test_normalize_zero_returns_fallback(self):
        """Zero vectors return the fallback instead of NaN."""
        from treegen.utils.geometry import normalize, X_AXIS

        v = normalize([0.0, 0.0, 0.0], fallback=X_AXIS)
        assert np.allclose(v, X_AXIS)
        assert v is not X_AXIS

    def test_lerp(self):
        from treegen.utils.geometry import lerp

        assert np.allclose(lerp([0, 0, 0], [2, 4, 6], 0.5), [1, 2, 3])

    def test_spherical_to_cartesian(self):
        from treegen.utils.geometry import spherical_to_cartesian

        assert np.allclose(spherical_to_cartesian(2.0, 0.0, 1.0), [0, 0, 2])
        assert np.allclose(spherical_to_cartesian(1.0, math.pi / 2, math.pi / 2), [0, 1, 0])

    def test_golden_angle(self):
        from treegen.utils.geometry import GOLDEN_ANGLE, golden_angle

        assert golden_angle() == pytest.approx(2.399963, abs=1e-6)
        assert GOLDEN_ANGLE == golden_angle()


class TestBranchDirection:
    """Tests for child direction relative to the parent axis."""

    @pytest.mark.parametrize("parent", DIRECTIONS)
    def test_polar_angle_is_preserved(self, parent):
        from treegen.utils.geometry import branch_direction, normalize

        for theta in (0.1, 0.7, 1.4):
            child = branch_direction(parent, theta, 0.9)
            assert np.linalg.norm(child) == pytest.approx(1.0)
            cos_angle = float(np.dot(child, normalize(parent)))
            assert math.acos(np.clip(cos_angle, -1, 1)) == pytest.approx(theta, abs=1e-9)

    def test_zero_theta_follows_parent(self):
        from treegen.utils.geometry import branch_direction

        assert np.allclose(branch_direction([0, 0, 5], 0.0, 2.0), [0, 0, 1])


class TestRotations:
    """Tests for rotation composition helpers."""

    @pytest.mark.parametrize("target", DIRECTIONS)
    def test_rotation_between_maps_a_onto_b(self, target):
        from treegen.utils.geometry import rotation_between, normalize, UP

        rotation = rotation_between(UP, target)
        assert np.allclose(rotation.apply(UP), normalize(target), atol=1e-9)

    def test_rotation_between_antiparallel(self):
        from treegen.utils.geometry import rotation_between

        rotation = rotation_between([1, 0, 0], [-1, 0, 0])
        assert np.allclose(rotation.apply([1, 0, 0]), [-1, 0, 0], atol=1e-9)

    def test_slerp_endpoints_and_midpoint(self):
        from scipy.spatial.transform import Rotation
        from treegen.utils.geometry import slerp_rotation

        r0 = Rotation.identity()
        r1 = Rotation.from_rotvec([0.0, 0.0, math.pi / 2])
        assert slerp_rotation(r0, r1, 0.0) is r0
        assert slerp_rotation(r0, r1, 1.0) is r1
        mid = slerp_rotation(r0, r1, 0.5)
        assert mid.magnitude() == pytest.approx(math.pi / 4)


class TestAxisAlignment:
    """Tests for the Euler angles that place +Z primitives along a segment."""

    @pytest.mark.parametrize("direction", DIRECTIONS)
    def test_angles_map_z_onto_direction(self, direction):
        from treegen.utils.geometry import axis_alignment_angles, euler_rotation, normalize, UP

        angles = axis_alignment_angles(direction, vertical_tol=1e-6)
        mapped = euler_rotation(angles).apply(UP)
        assert np.allclose(mapped, normalize(direction), atol=1e-9)

    def test_vertical_up_is_identity(self):
        from treegen.utils.geometry import axis_alignment_angles

        assert np.allclose(axis_alignment_angles([0, 0, 2]), [0, 0, 0])

    def test_vertical_down_flips_about_x(self):
        from treegen.utils.geometry import axis_alignment_angles

        assert np.allclose(axis_alignment_angles([0, 0, -2]), [180, 0, 0])

    def test_near_vertical_within_tolerance_snaps(self):
        """Horizontal offsets under the tolerance are treated as vertical."""
        from treegen.utils.geometry import axis_alignment_angles

        angles = axis_alignment_angles([1e-5, 0.0, 1.0], vertical_tol=1e-3)
        assert np.allclose(angles, [0, 0, 0])
