"""
Canonical geometry utilities for tree generation.

Vector helpers, spherical coordinates, rotation composition and the axis
alignment used to place axis-aligned kernel primitives along a segment.

UNIT CONVENTIONS
----------------
Angles are radians unless a function says otherwise. Z is up.
"""

import math
from typing import Sequence

import numpy as np
from scipy.spatial.transform import Rotation, Slerp

UP = np.array([0.0, 0.0, 1.0])
DOWN = np.array([0.0, 0.0, -1.0])
X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])

EPSILON = 1e-12


def golden_angle() -> float:
    """Golden angle π(3 − √5), about 137.5 degrees."""
    return math.pi * (3.0 - math.sqrt(5.0))


GOLDEN_ANGLE = golden_angle()


def normalize(v: Sequence[float], fallback: np.ndarray = UP) -> np.ndarray:
    """
    Return ``v`` scaled to unit length.

    Zero-length input returns a copy of ``fallback`` instead of dividing by
    zero.
    """
    v = np.asarray(v, dtype=float)
    n = np.linalg.norm(v)
    if n < EPSILON:
        return np.array(fallback, dtype=float)
    return v / n


def lerp(a: Sequence[float], b: Sequence[float], t: float) -> np.ndarray:
    """Linear interpolation ``a + (b - a) * t``."""
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    return a + (b - a) * t


def spherical_to_cartesian(radius: float, inclination: float, azimuth: float) -> np.ndarray:
    """
    Convert spherical coordinates to a Cartesian vector.

    Parameters
    ----------
    radius : float
        Distance from the origin
    inclination : float
        Angle from +Z
    azimuth : float
        Angle in the XY plane from +X

    Returns
    -------
    np.ndarray
        (x, y, z)
    """
    s = math.sin(inclination)
    return np.array([
        radius * s * math.cos(azimuth),
        radius * s * math.sin(azimuth),
        radius * math.cos(inclination),
    ])


def branch_direction(parent_dir: Sequence[float], theta: float, phi: float) -> np.ndarray:
    """
    Direction of a child branch relative to its parent.

    The parent axis is tilted away by the polar angle ``theta`` after
    choosing the azimuth ``phi`` around it.

    Parameters
    ----------
    parent_dir : array-like
        Parent growth direction (need not be unit length)
    theta : float
        Angle between parent and child
    phi : float
        Azimuth of the child around the parent axis

    Returns
    -------
    np.ndarray
        Unit child direction
    """
    up = normalize(parent_dir)
    arbitrary = UP if abs(up[2]) < 0.9 else X_AXIS
    right = normalize(np.cross(up, arbitrary))
    forward = normalize(np.cross(right, up))

    rotated_right = right * math.cos(phi) + forward * math.sin(phi)
    return normalize(up * math.cos(theta) + rotated_right * math.sin(theta))


def rotation_between(a: Sequence[float], b: Sequence[float]) -> Rotation:
    """
    Shortest-arc rotation taking direction ``a`` onto direction ``b``.

    Antiparallel inputs rotate by π about an axis perpendicular to ``a``.
    """
    a = normalize(a)
    b = normalize(b)
    axis = np.cross(a, b)
    sin_angle = np.linalg.norm(axis)
    cos_angle = float(np.dot(a, b))

    if sin_angle < 1e-9:
        if cos_angle > 0.0:
            return Rotation.identity()
        perpendicular = np.cross(a, X_AXIS)
        if np.linalg.norm(perpendicular) < 1e-6:
            perpendicular = np.cross(a, Y_AXIS)
        return Rotation.from_rotvec(normalize(perpendicular) * math.pi)

    angle = math.atan2(sin_angle, cos_angle)
    return Rotation.from_rotvec(axis / sin_angle * angle)


def slerp_rotation(r0: Rotation, r1: Rotation, t: float) -> Rotation:
    """Spherical interpolation between two orientations."""
    t = float(np.clip(t, 0.0, 1.0))
    if t == 0.0:
        return r0
    if t == 1.0:
        return r1
    return Slerp([0.0, 1.0], Rotation.concatenate([r0, r1]))([t])[0]


def axis_alignment_angles(direction: Sequence[float], vertical_tol: float = 1e-3) -> np.ndarray:
    """
    Euler angles (degrees, applied X then Y then Z) mapping +Z onto ``direction``.

    The yaw comes from ``atan2`` of the horizontal projection and the pitch
    from ``atan2`` of the vertical component over the horizontal distance.
    When the horizontal projection is shorter than ``vertical_tol`` the yaw
    is undefined, so straight-up and straight-down directions are handled
    explicitly.

    Parameters
    ----------
    direction : array-like
        Target axis (need not be unit length)
    vertical_tol : float
        Horizontal distance below which the axis counts as vertical

    Returns
    -------
    np.ndarray
        (rx, ry, rz) in degrees
    """
    dx, dy, dz = (float(c) for c in direction)
    horizontal = math.hypot(dx, dy)

    if horizontal < vertical_tol:
        if dz >= 0.0:
            return np.array([0.0, 0.0, 0.0])
        return np.array([180.0, 0.0, 0.0])

    yaw = math.degrees(math.atan2(dy, dx))
    pitch = math.degrees(math.atan2(dz, horizontal))
    return np.array([0.0, 90.0 - pitch, yaw])


def euler_rotation(angles_deg: Sequence[float]) -> Rotation:
    """Rotation matching ``axis_alignment_angles`` (extrinsic X, Y, Z)."""
    return Rotation.from_euler("xyz", angles_deg, degrees=True)


__all__ = [
    "UP",
    "DOWN",
    "X_AXIS",
    "Y_AXIS",
    "GOLDEN_ANGLE",
    "golden_angle",
    "normalize",
    "lerp",
    "spherical_to_cartesian",
    "branch_direction",
    "rotation_between",
    "slerp_rotation",
    "axis_alignment_angles",
    "euler_rotation",
]
