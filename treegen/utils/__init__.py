"""Utility modules for tree generation."""

from .geometry import (
    UP,
    DOWN,
    GOLDEN_ANGLE,
    golden_angle,
    normalize,
    lerp,
    spherical_to_cartesian,
    branch_direction,
    rotation_between,
    slerp_rotation,
    axis_alignment_angles,
    euler_rotation,
)

__all__ = [
    "UP",
    "DOWN",
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
