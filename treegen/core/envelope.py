"""
Crown envelope: ellipsoidal containment volume for branch growth.

The envelope keeps every recursively grown branch inside a believable
canopy silhouette. Distances are measured in the ellipsoid's normalized
frame, where the surface is the unit sphere: a value of 0 is on the
surface, negative inside and positive outside.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from .types import Vec3, as_vec3
from ..utils.geometry import UP, normalize


@dataclass(frozen=True)
class CrownEnvelope:
    """Axis-aligned ellipsoid with ``center`` and semi-axes ``radii``."""

    center: Vec3
    radii: Vec3

    def __post_init__(self):
        if min(self.radii) <= 0.0:
            raise ValueError(f"Envelope radii must be positive, got {self.radii}")

    @classmethod
    def for_crown(
        cls,
        crown_base: float,
        crown_height: float,
        crown_width: float = 1.0,
        width_fraction: float = 0.4,
        height_fraction: float = 0.48,
    ) -> "CrownEnvelope":
        """
        Envelope centered in the crown volume of a tree.

        Parameters
        ----------
        crown_base : float
            Height where the crown starts
        crown_height : float
            Vertical extent of the crown
        crown_width : float
            Caller-supplied width multiplier
        width_fraction : float
            Horizontal semi-axis as a fraction of crown height
        height_fraction : float
            Vertical semi-axis as a fraction of crown height
        """
        horizontal = crown_height * width_fraction * crown_width
        vertical = crown_height * height_fraction
        return cls(
            center=(0.0, 0.0, crown_base + vertical),
            radii=(horizontal, horizontal, vertical),
        )

    @property
    def center_array(self) -> np.ndarray:
        return np.array(self.center, dtype=float)

    @property
    def radii_array(self) -> np.ndarray:
        return np.array(self.radii, dtype=float)

    @property
    def top(self) -> float:
        return self.center[2] + self.radii[2]

    def _normalized(self, point: Sequence[float]) -> np.ndarray:
        return (np.asarray(point, dtype=float) - self.center_array) / self.radii_array

    def signed_distance(self, point: Sequence[float]) -> float:
        """Normalized signed distance to the surface (negative inside)."""
        return float(np.linalg.norm(self._normalized(point)) - 1.0)

    def contains(self, point: Sequence[float], tol: float = 0.0) -> bool:
        return self.signed_distance(point) <= tol

    def outward_direction(self, point: Sequence[float]) -> np.ndarray:
        """
        Unit direction from the center toward ``point`` in the normalized frame.

        Used to sweep branch tips toward the silhouette. At the center the
        direction is undefined and +Z is returned.
        """
        return normalize(self._normalized(point), fallback=UP)

    def project_to_surface(self, point: Sequence[float]) -> np.ndarray:
        """Radially project ``point`` onto the surface from the center."""
        q = self._normalized(point)
        n = np.linalg.norm(q)
        if n < 1e-12:
            q = np.array([0.0, 0.0, 1.0])
            n = 1.0
        return self.center_array + (q / n) * self.radii_array

    def clip_segment(self, start: Sequence[float], end: Sequence[float]) -> np.ndarray:
        """
        Shorten ``start -> end`` so the returned end point lies on the surface.

        Solves the ray/ellipsoid intersection along the straight line from
        ``start`` to ``end``. If ``end`` is already inside it is returned
        unchanged. A start point outside the envelope has no inside
        portion, so the end point is projected radially instead.

        Returns
        -------
        np.ndarray
            The (possibly shortened) end point
        """
        start = np.asarray(start, dtype=float)
        end = np.asarray(end, dtype=float)
        if self.signed_distance(end) <= 0.0:
            return end

        s = self._normalized(start)
        d = (end - start) / self.radii_array
        a = float(np.dot(d, d))
        b = 2.0 * float(np.dot(s, d))
        c = float(np.dot(s, s)) - 1.0

        if c > 1e-9 or a < 1e-18:
            return self.project_to_surface(end)

        disc = max(b * b - 4.0 * a * c, 0.0)
        t = (-b + np.sqrt(disc)) / (2.0 * a)
        t = float(np.clip(t, 0.0, 1.0))
        return start + (end - start) * t

    def bounds(self) -> Tuple[Vec3, Vec3]:
        c = self.center_array
        r = self.radii_array
        return as_vec3(c - r), as_vec3(c + r)

    def to_dict(self) -> dict:
        return {"center": list(self.center), "radii": list(self.radii)}


__all__ = ["CrownEnvelope"]
