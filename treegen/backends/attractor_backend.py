"""
Chaotic attractor curve for the decorative "abstract" mode.

The curve is integrated with classic RK4 and emitted as a chain of
constant-radius segments, so it flows through the same assembly and
export path as the tree skeletons.
"""

from typing import Callable, Dict, List, Optional
import logging

import numpy as np

from .base import GenerationBackend
from ..core.types import BranchSegment, as_vec3
from ..policies import AttractorPolicy

logger = logging.getLogger(__name__)

START_POINT = (0.1, 0.1, 0.1)


def thomas(p: np.ndarray, b: float = 0.2081) -> np.ndarray:
    x, y, z = p
    return np.array([
        -b * x + np.sin(y),
        -b * y + np.sin(z),
        -b * z + np.sin(x),
    ])


def aizawa(
    p: np.ndarray,
    a: float = 0.95,
    b: float = 0.7,
    c: float = 0.6,
    d: float = 3.5,
    e: float = 0.25,
    f: float = 0.1,
) -> np.ndarray:
    x, y, z = p
    return np.array([
        (z - b) * x - d * y,
        d * x + (z - b) * y,
        c + a * z - z ** 3 / 3.0 - (x ** 2 + y ** 2) * (1.0 + e * z) + f * z * x ** 3,
    ])


ATTRACTORS: Dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "thomas": thomas,
    "aizawa": aizawa,
}


def integrate(kind: str, iterations: int, dt: float) -> np.ndarray:
    """
    Integrate an attractor from (0.1, 0.1, 0.1) with fixed-step RK4.

    Returns
    -------
    np.ndarray
        (iterations, 3) array of the states after each step
    """
    if kind not in ATTRACTORS:
        raise ValueError(f"Unknown attractor '{kind}'. Expected one of {sorted(ATTRACTORS)}")
    field = ATTRACTORS[kind]

    p = np.array(START_POINT, dtype=float)
    points = np.empty((max(int(iterations), 0), 3))
    for i in range(points.shape[0]):
        k1 = field(p)
        k2 = field(p + k1 * dt / 2.0)
        k3 = field(p + k2 * dt / 2.0)
        k4 = field(p + k3 * dt)
        p = p + (dt / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
        points[i] = p
    return points


class AttractorBackend(GenerationBackend):
    """
    Attractor polyline as tube segments.

    The curve is centered over the origin and lifted so its lowest tube
    surface touches z = 0.
    """

    name = "attractor"

    @property
    def supports_closed_loops(self) -> bool:
        return True

    def generate_from_spec(self, spec) -> List[BranchSegment]:
        return self.generate(spec.attractor, seed=spec.seed)

    def generate(self, policy: Optional[AttractorPolicy] = None, seed: Optional[int] = None) -> List[BranchSegment]:
        if policy is None:
            policy = AttractorPolicy()
        self.rng.reseed(seed)

        points = integrate(policy.attractor, policy.iterations, policy.dt) * policy.scale
        if points.shape[0] < 2:
            return []

        lo = points.min(axis=0)
        hi = points.max(axis=0)
        offset = np.array([-(lo[0] + hi[0]) / 2.0, -(lo[1] + hi[1]) / 2.0, policy.radius - lo[2]])
        points = points + offset

        segments = [
            BranchSegment(start=as_vec3(a), end=as_vec3(b), r1=policy.radius, r2=policy.radius)
            for a, b in zip(points[:-1], points[1:])
            if np.linalg.norm(b - a) > 1e-9
        ]
        logger.info(f"{policy.attractor} attractor produced {len(segments)} segments")
        return segments


__all__ = ["AttractorBackend", "ATTRACTORS", "integrate", "thomas", "aizawa"]
