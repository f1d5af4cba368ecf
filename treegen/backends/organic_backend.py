"""
Organic "cloud crown" generator.

A tapered trunk, a ring of main branches leaving just under the trunk top,
short recursive secondary branches, and many small closed loops (ovals and
figure-eights) scattered through the crown ellipsoid. The loops are not
attached to the branch tree; after union they read as a dense, printable
lattice crown.
"""

from typing import List, Optional
import logging
import math

import numpy as np
from scipy.spatial.transform import Rotation

from .base import GenerationBackend
from ..core.types import BranchSegment, as_vec3
from ..policies import OrganicPolicy
from ..utils.geometry import normalize

logger = logging.getLogger(__name__)

SECONDARY_DEPTH = 2
MIN_SECONDARY_LENGTH = 0.3
OVAL_POINTS = 8
FIGURE_EIGHT_POINTS = 12


class OrganicBackend(GenerationBackend):
    """Trunk, main and secondary branches, then decorative crown loops."""

    name = "organic"

    def __init__(self):
        super().__init__()
        self.segments: List[BranchSegment] = []
        self.floor = 0.0
        self.density = 0.5
        self.dropped = 0

    @property
    def supports_closed_loops(self) -> bool:
        return True

    def generate_from_spec(self, spec) -> List[BranchSegment]:
        return self.generate(
            spec.organic,
            seed=spec.seed,
            min_radius=spec.min_radius,
            crown_density_override=spec.crown_density_override,
        )

    def generate(
        self,
        policy: Optional[OrganicPolicy] = None,
        seed: int = 42,
        min_radius: float = 0.0,
        crown_density_override: Optional[float] = None,
    ) -> List[BranchSegment]:
        """
        Generate an organic skeleton.

        Parameters
        ----------
        policy : OrganicPolicy, optional
            Trunk and crown dimensions
        seed : int
            Seed for this call
        min_radius : float
            Printable floor. The trunk is thickened to reach it; branches
            and loop segments under it are not emitted, and a dropped branch
            takes its sub-branches with it.
        crown_density_override : float, optional
            Replaces ``policy.crown_density`` (0-1)

        Returns
        -------
        List[BranchSegment]
            Trunk, branches and loop segments
        """
        if policy is None:
            policy = OrganicPolicy()
        self.segments = []
        self.floor = float(min_radius)
        self.density = policy.crown_density if crown_density_override is None else crown_density_override
        self.dropped = 0
        self.rng.reseed(seed)

        trunk_top = np.array([0.0, 0.0, policy.trunk_height])
        self._emit(
            (0.0, 0.0, 0.0),
            trunk_top,
            max(policy.trunk_radius, policy.branch_thickness, self.floor),
            max(policy.trunk_radius * 0.7, policy.branch_thickness, self.floor),
        )

        self._main_branches(trunk_top, policy)
        self._crown_loops(trunk_top, policy)

        if self.dropped:
            logger.debug(f"Dropped {self.dropped} segments under the {self.floor} radius floor")
        logger.info(f"Organic tree generated {len(self.segments)} segments")
        return self.segments

    def _emit(self, start, end, r1: float, r2: float, level: int = 0) -> bool:
        if min(r1, r2) < self.floor:
            self.dropped += 1
            return False
        self.segments.append(
            BranchSegment(start=as_vec3(start), end=as_vec3(end), r1=float(r1), r2=float(r2), level=level)
        )
        return True

    def _main_branches(self, trunk_top: np.ndarray, policy: OrganicPolicy) -> None:
        count = int(3 + self.density * 4)
        thickness = policy.branch_thickness
        start = trunk_top - np.array([0.0, 0.0, 0.5])

        for i in range(count):
            azimuth = (i / count) * 2.0 * math.pi + self.rng.uniform(-0.2, 0.2)
            tilt = self.rng.uniform(0.3, 0.8)
            direction = np.array([
                math.sin(azimuth) * math.sin(tilt),
                math.cos(azimuth) * math.sin(tilt),
                math.cos(tilt),
            ])
            length = policy.crown_radius * self.rng.uniform(0.4, 0.7)
            end = start + direction * length

            if self._emit(start, end, thickness * 1.5, thickness, level=1):
                self._secondary_branches(end, direction, thickness, policy.crown_radius * 0.4, SECONDARY_DEPTH, 2)

    def _secondary_branches(
        self,
        origin: np.ndarray,
        parent_dir: np.ndarray,
        thickness: float,
        length: float,
        depth: int,
        level: int,
    ) -> None:
        if depth <= 0 or length < MIN_SECONDARY_LENGTH:
            return

        count = 2 + int(self.rng.random() * 2)
        for _ in range(count):
            deviation = np.array([
                self.rng.uniform(-0.5, 0.5),
                self.rng.uniform(-0.5, 0.5),
                self.rng.uniform(0.0, 0.5),
            ])
            direction = normalize(parent_dir + deviation, fallback=parent_dir)
            branch_length = length * self.rng.uniform(0.5, 0.9)
            end = origin + direction * branch_length

            if self._emit(origin, end, thickness, thickness * 0.8, level=level):
                self._secondary_branches(end, direction, thickness * 0.8, branch_length * 0.7, depth - 1, level + 1)

    def _crown_loops(self, trunk_top: np.ndarray, policy: OrganicPolicy) -> None:
        count = int(8 + self.density * 20)
        crown_center = trunk_top + np.array([0.0, 0.0, policy.crown_height * 0.4])

        for _ in range(count):
            phi = self.rng.random() * 2.0 * math.pi
            theta = self.rng.random() * math.pi
            r = math.sqrt(self.rng.random()) * policy.crown_radius
            offset = np.array([
                math.sin(theta) * math.cos(phi) * r,
                math.sin(theta) * math.sin(phi) * r,
                math.cos(theta) * policy.crown_height * 0.4 + self.rng.uniform(-0.5, 0.5),
            ])
            size = self.rng.uniform(0.5, 1.5)
            self._loop(crown_center + offset, policy.branch_thickness, size)

    def _loop(self, center: np.ndarray, thickness: float, size: float) -> None:
        if self.rng.random() < 0.5:
            points = self._oval_points(size)
        else:
            points = self._figure_eight_points(size)
        points = points + center
        for a, b in zip(points[:-1], points[1:]):
            self._emit(a, b, thickness, thickness, level=0)

    def _random_orientation(self) -> Rotation:
        rot_x = self.rng.uniform(0.0, math.pi)
        rot_y = self.rng.uniform(0.0, 2.0 * math.pi)
        return Rotation.from_euler("xyz", [rot_x, rot_y, 0.0])

    def _oval_points(self, size: float) -> np.ndarray:
        rotation = self._random_orientation()
        scale_x = self.rng.uniform(0.6, 1.0)
        scale_y = self.rng.uniform(0.6, 1.0)
        angles = np.linspace(0.0, 2.0 * math.pi, OVAL_POINTS + 1)
        local = np.column_stack([
            np.cos(angles) * size * scale_x,
            np.sin(angles) * size * scale_y,
            np.zeros_like(angles),
        ])
        return rotation.apply(local)

    def _figure_eight_points(self, size: float) -> np.ndarray:
        rotation = self._random_orientation()
        t = np.linspace(0.0, 2.0 * math.pi, FIGURE_EIGHT_POINTS + 1)
        # Lemniscate-like curve, pinched where sin(t)^2 is large.
        s = 1.0 / (1.0 + np.sin(t) ** 2 * 0.5)
        local = np.column_stack([
            np.sin(t) * size * s,
            np.cos(t) * size * 0.3 * s,
            np.sin(t) * np.cos(t) * size * 0.5 * s,
        ])
        return rotation.apply(local)


__all__ = ["OrganicBackend"]
