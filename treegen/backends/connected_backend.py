"""
Connected-growth generator.

Every new branch roots at an endpoint produced earlier, so the skeleton is
one connected piece with no floating geometry. After a warm-up period the
generator occasionally closes a short loop from the newest endpoint to a
nearby earlier one; those cycles are intentional and give lattice-like,
self-supporting crowns.
"""

from typing import List, Optional
import logging
import math

import numpy as np
from scipy.spatial import cKDTree

from .base import GenerationBackend
from ..core.types import BranchSegment, as_vec3
from ..policies import OrganicPolicy
from ..utils.geometry import normalize

logger = logging.getLogger(__name__)


class ConnectedBackend(GenerationBackend):
    """
    Endpoint-rooted random growth with occasional loop closure.

    Loop partners are found with a KD-tree over all endpoints produced so
    far, restricted to ``(loop_min_distance, loop_max_distance)``.
    """

    name = "connected"

    def __init__(self):
        super().__init__()
        self.segments: List[BranchSegment] = []
        self.endpoints: List[np.ndarray] = []
        self.loop_count = 0

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
        Generate a connected skeleton.

        Parameters
        ----------
        policy : OrganicPolicy, optional
            Trunk, crown and loop settings
        seed : int
            Seed for this call
        min_radius : float
            Printable floor. The trunk is thickened to reach it; growth steps
            and loop closures that would fall under it are not emitted.
        crown_density_override : float, optional
            Replaces ``policy.crown_density`` (0-1)

        Returns
        -------
        List[BranchSegment]
            Trunk, growth and loop segments
        """
        if policy is None:
            policy = OrganicPolicy()
        self.segments = []
        self.endpoints = []
        self.loop_count = 0
        self.rng.reseed(seed)

        floor = float(min_radius)
        density = policy.crown_density if crown_density_override is None else crown_density_override
        thickness = policy.branch_thickness
        trunk_top = np.array([0.0, 0.0, policy.trunk_height])
        self.segments.append(
            BranchSegment(
                start=(0.0, 0.0, 0.0),
                end=as_vec3(trunk_top),
                r1=max(policy.trunk_radius, thickness * 2.0, floor),
                r2=max(policy.trunk_radius * 0.7, thickness * 1.5, floor),
            )
        )
        self.endpoints.append(trunk_top)

        steps = int(20 + density * 60)
        base_length = policy.crown_radius * 0.3
        skipped = 0

        for i in range(steps):
            parent = self.endpoints[self.rng.index(len(self.endpoints))].copy()

            azimuth = self.rng.uniform(0.0, 2.0 * math.pi)
            upward = self.rng.uniform(0.2, 0.8)
            direction = normalize([
                math.cos(azimuth) * (1.0 - upward),
                math.sin(azimuth) * (1.0 - upward),
                upward,
            ])

            progress = i / steps
            length = base_length * self.rng.uniform(0.3, 1.0) * (1.0 - progress * 0.5)
            end = parent + direction * length
            end = end + np.array([
                self.rng.uniform(-0.2, 0.2),
                self.rng.uniform(-0.2, 0.2),
                self.rng.uniform(-0.1, 0.3),
            ])

            radius = thickness * (1.0 - progress * 0.3)
            if radius * 0.9 < floor:
                skipped += 1
                continue
            self.segments.append(
                BranchSegment(start=as_vec3(parent), end=as_vec3(end), r1=radius, r2=radius * 0.9, level=1)
            )
            self.endpoints.append(end)

            closable = thickness * 0.8 >= floor
            if self.rng.random() < policy.loop_probability and i > policy.loop_warmup and closable:
                self._try_close_loop(end, thickness * 0.8, policy)

        if skipped:
            logger.debug(f"Dropped {skipped} growth steps under the {floor} radius floor")
        logger.info(
            f"Connected tree generated {len(self.segments)} segments "
            f"({self.loop_count} loop closures)"
        )
        return self.segments

    def _try_close_loop(self, source: np.ndarray, thickness: float, policy: OrganicPolicy) -> bool:
        points = np.asarray(self.endpoints)
        tree = cKDTree(points)
        candidates = tree.query_ball_point(source, policy.loop_max_distance, return_sorted=True)
        nearby = [
            idx
            for idx in candidates
            if policy.loop_min_distance < np.linalg.norm(points[idx] - source) < policy.loop_max_distance
        ]
        if not nearby:
            return False

        target = points[nearby[self.rng.index(len(nearby))]]
        self.segments.append(
            BranchSegment(start=as_vec3(source), end=as_vec3(target), r1=thickness, r2=thickness, level=1)
        )
        self.loop_count += 1
        return True


__all__ = ["ConnectedBackend"]
