"""
Envelope-constrained recursive branch generator ("realistic" mode).

Botanically parameterized growth: a trunk up to the crown base, a central
leader continuing through the crown, tiers of primary branches distributed
by the golden angle, and recursive child branches clipped to an
ellipsoidal crown envelope so the silhouette stays believable regardless
of recursion depth.

UNIT CONVENTIONS
----------------
Heights and radii are model units. ``model_scale`` converts a model radius
to the physical radius compared against the printable floor. Z is up.
"""

from typing import Callable, Dict, List, Optional
import logging
import math

import numpy as np

from .base import GenerationBackend
from ..core.envelope import CrownEnvelope
from ..core.types import BranchSegment, as_vec3
from ..params.species import SpeciesPreset, AgeModifier, get_species, get_age
from ..policies import RealisticPolicy
from ..utils.geometry import UP, GOLDEN_ANGLE, branch_direction, normalize

logger = logging.getLogger(__name__)

# Radial crown profiles: fraction of the maximum crown radius available at
# normalized crown height n in [0, 1].
CROWN_PROFILES: Dict[str, Callable[[float], float]] = {
    "pyramidal": lambda n: 1.0 - n,
    "umbrella": lambda n: n,
    "dome": lambda n: math.sin(math.pi * (0.5 + 0.5 * n)),
    "oval": lambda n: math.sin(math.pi * n),
    "spreading": lambda n: math.sin(math.pi * n),
}

MIN_DEPTH = 4


def crown_radius_at(shape: str, normalized_height: float, max_radius: float) -> float:
    """Available crown radius at a normalized height for a crown shape."""
    n = min(max(normalized_height, 0.0), 1.0)
    profile = CROWN_PROFILES.get(shape, CROWN_PROFILES["oval"])
    return max(profile(n), 0.0) * max_radius


class RealisticBackend(GenerationBackend):
    """
    Recursive branching inside a crown envelope.

    Emitted segments always taper by ``policy.taper_ratio`` and never carry
    a radius under the effective floor ``max(min_radius, policy.radius_floor)``.
    Branches that would violate the floor, fall under the minimum length or
    exceed the maximum depth are not emitted at all.
    """

    name = "realistic"

    def __init__(self):
        super().__init__()
        self.segments: List[BranchSegment] = []
        self.envelope: Optional[CrownEnvelope] = None
        self.max_depth = MIN_DEPTH

    @property
    def supports_closed_loops(self) -> bool:
        return False

    def generate_from_spec(self, spec) -> List[BranchSegment]:
        return self.generate(
            height=spec.height,
            min_radius=spec.min_radius,
            seed=spec.seed,
            species=spec.species,
            age=spec.age,
            crown_width=spec.crown_width,
            trunk_height_override=spec.trunk_height_override,
            crown_density_override=spec.crown_density_override,
            policy=spec.realistic,
        )

    def generate(
        self,
        height: float,
        min_radius: float,
        seed: int = 42,
        species: str = "linden",
        age: str = "mature",
        crown_width: float = 1.0,
        *,
        trunk_height_override: Optional[float] = None,
        crown_density_override: Optional[float] = None,
        model_scale: Optional[float] = None,
        max_depth: Optional[int] = None,
        policy: Optional[RealisticPolicy] = None,
    ) -> List[BranchSegment]:
        """
        Generate a realistic tree skeleton.

        Parameters
        ----------
        height : float
            Total tree height
        min_radius : float
            Minimum printable radius
        seed : int
            Seed for this call
        species : str
            Species preset name; unknown names fall back to linden
        age : str
            Age modifier name; unknown names fall back to mature
        crown_width : float
            Crown width multiplier
        trunk_height_override : float, optional
            Replaces the species trunk height ratio
        crown_density_override : float, optional
            Replaces the age branch density multiplier
        model_scale : float, optional
            Physical-to-model radius factor (defaults to ``policy.radius_scale``)
        max_depth : int, optional
            Explicit recursion bound (defaults to ``policy.max_depth`` or the
            species/age derived depth)
        policy : RealisticPolicy, optional
            Tuning constants

        Returns
        -------
        List[BranchSegment]
            Trunk, leader and recursive branches in emission order
        """
        if not height > 0:
            raise ValueError(f"height must be positive, got {height}")
        if not crown_width > 0:
            raise ValueError(f"crown_width must be positive, got {crown_width}")

        if policy is None:
            policy = RealisticPolicy()
        self.policy = policy
        self.segments = []
        self.rng.reseed(seed)

        preset = get_species(species)
        modifier = get_age(age)
        self.preset = preset
        self.modifier = modifier

        self.scale = policy.radius_scale if model_scale is None else float(model_scale)
        self.floor = max(float(min_radius), policy.radius_floor)

        depth_bound = max_depth if max_depth is not None else policy.max_depth
        if depth_bound is not None:
            if depth_bound < 1:
                raise ValueError(f"max_depth must be >= 1, got {depth_bound}")
            self.max_depth = int(depth_bound)
        else:
            self.max_depth = max(MIN_DEPTH, preset.max_branch_levels + modifier.max_levels_adjust)

        trunk_ratio = preset.trunk_height_ratio if trunk_height_override is None else trunk_height_override
        density = (
            modifier.branch_density_multiplier
            if crown_density_override is None
            else crown_density_override
        )

        crown_base = height * trunk_ratio
        crown_height = height - crown_base
        max_crown_radius = crown_height * 0.4 * crown_width

        self.envelope = CrownEnvelope.for_crown(crown_base, crown_height, crown_width)

        trunk_radius = self._trunk_radius(height, crown_base, preset, modifier)
        leader_height = min(crown_height * preset.leader_ratio, self.envelope.top - crown_base)
        leader_count = 3 if preset.leader_ratio >= 0.9 else 2

        # The leader tip is the thinnest trunk-like segment end.
        tip_factor = policy.taper_ratio ** (1 + leader_count)
        if trunk_radius * tip_factor * self.scale < self.floor:
            trunk_radius = self.floor / (tip_factor * self.scale)

        self._emit_trunk(crown_base, leader_height, leader_count, trunk_radius)
        self._grow_tiers(
            crown_base,
            crown_height,
            leader_height,
            max_crown_radius,
            trunk_radius,
            density,
        )

        logger.info(
            f"Generated {len(self.segments)} segments for {preset.name} "
            f"(height={height}, seed={seed}, max_depth={self.max_depth})"
        )
        return self.segments

    def _trunk_radius(
        self,
        height: float,
        crown_base: float,
        preset: SpeciesPreset,
        modifier: AgeModifier,
    ) -> float:
        # Conifer trunk ratios are tiny; size the trunk from the full height.
        reference = height if preset.is_conifer else crown_base
        return reference * preset.trunk_diameter_ratio * modifier.trunk_thickness_multiplier

    def _emit(self, start, end, r1: float, level: int) -> None:
        self.segments.append(
            BranchSegment(
                start=as_vec3(start),
                end=as_vec3(end),
                r1=float(r1),
                r2=float(r1 * self.policy.taper_ratio),
                level=level,
            )
        )

    def _emit_trunk(
        self,
        crown_base: float,
        leader_height: float,
        leader_count: int,
        trunk_radius: float,
    ) -> None:
        taper = self.policy.taper_ratio
        self._emit((0.0, 0.0, 0.0), (0.0, 0.0, crown_base), trunk_radius, level=0)

        radius = trunk_radius * taper
        z = crown_base
        for i in range(leader_count):
            z_next = crown_base + leader_height * (i + 1) / leader_count
            self._emit((0.0, 0.0, z), (0.0, 0.0, z_next), radius, level=0)
            radius *= taper
            z = z_next

    def _grow_tiers(
        self,
        crown_base: float,
        crown_height: float,
        leader_height: float,
        max_crown_radius: float,
        trunk_radius: float,
        density: float,
    ) -> None:
        preset = self.preset
        jitter = 0.2 + self.modifier.irregularity
        tier_count = int(5 + density * 3)

        for tier in range(tier_count):
            t = (tier + 0.5) / tier_count
            tier_height = crown_base + t * leader_height * 0.9
            leader_radius_here = trunk_radius * 0.9 * (1.0 - t * 0.7)

            available = crown_radius_at(
                preset.crown_shape,
                (tier_height - crown_base) / crown_height,
                max_crown_radius,
            )
            base_length = available * self.rng.uniform(0.85, 1.1)
            count = max(2, int(preset.branches_per_tier * (1.0 - t * 0.2) * density))
            origin = np.array([0.0, 0.0, tier_height])

            for i in range(count):
                phi = i * GOLDEN_ANGLE + tier * 0.5 + self.rng.uniform(-jitter, jitter)
                theta = preset.branch_angle_base * (1.0 - t * 0.25) + self.rng.uniform(
                    -preset.branch_angle_variation, preset.branch_angle_variation
                )
                direction = branch_direction(UP, theta, phi)
                radius = leader_radius_here * (0.35 + self.rng.random() * 0.25)
                self._grow_branch(origin, direction, radius, base_length, 0)

    def _grow_branch(
        self,
        origin: np.ndarray,
        direction: np.ndarray,
        radius: float,
        length: float,
        depth: int,
    ) -> None:
        policy = self.policy
        preset = self.preset

        if depth >= self.max_depth:
            return
        if length < policy.min_branch_length:
            return
        if radius * policy.taper_ratio * self.scale < self.floor:
            return

        end = self.envelope.clip_segment(origin, origin + direction * length)
        if np.linalg.norm(end - origin) < policy.min_branch_length:
            return

        self._emit(origin, end, radius, level=depth + 1)

        child_count = min(preset.terminal_branch_count, policy.max_children)
        child_radius = radius * preset.radius_decay
        child_length = length * preset.length_decay
        spread = preset.branch_angle_variation * 0.6
        near_terminal = depth >= self.max_depth - 2

        for i in range(child_count):
            phi = i * GOLDEN_ANGLE + self.rng.uniform(-0.6, 0.6)
            depth_factor = 1.0 - (depth / self.max_depth) * 0.35
            theta = preset.branch_angle_base * 0.55 * depth_factor + self.rng.uniform(-spread, spread)

            child_dir = branch_direction(direction, theta, phi)
            if near_terminal:
                outward = self.envelope.outward_direction(end)
                child_dir = normalize(child_dir + (outward - child_dir) * policy.envelope_blend)

            child_dir = child_dir.copy()
            child_dir[2] += preset.tip_curvature * (0.5 + depth * 0.15)
            child_dir = normalize(child_dir)

            self._grow_branch(
                end.copy(),
                child_dir,
                child_radius * self.rng.uniform(0.9, 1.1),
                child_length * self.rng.uniform(0.75, 1.25),
                depth + 1,
            )


__all__ = ["RealisticBackend", "CROWN_PROFILES", "crown_radius_at"]
