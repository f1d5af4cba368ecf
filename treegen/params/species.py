"""
Species and age parameter tables for the envelope-constrained generator.

Values follow published proportions where available:
- Tilia cordata: trunk diameter:height 1:15 to 1:30, oval crown
- Quercus robur: trunk diameter:height about 1:11, dome crown
- Branching angles 20-45 degrees for linden, 40-60 degrees for oak

Lookups never fail: unknown names fall back to DEFAULT_SPECIES /
DEFAULT_AGE and log a warning.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Literal
import logging
import math

logger = logging.getLogger(__name__)

CrownShape = Literal["oval", "dome", "pyramidal", "spreading", "umbrella"]

DEFAULT_SPECIES = "linden"
DEFAULT_AGE = "mature"


@dataclass(frozen=True)
class SpeciesPreset:
    """
    Branching geometry of one species.

    JSON Schema:
    {
        "name": str,
        "trunk_height_ratio": float (0-1, crown base / tree height),
        "trunk_diameter_ratio": float,
        "branch_angle_base": float (radians),
        "branch_angle_variation": float (radians),
        "radius_decay": float (per level),
        "length_decay": float (per level),
        "crown_shape": "oval" | "dome" | "pyramidal" | "spreading" | "umbrella",
        "max_branch_levels": int,
        "terminal_branch_count": int,
        "leader_ratio": float (0-1),
        "tip_curvature": float (negative droops),
        "branches_per_tier": int
    }
    """
    name: str
    trunk_height_ratio: float
    trunk_diameter_ratio: float
    branch_angle_base: float
    branch_angle_variation: float
    radius_decay: float
    length_decay: float
    crown_shape: CrownShape
    max_branch_levels: int
    terminal_branch_count: int
    leader_ratio: float
    tip_curvature: float
    branches_per_tier: int

    @property
    def is_conifer(self) -> bool:
        """Pyramidal and umbrella crowns size their trunk from total height."""
        return self.crown_shape in ("pyramidal", "umbrella")

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class AgeModifier:
    """
    Age adjustments composed with a SpeciesPreset at generation time.

    Thickness and density multiply, irregularity widens the azimuth jitter
    and the level adjustment is added to the species' maximum depth.
    """
    trunk_thickness_multiplier: float
    branch_density_multiplier: float
    irregularity: float
    max_levels_adjust: int

    def to_dict(self) -> dict:
        return asdict(self)


SPECIES_PRESETS: Dict[str, SpeciesPreset] = {
    "linden": SpeciesPreset(
        name="Linden (Tilia cordata)",
        trunk_height_ratio=0.40,
        trunk_diameter_ratio=0.035,
        branch_angle_base=math.pi / 3,
        branch_angle_variation=0.4,
        radius_decay=0.50,
        length_decay=0.75,
        crown_shape="oval",
        max_branch_levels=5,
        terminal_branch_count=2,
        leader_ratio=0.85,
        tip_curvature=0.15,
        branches_per_tier=3,
    ),
    "oak": SpeciesPreset(
        name="Oak (Quercus robur)",
        trunk_height_ratio=0.30,
        trunk_diameter_ratio=0.055,
        branch_angle_base=math.pi / 2.5,
        branch_angle_variation=0.45,
        radius_decay=0.55,
        length_decay=0.72,
        crown_shape="dome",
        max_branch_levels=4,
        terminal_branch_count=2,
        leader_ratio=0.55,
        tip_curvature=0.08,
        branches_per_tier=4,
    ),
    "maple": SpeciesPreset(
        name="Maple (Acer platanoides)",
        trunk_height_ratio=0.35,
        trunk_diameter_ratio=0.045,
        branch_angle_base=math.pi / 2.8,
        branch_angle_variation=0.35,
        radius_decay=0.52,
        length_decay=0.74,
        crown_shape="spreading",
        max_branch_levels=5,
        terminal_branch_count=3,
        leader_ratio=0.60,
        tip_curvature=0.10,
        branches_per_tier=4,
    ),
    "birch": SpeciesPreset(
        name="Birch (Betula pendula)",
        trunk_height_ratio=0.45,
        trunk_diameter_ratio=0.020,
        branch_angle_base=math.pi / 3.5,
        branch_angle_variation=0.3,
        radius_decay=0.48,
        length_decay=0.68,
        crown_shape="pyramidal",
        max_branch_levels=5,
        terminal_branch_count=2,
        leader_ratio=0.95,
        tip_curvature=0.20,
        branches_per_tier=3,
    ),
    # Conifers
    "spruce": SpeciesPreset(
        name="Spruce (Picea abies)",
        trunk_height_ratio=0.02,
        trunk_diameter_ratio=0.022,
        branch_angle_base=math.pi / 2.0,
        branch_angle_variation=0.10,
        radius_decay=0.50,
        length_decay=0.90,
        crown_shape="pyramidal",
        max_branch_levels=4,
        terminal_branch_count=2,
        leader_ratio=1.0,
        tip_curvature=-0.06,
        branches_per_tier=5,
    ),
    "pine": SpeciesPreset(
        name="Pine (Pinus sylvestris)",
        trunk_height_ratio=0.70,
        trunk_diameter_ratio=0.028,
        branch_angle_base=math.pi / 2.3,
        branch_angle_variation=0.45,
        radius_decay=0.58,
        length_decay=0.62,
        crown_shape="umbrella",
        max_branch_levels=4,
        terminal_branch_count=2,
        leader_ratio=0.25,
        tip_curvature=0.12,
        branches_per_tier=3,
    ),
}

AGE_MODIFIERS: Dict[str, AgeModifier] = {
    "young": AgeModifier(
        trunk_thickness_multiplier=0.6,
        branch_density_multiplier=0.7,
        irregularity=0.1,
        max_levels_adjust=-2,
    ),
    "mature": AgeModifier(
        trunk_thickness_multiplier=1.0,
        branch_density_multiplier=1.0,
        irregularity=0.2,
        max_levels_adjust=0,
    ),
    "old": AgeModifier(
        trunk_thickness_multiplier=1.4,
        branch_density_multiplier=1.3,
        irregularity=0.4,
        max_levels_adjust=1,
    ),
}


def get_species(name: str) -> SpeciesPreset:
    """
    Look up a species preset by name (case-insensitive).

    Unknown names fall back to DEFAULT_SPECIES.
    """
    key = (name or DEFAULT_SPECIES).strip().lower()
    preset = SPECIES_PRESETS.get(key)
    if preset is None:
        logger.warning(f"Unknown species '{name}', falling back to '{DEFAULT_SPECIES}'")
        preset = SPECIES_PRESETS[DEFAULT_SPECIES]
    return preset


def get_age(name: str) -> AgeModifier:
    """
    Look up an age modifier by name (case-insensitive).

    Unknown names fall back to DEFAULT_AGE.
    """
    key = (name or DEFAULT_AGE).strip().lower()
    modifier = AGE_MODIFIERS.get(key)
    if modifier is None:
        logger.warning(f"Unknown age '{name}', falling back to '{DEFAULT_AGE}'")
        modifier = AGE_MODIFIERS[DEFAULT_AGE]
    return modifier


def list_species() -> List[str]:
    return list(SPECIES_PRESETS.keys())


def list_ages() -> List[str]:
    return list(AGE_MODIFIERS.keys())


__all__ = [
    "CrownShape",
    "SpeciesPreset",
    "AgeModifier",
    "SPECIES_PRESETS",
    "AGE_MODIFIERS",
    "DEFAULT_SPECIES",
    "DEFAULT_AGE",
    "get_species",
    "get_age",
    "list_species",
    "list_ages",
]
