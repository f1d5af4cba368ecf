"""
Crown style table for foliage generation.

Each style pairs a crown archetype (conical, spherical, columnar, umbrella,
irregular) with the sizing constants the foliage strategies were tuned
against. Foliage density and element size can be overridden per request
without touching the table.
"""

from dataclasses import dataclass, asdict, replace
from typing import Dict, List, Literal, Optional
import logging

logger = logging.getLogger(__name__)

CrownStyle = Literal["conical", "spherical", "columnar", "umbrella", "irregular"]
TrunkStyle = Literal["straight", "tapered", "gnarled"]

CROWN_STYLES = ("conical", "spherical", "columnar", "umbrella", "irregular")
DEFAULT_TREE_STYLE = "deciduous"


@dataclass(frozen=True)
class TreeStyle:
    """
    Foliage layout parameters for one tree type.

    JSON Schema:
    {
        "name": str,
        "tree_type": str,
        "trunk_style": "straight" | "tapered" | "gnarled",
        "crown_style": "conical" | "spherical" | "columnar" | "umbrella" | "irregular",
        "crown_base_height": float (0-1 of tree height),
        "crown_width_ratio": float (crown width / tree height),
        "crown_density": float (0.1-1),
        "branch_visibility": float (0-1),
        "trunk_height_ratio": float (0-1),
        "trunk_taper": float (0.3-1),
        "min_wall_thickness": float (mm),
        "foliage_element_size": float (model units),
        "foliage_overlap": float (0-1)
    }
    """
    name: str
    tree_type: str
    trunk_style: TrunkStyle
    crown_style: CrownStyle
    crown_base_height: float
    crown_width_ratio: float
    crown_density: float
    branch_visibility: float
    trunk_height_ratio: float
    trunk_taper: float
    min_wall_thickness: float
    foliage_element_size: float
    foliage_overlap: float

    def with_overrides(
        self,
        density: Optional[float] = None,
        element_size: Optional[float] = None,
    ) -> "TreeStyle":
        """Copy with crown density and/or element size replaced."""
        changes = {}
        if density is not None:
            changes["crown_density"] = float(density)
        if element_size is not None:
            changes["foliage_element_size"] = float(element_size)
        return replace(self, **changes) if changes else self

    def to_dict(self) -> dict:
        return asdict(self)


TREE_STYLES: Dict[str, TreeStyle] = {
    "conifer": TreeStyle(
        name="Spruce/Pine (Conifer)",
        tree_type="conifer",
        trunk_style="straight",
        crown_style="conical",
        crown_base_height=0.1,
        crown_width_ratio=0.4,
        crown_density=0.7,
        branch_visibility=0.3,
        trunk_height_ratio=0.15,
        trunk_taper=0.6,
        min_wall_thickness=0.8,
        foliage_element_size=1.0,
        foliage_overlap=0.4,
    ),
    "deciduous": TreeStyle(
        name="Deciduous",
        tree_type="deciduous",
        trunk_style="tapered",
        crown_style="spherical",
        crown_base_height=0.35,
        crown_width_ratio=0.8,
        crown_density=0.8,
        branch_visibility=0.2,
        trunk_height_ratio=0.4,
        trunk_taper=0.5,
        min_wall_thickness=0.8,
        foliage_element_size=1.2,
        foliage_overlap=0.5,
    ),
    "shrub": TreeStyle(
        name="Shrub",
        tree_type="shrub",
        trunk_style="gnarled",
        crown_style="irregular",
        crown_base_height=0.05,
        crown_width_ratio=1.2,
        crown_density=0.9,
        branch_visibility=0.05,
        trunk_height_ratio=0.1,
        trunk_taper=0.8,
        min_wall_thickness=0.6,
        foliage_element_size=0.8,
        foliage_overlap=0.6,
    ),
    "cypress": TreeStyle(
        name="Cypress",
        tree_type="cypress",
        trunk_style="straight",
        crown_style="columnar",
        crown_base_height=0.1,
        crown_width_ratio=0.2,
        crown_density=0.9,
        branch_visibility=0.0,
        trunk_height_ratio=0.1,
        trunk_taper=0.7,
        min_wall_thickness=0.8,
        foliage_element_size=0.6,
        foliage_overlap=0.7,
    ),
    "palm": TreeStyle(
        name="Palm",
        tree_type="palm",
        trunk_style="straight",
        crown_style="umbrella",
        crown_base_height=0.7,
        crown_width_ratio=1.0,
        crown_density=0.5,
        branch_visibility=0.8,
        trunk_height_ratio=0.75,
        trunk_taper=0.9,
        min_wall_thickness=1.0,
        foliage_element_size=1.5,
        foliage_overlap=0.2,
    ),
}


def get_tree_style(name: str) -> TreeStyle:
    """
    Look up a tree style by tree type or crown style name.

    ``"conifer"`` and ``"conical"`` both resolve to the conifer style.
    Unknown names fall back to DEFAULT_TREE_STYLE.
    """
    key = (name or DEFAULT_TREE_STYLE).strip().lower()
    style = TREE_STYLES.get(key)
    if style is None:
        style = next((s for s in TREE_STYLES.values() if s.crown_style == key), None)
    if style is None:
        logger.warning(f"Unknown tree style '{name}', falling back to '{DEFAULT_TREE_STYLE}'")
        style = TREE_STYLES[DEFAULT_TREE_STYLE]
    return style


def list_tree_styles() -> List[str]:
    return list(TREE_STYLES.keys())


__all__ = [
    "CrownStyle",
    "TrunkStyle",
    "CROWN_STYLES",
    "DEFAULT_TREE_STYLE",
    "TreeStyle",
    "TREE_STYLES",
    "get_tree_style",
    "list_tree_styles",
]
