"""Core data structures for tree generation."""

from .types import (
    Vec3,
    BranchSegment,
    FoliageCluster,
    FoliageResult,
    BoundingBox,
    GeneratedMesh,
)
from .envelope import CrownEnvelope
from .rng import SeededRandom

__all__ = [
    "Vec3",
    "BranchSegment",
    "FoliageCluster",
    "FoliageResult",
    "BoundingBox",
    "GeneratedMesh",
    "CrownEnvelope",
    "SeededRandom",
]
