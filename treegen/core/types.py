"""
Core data structures shared by the generators, assembly and export.

UNIT CONVENTIONS
----------------
All lengths are model units (one unit per meter of the real tree).
Z is up.
"""

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    import trimesh

Vec3 = Tuple[float, float, float]
ClusterKind = Literal["sphere", "cone", "cylinder"]


def as_vec3(value) -> Vec3:
    """Coerce an array-like of three numbers to a plain float tuple."""
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass(frozen=True)
class BranchSegment:
    """
    Tapered cylinder from ``start`` to ``end``.

    ``r1`` is the radius at ``start`` and ``r2`` the radius at ``end``.
    ``level`` is 0 for trunk-like segments and the recursion depth + 1 for
    branches grown by a recursive strategy.
    """

    start: Vec3
    end: Vec3
    r1: float
    r2: float
    level: int = 0

    @property
    def start_array(self) -> np.ndarray:
        return np.array(self.start, dtype=float)

    @property
    def end_array(self) -> np.ndarray:
        return np.array(self.end, dtype=float)

    def length(self) -> float:
        return float(np.linalg.norm(self.end_array - self.start_array))

    def direction(self) -> np.ndarray:
        """Unit vector from start to end (zero vector for degenerate segments)."""
        d = self.end_array - self.start_array
        n = np.linalg.norm(d)
        if n < 1e-12:
            return np.zeros(3)
        return d / n

    def mean_radius(self) -> float:
        return 0.5 * (self.r1 + self.r2)

    def to_dict(self) -> dict:
        return {
            "start": list(self.start),
            "end": list(self.end),
            "r1": self.r1,
            "r2": self.r2,
            "level": self.level,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "BranchSegment":
        return cls(
            start=as_vec3(d["start"]),
            end=as_vec3(d["end"]),
            r1=float(d["r1"]),
            r2=float(d["r2"]),
            level=int(d.get("level", 0)),
        )


@dataclass(frozen=True)
class FoliageCluster:
    """
    Positioned foliage primitive.

    Cones and cylinders grow along +Z from ``position``; ``radius`` is the
    base radius. ``height`` and ``top_radius`` are optional and defaulted at
    assembly time.
    """

    position: Vec3
    radius: float
    kind: ClusterKind = "sphere"
    height: Optional[float] = None
    top_radius: Optional[float] = None

    def to_dict(self) -> dict:
        d = {
            "position": list(self.position),
            "radius": self.radius,
            "kind": self.kind,
        }
        if self.height is not None:
            d["height"] = self.height
        if self.top_radius is not None:
            d["top_radius"] = self.top_radius
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "FoliageCluster":
        return cls(
            position=as_vec3(d["position"]),
            radius=float(d["radius"]),
            kind=d.get("kind", d.get("type", "sphere")),
            height=d.get("height"),
            top_radius=d.get("top_radius"),
        )


@dataclass
class BoundingBox:
    """Axis-aligned bounding box."""

    min: Vec3
    max: Vec3

    def to_dict(self) -> dict:
        return {"min": list(self.min), "max": list(self.max)}


@dataclass
class FoliageResult:
    """Output of a foliage strategy."""

    clusters: List[FoliageCluster] = field(default_factory=list)
    bounding_box: Optional[BoundingBox] = None


@dataclass
class GeneratedMesh:
    """
    Owning snapshot of an assembled solid.

    ``vertices`` is an (N, 3) float32 array of positions and ``indices`` an
    (M, 3) uint32 array of triangle corners.
    """

    vertices: np.ndarray
    indices: np.ndarray

    def __post_init__(self):
        self.vertices = np.ascontiguousarray(self.vertices, dtype=np.float32).reshape(-1, 3)
        self.indices = np.ascontiguousarray(self.indices, dtype=np.uint32).reshape(-1, 3)

    @property
    def num_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def num_triangles(self) -> int:
        return int(self.indices.shape[0])

    def triangles(self) -> np.ndarray:
        """Per-triangle corner positions, shape (M, 3, 3)."""
        return self.vertices[self.indices]

    def bounds(self) -> np.ndarray:
        if self.num_vertices == 0:
            return np.zeros((2, 3), dtype=np.float32)
        return np.array([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def to_trimesh(self) -> "trimesh.Trimesh":
        import trimesh

        return trimesh.Trimesh(
            vertices=self.vertices.astype(np.float64),
            faces=self.indices.astype(np.int64),
            process=False,
        )

    def volume(self) -> float:
        """Enclosed volume computed from the triangle soup."""
        return float(self.to_trimesh().volume)


__all__ = [
    "Vec3",
    "ClusterKind",
    "as_vec3",
    "BranchSegment",
    "FoliageCluster",
    "BoundingBox",
    "FoliageResult",
    "GeneratedMesh",
]
