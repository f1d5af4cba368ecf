"""
Policy dataclasses for parameterizing tree generation operations.

All public functions in the library accept policy objects that control
their behavior. This enables JSON-serializable configuration and clear
documentation of all parameters.

Each policy includes:
- Default values defined here
- JSON schema docstring
- to_dict() / from_dict() helpers (unknown keys are ignored)
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List, Literal
import json


def validate_policy(policy: Any, required_fields: Optional[List[str]] = None) -> List[str]:
    """
    Validate a policy object.

    Parameters
    ----------
    policy : Any
        Policy dataclass instance to validate
    required_fields : List[str], optional
        List of field names that must be non-None

    Returns
    -------
    List[str]
        List of validation error messages (empty if valid)
    """
    errors = []

    if required_fields:
        for field_name in required_fields:
            if not hasattr(policy, field_name):
                errors.append(f"Missing required field: {field_name}")
            elif getattr(policy, field_name) is None:
                errors.append(f"Required field is None: {field_name}")

    for field_name in getattr(policy, "__dataclass_fields__", {}):
        value = getattr(policy, field_name)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value != value:
                errors.append(f"Field is NaN: {field_name}")

    return errors


def _filter_fields(cls, d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if k in cls.__dataclass_fields__}


@dataclass
class RealisticPolicy:
    """
    Tuning for the envelope-constrained recursive generator.

    JSON Schema:
    {
        "max_depth": int | null (explicit recursion bound, >= 1),
        "min_branch_length": float (model units),
        "taper_ratio": float (end radius / start radius per segment),
        "max_children": int,
        "radius_floor": float (model units),
        "radius_scale": float (physical-to-model factor for the radius check),
        "envelope_blend": float (0-1, tip attraction toward the silhouette)
    }
    """
    max_depth: Optional[int] = None
    min_branch_length: float = 0.04
    taper_ratio: float = 0.85
    max_children: int = 4
    radius_floor: float = 0.03
    radius_scale: float = 1.0
    envelope_blend: float = 0.35

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "RealisticPolicy":
        return RealisticPolicy(**_filter_fields(RealisticPolicy, d))


@dataclass
class LSystemPolicy:
    """
    Policy for the turtle/L-system generator.

    JSON Schema:
    {
        "axiom": str,
        "depth": int,
        "branching_factor": int,
        "initial_radius": float (model units),
        "initial_length": float (model units),
        "thickness_decay": float (da Vinci exponent),
        "length_decay": float (0-1),
        "gravitropism": float (-1 to 1, positive droops)
    }
    """
    axiom: str = "F"
    depth: int = 4
    branching_factor: int = 2
    initial_radius: float = 0.5
    initial_length: float = 2.0
    thickness_decay: float = 2.2
    length_decay: float = 0.8
    gravitropism: float = 0.1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "LSystemPolicy":
        return LSystemPolicy(**_filter_fields(LSystemPolicy, d))


@dataclass
class OrganicPolicy:
    """
    Policy shared by the organic (loop) and connected-growth generators.

    JSON Schema:
    {
        "trunk_radius": float (model units),
        "trunk_height": float (model units),
        "crown_radius": float (model units),
        "crown_height": float (model units),
        "branch_thickness": float (model units),
        "crown_density": float (0-1),
        "loop_probability": float (0-1, connected only),
        "loop_max_distance": float (model units, connected only),
        "loop_min_distance": float (model units, connected only),
        "loop_warmup": int (growth steps before loops may close)
    }
    """
    trunk_radius: float = 0.4
    trunk_height: float = 4.0
    crown_radius: float = 4.0
    crown_height: float = 5.0
    branch_thickness: float = 0.16
    crown_density: float = 0.5
    loop_probability: float = 0.15
    loop_max_distance: float = 2.0
    loop_min_distance: float = 0.1
    loop_warmup: int = 10

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "OrganicPolicy":
        return OrganicPolicy(**_filter_fields(OrganicPolicy, d))


@dataclass
class AttractorPolicy:
    """
    Policy for the decorative chaotic-attractor curve.

    JSON Schema:
    {
        "attractor": "thomas" | "aizawa",
        "iterations": int,
        "dt": float,
        "radius": float (model units),
        "scale": float (curve scale in model units)
    }
    """
    attractor: Literal["thomas", "aizawa"] = "thomas"
    iterations: int = 1000
    dt: float = 0.02
    radius: float = 0.2
    scale: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "AttractorPolicy":
        return AttractorPolicy(**_filter_fields(AttractorPolicy, d))


@dataclass
class FoliagePolicy:
    """
    Policy for crown foliage generation.

    JSON Schema:
    {
        "enabled": bool,
        "style": str (tree type or crown style name),
        "density": float | null (overrides the style's crown density),
        "element_size": float | null (overrides the style's element size),
        "seed": int | null (defaults to the tree seed)
    }
    """
    enabled: bool = False
    style: str = "deciduous"
    density: Optional[float] = None
    element_size: Optional[float] = None
    seed: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "FoliagePolicy":
        return FoliagePolicy(**_filter_fields(FoliagePolicy, d))


@dataclass
class MeshAssemblyPolicy:
    """
    Policy for realizing primitives and unioning them.

    Segment facet counts drop for thin branches: above ``thick_radius``
    the segment uses ``thick_segments``, above ``medium_radius``
    ``medium_segments`` and ``thin_segments`` otherwise.

    JSON Schema:
    {
        "thick_radius": float (model units),
        "medium_radius": float (model units),
        "thick_segments": int,
        "medium_segments": int,
        "thin_segments": int,
        "cluster_segments": int,
        "min_segment_length": float (model units),
        "min_sphere_radius": float (model units),
        "vertical_tolerance": float (model units)
    }
    """
    thick_radius: float = 0.3
    medium_radius: float = 0.1
    thick_segments: int = 12
    medium_segments: int = 8
    thin_segments: int = 6
    cluster_segments: int = 16
    min_segment_length: float = 1e-4
    min_sphere_radius: float = 1e-3
    vertical_tolerance: float = 1e-3

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "MeshAssemblyPolicy":
        return MeshAssemblyPolicy(**_filter_fields(MeshAssemblyPolicy, d))


@dataclass
class ExportPolicy:
    """
    Policy for serialized output.

    ``model_scale`` is the print ratio: 200 means 1:200, so every vertex is
    multiplied by 1/200 before writing.

    JSON Schema:
    {
        "output_dir": str,
        "filename": str,
        "model_scale": float,
        "header": str (at most 80 bytes),
        "write_report": bool
    }
    """
    output_dir: str = "./output"
    filename: str = "tree.stl"
    model_scale: float = 1.0
    header: str = "Binary STL exported from treegen"
    write_report: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ExportPolicy":
        return ExportPolicy(**_filter_fields(ExportPolicy, d))


@dataclass
class OperationReport:
    """
    Standard report structure for all operations.

    Every operation returns a report with requested vs effective policy,
    warnings, and operation-specific metadata.
    """
    operation: str
    success: bool
    requested_policy: Dict[str, Any]
    effective_policy: Dict[str, Any]
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


__all__ = [
    "validate_policy",
    "RealisticPolicy",
    "LSystemPolicy",
    "OrganicPolicy",
    "AttractorPolicy",
    "FoliagePolicy",
    "MeshAssemblyPolicy",
    "ExportPolicy",
    "OperationReport",
]
