"""
Declarative tree specification.

A TreeSpec carries the full parameter set of one generation request:
which strategy to run, the shared tree parameters (height, printable floor,
seed, species, age, crown width and overrides), the per-strategy policies,
foliage, assembly and export settings. It round-trips through plain dicts
and JSON files.

Example:
    >>> spec = TreeSpec.from_dict({
    ...     "generator": "realistic",
    ...     "height": 15.0,
    ...     "species": "spruce",
    ...     "foliage": {"enabled": True, "style": "conifer"},
    ... })
    >>> spec.realistic.taper_ratio
    0.85
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional, Union
import json

from ..policies import (
    RealisticPolicy,
    LSystemPolicy,
    OrganicPolicy,
    AttractorPolicy,
    FoliagePolicy,
    MeshAssemblyPolicy,
    ExportPolicy,
)
from ..params.species import DEFAULT_SPECIES, DEFAULT_AGE

GeneratorKind = Literal["realistic", "lsystem", "organic", "connected", "attractor"]
GENERATOR_KINDS = ("realistic", "lsystem", "organic", "connected", "attractor")


@dataclass
class TreeSpec:
    """
    Full parameter set for one tree.

    Parameters
    ----------
    generator : str
        Branch strategy: realistic, lsystem, organic, connected or attractor
    height : float
        Tree height in model units
    min_radius : float
        Minimum printable radius in model units
    seed : int
        Seed for the generation call
    species : str
        Species preset name (unknown names fall back to linden)
    age : str
        Age modifier name (unknown names fall back to mature)
    crown_width : float
        Crown width multiplier
    trunk_height_override : float, optional
        Replaces the species' trunk height ratio (0-1)
    crown_density_override : float, optional
        Replaces the age's branch density multiplier
    """
    generator: GeneratorKind = "realistic"
    height: float = 15.0
    min_radius: float = 0.1
    seed: int = 42
    species: str = DEFAULT_SPECIES
    age: str = DEFAULT_AGE
    crown_width: float = 1.0
    trunk_height_override: Optional[float] = None
    crown_density_override: Optional[float] = None
    realistic: RealisticPolicy = field(default_factory=RealisticPolicy)
    lsystem: LSystemPolicy = field(default_factory=LSystemPolicy)
    organic: OrganicPolicy = field(default_factory=OrganicPolicy)
    attractor: AttractorPolicy = field(default_factory=AttractorPolicy)
    foliage: FoliagePolicy = field(default_factory=FoliagePolicy)
    assembly: MeshAssemblyPolicy = field(default_factory=MeshAssemblyPolicy)
    export: ExportPolicy = field(default_factory=ExportPolicy)

    def validate(self) -> None:
        """Raise ValueError for parameters no strategy can use."""
        if self.generator not in GENERATOR_KINDS:
            raise ValueError(
                f"Unknown generator '{self.generator}'. Expected one of {GENERATOR_KINDS}"
            )
        if not self.height > 0:
            raise ValueError(f"height must be positive, got {self.height}")
        if self.min_radius < 0:
            raise ValueError(f"min_radius must be non-negative, got {self.min_radius}")
        if not self.crown_width > 0:
            raise ValueError(f"crown_width must be positive, got {self.crown_width}")
        if self.trunk_height_override is not None and not 0.0 < self.trunk_height_override < 1.0:
            raise ValueError(
                f"trunk_height_override must be in (0, 1), got {self.trunk_height_override}"
            )
        if not self.export.model_scale > 0:
            raise ValueError(f"export.model_scale must be positive, got {self.export.model_scale}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator": self.generator,
            "height": self.height,
            "min_radius": self.min_radius,
            "seed": self.seed,
            "species": self.species,
            "age": self.age,
            "crown_width": self.crown_width,
            "trunk_height_override": self.trunk_height_override,
            "crown_density_override": self.crown_density_override,
            "realistic": self.realistic.to_dict(),
            "lsystem": self.lsystem.to_dict(),
            "organic": self.organic.to_dict(),
            "attractor": self.attractor.to_dict(),
            "foliage": self.foliage.to_dict(),
            "assembly": self.assembly.to_dict(),
            "export": self.export.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TreeSpec":
        scalars = {
            k: d[k]
            for k in (
                "generator",
                "height",
                "min_radius",
                "seed",
                "species",
                "age",
                "crown_width",
                "trunk_height_override",
                "crown_density_override",
            )
            if k in d
        }
        return cls(
            **scalars,
            realistic=RealisticPolicy.from_dict(d.get("realistic", {})),
            lsystem=LSystemPolicy.from_dict(d.get("lsystem", {})),
            organic=OrganicPolicy.from_dict(d.get("organic", {})),
            attractor=AttractorPolicy.from_dict(d.get("attractor", {})),
            foliage=FoliagePolicy.from_dict(d.get("foliage", {})),
            assembly=MeshAssemblyPolicy.from_dict(d.get("assembly", {})),
            export=ExportPolicy.from_dict(d.get("export", {})),
        )

    def to_json(self, path: Optional[Union[str, Path]] = None) -> str:
        text = json.dumps(self.to_dict(), indent=2)
        if path is not None:
            Path(path).write_text(text, encoding="utf-8")
        return text

    @classmethod
    def from_json(cls, source: Union[str, Path]) -> "TreeSpec":
        """Load from a JSON file path or a JSON string."""
        path = Path(source) if not str(source).lstrip().startswith("{") else None
        if path is not None and path.exists():
            text = path.read_text(encoding="utf-8")
        else:
            text = str(source)
        return cls.from_dict(json.loads(text))


__all__ = ["TreeSpec", "GeneratorKind", "GENERATOR_KINDS"]
