"""
Crown foliage generation.

Produces sphere and cone clusters laid out by one of five crown archetypes,
independent of which backend produced the branch skeleton:

- conical: stacked cone layers narrowing toward the top, with textured
  off-axis spheres when the crown is dense
- spherical: one dominant sphere wrapped by golden-angle satellites
- columnar: a parabolic-taper stack of spheres with small satellites
- umbrella: drooping radial fronds of three spheres plus a top cluster
- irregular: bounded rejection sampling inside a crown ellipsoid

UNIT CONVENTIONS
----------------
Model units, Z up. Cone clusters grow along +Z from their position.
"""

from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union
import logging
import math

from ..core.rng import SeededRandom
from ..core.types import BranchSegment, BoundingBox, FoliageCluster, FoliageResult, as_vec3
from ..params.styles import TreeStyle, get_tree_style
from ..utils.geometry import GOLDEN_ANGLE

logger = logging.getLogger(__name__)

MAX_PLACEMENT_ATTEMPTS = 20


def _crown_extent(tree_height: float, style: TreeStyle) -> Tuple[float, float, float]:
    crown_start = tree_height * style.crown_base_height
    crown_height = tree_height - crown_start
    width = tree_height * style.crown_width_ratio
    return crown_start, crown_height, width


def _crown_box(width: float, z_min: float, z_max: float) -> BoundingBox:
    return BoundingBox(min=(-width, -width, z_min), max=(width, width, z_max))


class FoliageGenerator:
    """
    Seeded foliage layout keyed by crown style.

    The random source is reseeded at the start of every ``generate`` call,
    so identical inputs return identical cluster lists.
    """

    def __init__(self, seed: Optional[int] = None):
        self.rng = SeededRandom(seed)
        self._strategies: Dict[str, Callable[[float, TreeStyle], FoliageResult]] = {
            "conical": self._conical,
            "spherical": self._spherical,
            "columnar": self._columnar,
            "umbrella": self._umbrella,
            "irregular": self._irregular,
        }

    def generate(
        self,
        tree_height: float,
        style: Union[str, TreeStyle],
        seed: Optional[int] = None,
    ) -> FoliageResult:
        """
        Lay out foliage clusters for a tree.

        Parameters
        ----------
        tree_height : float
            Total tree height
        style : str or TreeStyle
            Style record, or a tree type / crown style name
        seed : int, optional
            Seed for this call

        Returns
        -------
        FoliageResult
            Clusters and their axis-aligned bounding box
        """
        if not tree_height > 0:
            raise ValueError(f"tree_height must be positive, got {tree_height}")
        if isinstance(style, str):
            style = get_tree_style(style)

        self.rng.reseed(seed)
        strategy = self._strategies.get(style.crown_style, self._spherical)
        result = strategy(tree_height, style)

        logger.info(
            f"Foliage '{style.crown_style}' produced {len(result.clusters)} clusters "
            f"(height={tree_height}, density={style.crown_density})"
        )
        return result

    def _conical(self, tree_height: float, style: TreeStyle) -> FoliageResult:
        crown_start, crown_height, max_width = _crown_extent(tree_height, style)
        layers = max(3, int(8 * style.crown_density))
        layer_height = crown_height / layers
        clusters: List[FoliageCluster] = []

        for i in range(layers):
            z = crown_start + i * layer_height + layer_height * 0.5
            progress = i / layers
            layer_width = max_width * (1.0 - progress * 0.9)

            clusters.append(
                FoliageCluster(
                    position=(0.0, 0.0, z),
                    radius=layer_width,
                    kind="cone",
                    height=layer_height * 1.5,
                    top_radius=layer_width * 0.1,
                )
            )

            if style.crown_density > 0.5:
                secondary = int(4 * style.crown_density)
                for j in range(secondary):
                    angle = (j / secondary) * 2.0 * math.pi + self.rng.uniform(-0.2, 0.2)
                    offset = layer_width * 0.3
                    size = layer_width * 0.3 * self.rng.uniform(0.7, 1.3)
                    dz = self.rng.uniform(-0.5, 0.5) * layer_height
                    clusters.append(
                        FoliageCluster(
                            position=(math.cos(angle) * offset, math.sin(angle) * offset, z + dz),
                            radius=size,
                        )
                    )

        return FoliageResult(clusters, _crown_box(max_width, crown_start, tree_height))

    def _spherical(self, tree_height: float, style: TreeStyle) -> FoliageResult:
        crown_start, crown_height, max_width = _crown_extent(tree_height, style)
        center_z = crown_start + crown_height * 0.5
        main_radius = min(crown_height, max_width) * 0.4

        clusters = [FoliageCluster(position=(0.0, 0.0, center_z), radius=main_radius)]

        count = int(12 * style.crown_density)
        for i in range(count):
            t = i / count
            inclination = math.acos(1.0 - 2.0 * t)
            azimuth = GOLDEN_ANGLE * i + self.rng.uniform(-0.1, 0.1)
            shell = main_radius * (0.8 + t * 0.4)

            x = math.sin(inclination) * math.cos(azimuth) * shell
            y = math.sin(inclination) * math.sin(azimuth) * shell
            z = center_z + math.cos(inclination) * shell * 0.7
            size = style.foliage_element_size * self.rng.uniform(0.6, 1.0)

            if z >= crown_start:
                clusters.append(FoliageCluster(position=(x, y, z), radius=size))

        return FoliageResult(clusters, _crown_box(max_width, crown_start, tree_height))

    def _columnar(self, tree_height: float, style: TreeStyle) -> FoliageResult:
        crown_start, crown_height, width = _crown_extent(tree_height, style)
        layers = max(4, int(10 * style.crown_density))
        spacing = crown_height / layers
        element = style.foliage_element_size
        clusters: List[FoliageCluster] = []

        for i in range(layers):
            z = crown_start + i * spacing + spacing * 0.5
            progress = i / layers
            taper = 1.0 - (abs(progress - 0.5) * 2.0) ** 2 * 0.3
            layer_width = width * taper

            clusters.append(FoliageCluster(position=(0.0, 0.0, z), radius=layer_width * element))

            for j in range(3):
                angle = (j / 3) * 2.0 * math.pi + self.rng.uniform(0.0, 0.5)
                offset = layer_width * 0.2
                dz = self.rng.uniform(-0.2, 0.2) * spacing
                clusters.append(
                    FoliageCluster(
                        position=(math.cos(angle) * offset, math.sin(angle) * offset, z + dz),
                        radius=layer_width * 0.4 * element,
                    )
                )

        return FoliageResult(clusters, _crown_box(width, crown_start, tree_height))

    def _umbrella(self, tree_height: float, style: TreeStyle) -> FoliageResult:
        crown_start, _, max_width = _crown_extent(tree_height, style)
        fronds = max(6, int(12 * style.crown_density))
        element = style.foliage_element_size
        clusters: List[FoliageCluster] = []

        for i in range(fronds):
            angle = (i / fronds) * 2.0 * math.pi
            for j in range(3):
                p = j / 3
                r = max_width * (0.3 + p * 0.7)
                droop = p * p * 2.0
                clusters.append(
                    FoliageCluster(
                        position=(math.cos(angle) * r, math.sin(angle) * r, crown_start - droop),
                        radius=element * (1.0 - p * 0.3),
                    )
                )

        clusters.append(FoliageCluster(position=(0.0, 0.0, crown_start + 0.5), radius=element * 1.2))

        return FoliageResult(clusters, _crown_box(max_width, crown_start - 3.0, crown_start + 1.0))

    def _irregular(self, tree_height: float, style: TreeStyle) -> FoliageResult:
        crown_start, crown_height, max_width = _crown_extent(tree_height, style)
        half_height = crown_height * 0.5
        count = int(20 * style.crown_density)
        clusters: List[FoliageCluster] = []

        for _ in range(count):
            # Bounded retries; the last draw is kept even when it is outside.
            for _attempt in range(MAX_PLACEMENT_ATTEMPTS):
                x = self.rng.uniform(-1.0, 1.0) * max_width
                z = crown_start + self.rng.uniform(0.0, 1.0) * crown_height
                y = self.rng.uniform(-1.0, 1.0) * max_width
                inside = (
                    (x * x) / (max_width * max_width)
                    + ((z - crown_start - half_height) / half_height) ** 2
                    + (y * y) / (max_width * max_width)
                ) <= 1.0
                if inside:
                    break

            size = style.foliage_element_size * self.rng.uniform(0.5, 1.2)
            clusters.append(FoliageCluster(position=(x, y, z), radius=size))

        return FoliageResult(clusters, _crown_box(max_width, crown_start, tree_height))


def branch_tips(segments: Sequence[BranchSegment], tol: float = 1e-6) -> List[Tuple[float, float, float]]:
    """
    End points of segments that start no other segment.

    Points closer than ``tol`` are treated as the same node.
    """
    def key(p) -> Tuple[int, int, int]:
        return tuple(int(round(c / tol)) for c in p)

    starts = {key(s.start) for s in segments}
    tips = []
    seen = set()
    for s in segments:
        k = key(s.end)
        if k in starts or k in seen:
            continue
        seen.add(k)
        tips.append(s.end)
    return tips


def foliage_from_branch_tips(
    segments: Union[Sequence[BranchSegment], Iterable[Sequence[float]]],
    style: Union[str, TreeStyle],
    base_radius: float = 1.0,
) -> List[FoliageCluster]:
    """
    One sphere per skeleton tip, sized by the style's element size.

    ``segments`` may also be an iterable of points, used as the tips
    directly.
    """
    if isinstance(style, str):
        style = get_tree_style(style)
    items = list(segments)
    if items and isinstance(items[0], BranchSegment):
        points = branch_tips(items)
    else:
        points = [as_vec3(p) for p in items]

    radius = base_radius * style.foliage_element_size
    return [FoliageCluster(position=as_vec3(p), radius=radius) for p in points]


__all__ = [
    "FoliageGenerator",
    "branch_tips",
    "foliage_from_branch_tips",
    "MAX_PLACEMENT_ATTEMPTS",
]
