"""
Mesh assembly: primitives to one watertight solid.

Each branch segment becomes a truncated cone aligned to the segment axis,
each foliage cluster a sphere, cone or cylinder. All solids are merged
with a binary-tree union so the union depth is O(log n) instead of a
sequential chain.

UNIT CONVENTIONS
----------------
Model units, Z up. Kernel rotations are Euler angles in degrees.
"""

from typing import List, Optional, Sequence, Tuple
import logging
import math

import numpy as np
from tqdm import tqdm

from .kernel import MeshKernel
from ...core.types import BranchSegment, FoliageCluster, GeneratedMesh
from ...errors import NoGeometryError
from ...policies import MeshAssemblyPolicy, OperationReport
from ...utils.geometry import axis_alignment_angles

logger = logging.getLogger(__name__)


def segment_facets(mean_radius: float, policy: Optional[MeshAssemblyPolicy] = None) -> int:
    """Circular facet count for a segment of the given average radius."""
    if policy is None:
        policy = MeshAssemblyPolicy()
    if mean_radius > policy.thick_radius:
        return policy.thick_segments
    if mean_radius > policy.medium_radius:
        return policy.medium_segments
    return policy.thin_segments


def realize_segment(
    kernel: MeshKernel,
    segment: BranchSegment,
    policy: Optional[MeshAssemblyPolicy] = None,
):
    """
    Tapered cylinder for one segment, or None when the segment is degenerate.

    Built along +Z, rotated so +Z maps onto the segment direction and moved
    to the segment start.
    """
    if policy is None:
        policy = MeshAssemblyPolicy()

    axis = segment.end_array - segment.start_array
    length = float(np.linalg.norm(axis))
    if length < policy.min_segment_length:
        return None
    if segment.r1 <= 0.0 and segment.r2 <= 0.0:
        return None

    angles = axis_alignment_angles(axis, policy.vertical_tolerance * length)
    return kernel.tapered_cylinder(
        length,
        segment.r1,
        segment.r2,
        segment_facets(segment.mean_radius(), policy),
        rotation=angles,
        translation=segment.start,
    )


def realize_cluster(
    kernel: MeshKernel,
    cluster: FoliageCluster,
    policy: Optional[MeshAssemblyPolicy] = None,
):
    """Solid for one foliage cluster, or None when it is too small to print."""
    if policy is None:
        policy = MeshAssemblyPolicy()
    segments = policy.cluster_segments

    if cluster.kind == "sphere":
        if cluster.radius < policy.min_sphere_radius:
            return None
        return kernel.sphere(cluster.radius, segments, translation=cluster.position)

    if cluster.radius <= 0.0:
        return None
    height = cluster.height if cluster.height is not None else cluster.radius * 2.0
    if height <= 0.0:
        return None

    if cluster.kind == "cone":
        top = cluster.top_radius if cluster.top_radius is not None else cluster.radius * 0.1
    elif cluster.kind == "cylinder":
        top = cluster.top_radius if cluster.top_radius is not None else cluster.radius
    else:
        raise ValueError(f"Unknown cluster kind '{cluster.kind}'")

    return kernel.tapered_cylinder(height, cluster.radius, top, segments, translation=cluster.position)


def binary_union(kernel: MeshKernel, solids: List):
    """
    Union a list of solids by recursive halving.

    The list is consumed: each slot is set to None as soon as its solid is
    taken into a parent union, and every intermediate result is released
    right after the union that uses it.

    Raises
    ------
    NoGeometryError
        If ``solids`` is empty
    """
    if len(solids) == 0:
        raise NoGeometryError()
    return _union_range(kernel, solids, 0, len(solids))


def _union_range(kernel: MeshKernel, solids: List, lo: int, hi: int):
    if hi - lo == 1:
        solid = solids[lo]
        solids[lo] = None
        return solid

    mid = lo + (hi - lo) // 2
    left = _union_range(kernel, solids, lo, mid)
    right = _union_range(kernel, solids, mid, hi)
    merged = kernel.union(left, right)
    kernel.release(left)
    kernel.release(right)
    return merged


def _realize_into(solids: List, realized) -> int:
    """Append every realized solid to ``solids``; return how many were skipped."""
    skipped = 0
    for solid in realized:
        if solid is None:
            skipped += 1
        else:
            solids.append(solid)
    return skipped


def union_depth(count: int) -> int:
    return 0 if count <= 1 else int(math.ceil(math.log2(count)))


def assemble(
    segments: Sequence[BranchSegment],
    clusters: Sequence[FoliageCluster] = (),
    kernel: Optional[MeshKernel] = None,
    policy: Optional[MeshAssemblyPolicy] = None,
    progress: bool = False,
) -> Tuple[GeneratedMesh, OperationReport]:
    """
    Realize and union all primitives into one mesh.

    Parameters
    ----------
    segments : Sequence[BranchSegment]
        Branch skeleton
    clusters : Sequence[FoliageCluster]
        Foliage clusters
    kernel : MeshKernel, optional
        Session to build in; the assembled solid becomes its current solid.
        A temporary session is used when omitted.
    policy : MeshAssemblyPolicy, optional
        Facet and degeneracy thresholds
    progress : bool
        Show a progress bar while realizing primitives

    Returns
    -------
    mesh : GeneratedMesh
        Vertex and index buffers of the unioned solid
    report : OperationReport
        Counts of realized and skipped primitives

    Raises
    ------
    NoGeometryError
        If no primitive could be realized
    KernelInitError
        If the kernel is unavailable
    """
    if policy is None:
        policy = MeshAssemblyPolicy()
    owns_kernel = kernel is None
    if owns_kernel:
        kernel = MeshKernel()
    kernel.initialize()

    solids: List = []
    skipped_segments = _realize_into(
        solids,
        (realize_segment(kernel, s, policy) for s in tqdm(segments, desc="Realizing segments", disable=not progress)),
    )
    skipped_clusters = _realize_into(
        solids,
        (realize_cluster(kernel, c, policy) for c in tqdm(clusters, desc="Realizing clusters", disable=not progress)),
    )

    if not solids:
        logger.error(
            f"Assembly produced no solids from {len(segments)} segments and {len(clusters)} clusters"
        )
        raise NoGeometryError()

    count = len(solids)
    logger.info(f"Unioning {count} solids (depth {union_depth(count)})")
    result = binary_union(kernel, solids)

    mesh = kernel.to_generated_mesh(result)
    if owns_kernel:
        kernel.release(result)
    else:
        kernel.set_current(result)

    warnings = []
    if skipped_segments:
        warnings.append(f"Skipped {skipped_segments} degenerate segments")
    if skipped_clusters:
        warnings.append(f"Skipped {skipped_clusters} clusters below printable size")

    report = OperationReport(
        operation="assemble",
        success=True,
        requested_policy=policy.to_dict(),
        effective_policy=policy.to_dict(),
        warnings=warnings,
        metadata={
            "segments_in": len(segments),
            "clusters_in": len(clusters),
            "segments_skipped": skipped_segments,
            "clusters_skipped": skipped_clusters,
            "solids_unioned": count,
            "union_depth": union_depth(count),
            "vertex_count": mesh.num_vertices,
            "triangle_count": mesh.num_triangles,
            "kernel": kernel.stats(),
        },
    )
    logger.info(f"Assembled mesh with {mesh.num_triangles} triangles")
    return mesh, report


__all__ = [
    "segment_facets",
    "realize_segment",
    "realize_cluster",
    "binary_union",
    "union_depth",
    "assemble",
]
