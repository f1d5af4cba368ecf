"""
Unified generation API for printable trees.

This module provides the main entry points: skeleton generation with any
registered backend, foliage layout, assembly into one mesh, and a full
run that writes the STL and a JSON report.

UNIT CONVENTIONS
----------------
Model units internally; the export policy's model scale is applied only
when writing files.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union
import logging
import time

from ..analysis.topology import analyze_topology
from ..backends import get_backend
from ..core.types import BranchSegment, FoliageResult, GeneratedMesh
from ..ops.foliage import FoliageGenerator
from ..ops.mesh.assembly import assemble
from ..ops.mesh.kernel import MeshKernel
from ..params.styles import get_tree_style
from ..policies import OperationReport
from ..specs.tree_spec import TreeSpec
from .export import save_stl, write_json

logger = logging.getLogger(__name__)


def _coerce_spec(spec: Union[TreeSpec, dict, None]) -> TreeSpec:
    if spec is None:
        spec = TreeSpec()
    elif isinstance(spec, dict):
        spec = TreeSpec.from_dict(spec)
    spec.validate()
    return spec


def generate_skeleton(spec: Union[TreeSpec, dict, None] = None) -> Tuple[List[BranchSegment], OperationReport]:
    """
    Generate branch segments with the backend named by ``spec.generator``.

    Parameters
    ----------
    spec : TreeSpec or dict, optional
        Request parameters (defaults to a mature linden)

    Returns
    -------
    segments : List[BranchSegment]
        Generated skeleton
    report : OperationReport
        Backend, counts and timing
    """
    spec = _coerce_spec(spec)
    backend = get_backend(spec.generator)

    start = time.time()
    segments = backend.generate_from_spec(spec)
    elapsed = time.time() - start

    warnings = []
    if not segments:
        warnings.append("Backend produced no segments")

    radii = [r for s in segments for r in (s.r1, s.r2)]
    report = OperationReport(
        operation="generate_skeleton",
        success=True,
        requested_policy=spec.to_dict(),
        effective_policy=spec.to_dict(),
        warnings=warnings,
        metadata={
            "generator": spec.generator,
            "segment_count": len(segments),
            "max_level": max((s.level for s in segments), default=0),
            "min_radius": min(radii) if radii else None,
            "closed_loops": backend.supports_closed_loops,
            "topology": analyze_topology(segments).to_dict(),
            "elapsed_s": elapsed,
        },
    )
    return segments, report


def generate_foliage(spec: Union[TreeSpec, dict, None] = None) -> Tuple[FoliageResult, OperationReport]:
    """
    Lay out foliage for ``spec.foliage``.

    The style's density and element size are overridden by the policy when
    set; the foliage seed defaults to the tree seed.
    """
    spec = _coerce_spec(spec)
    policy = spec.foliage
    style = get_tree_style(policy.style).with_overrides(policy.density, policy.element_size)
    seed = spec.seed if policy.seed is None else policy.seed

    result = FoliageGenerator().generate(spec.height, style, seed=seed)

    report = OperationReport(
        operation="generate_foliage",
        success=True,
        requested_policy=policy.to_dict(),
        effective_policy={**policy.to_dict(), "seed": seed, "style_record": style.to_dict()},
        metadata={
            "crown_style": style.crown_style,
            "cluster_count": len(result.clusters),
            "bounding_box": result.bounding_box.to_dict() if result.bounding_box else None,
        },
    )
    return result, report


def build_tree(
    spec: Union[TreeSpec, dict, None] = None,
    kernel: Optional[MeshKernel] = None,
    progress: bool = False,
) -> Tuple[GeneratedMesh, OperationReport]:
    """
    Generate the skeleton, optional foliage, and assemble one mesh.

    Parameters
    ----------
    spec : TreeSpec or dict, optional
        Request parameters
    kernel : MeshKernel, optional
        Session that keeps the assembled solid as its current solid
    progress : bool
        Show progress bars during assembly

    Returns
    -------
    mesh : GeneratedMesh
        Unioned tree mesh
    report : OperationReport
        Combined report; sub-reports are under ``metadata``

    Raises
    ------
    NoGeometryError
        If nothing could be realized
    KernelInitError
        If the mesh kernel is unavailable
    """
    spec = _coerce_spec(spec)

    segments, skeleton_report = generate_skeleton(spec)
    clusters = []
    foliage_report = None
    if spec.foliage.enabled:
        foliage, foliage_report = generate_foliage(spec)
        clusters = foliage.clusters

    mesh, assembly_report = assemble(
        segments,
        clusters,
        kernel=kernel,
        policy=spec.assembly,
        progress=progress,
    )

    warnings = skeleton_report.warnings + assembly_report.warnings
    report = OperationReport(
        operation="build_tree",
        success=True,
        requested_policy=spec.to_dict(),
        effective_policy=spec.to_dict(),
        warnings=warnings,
        metadata={
            "skeleton": skeleton_report.metadata,
            "foliage": foliage_report.metadata if foliage_report else None,
            "assembly": assembly_report.metadata,
        },
    )
    return mesh, report


def run_tree(
    spec: Union[TreeSpec, dict, None] = None,
    output_dir: Optional[Union[str, Path]] = None,
    progress: bool = False,
) -> OperationReport:
    """
    Build a tree and write its STL (and report, if enabled) to disk.

    Returns
    -------
    OperationReport
        Build report with the written paths under ``metadata["outputs"]``
    """
    spec = _coerce_spec(spec)
    out_dir = Path(output_dir if output_dir is not None else spec.export.output_dir)

    mesh, report = build_tree(spec, progress=progress)
    stl_path, export_report = save_stl(mesh, spec.export, output_dir=out_dir)

    outputs = {"stl": str(stl_path)}
    report.metadata["export"] = export_report.metadata
    report.metadata["outputs"] = outputs
    if spec.export.write_report:
        report_path = out_dir / "report.json"
        outputs["report"] = str(report_path)
        write_json(report, report_path)

    logger.info(f"Tree written to {stl_path}")
    return report


__all__ = [
    "generate_skeleton",
    "generate_foliage",
    "build_tree",
    "run_tree",
]
