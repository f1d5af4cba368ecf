"""
Printable Tree Generation

This package generates 3D-printable tree models. A branch skeleton is grown by
one of several strategies (species-driven realistic growth, L-systems, organic
loops, connected growth, chaotic attractors), optionally dressed with foliage
clusters, unioned into a single watertight solid with the manifold3d boolean
kernel and written as a binary STL.

Main Entry Points:
    - generate_skeleton(): Branch segments for a TreeSpec
    - generate_foliage(): Foliage clusters for a tree style
    - build_tree(): Skeleton + foliage + boolean assembly
    - run_tree(): One-call build and export to disk
    - AssemblyWorker: Background FIFO for assembly and STL export

Example:
    >>> from treegen import TreeSpec, run_tree
    >>>
    >>> spec = TreeSpec(generator="realistic", species="spruce", height=15.0, seed=42)
    >>> spec.export.model_scale = 200  # 1:200 print
    >>> report = run_tree(spec, output_dir="./output")
    >>> report.metadata["outputs"]["stl"]
    'output/tree.stl'
"""

from .api import (
    generate_skeleton,
    generate_foliage,
    build_tree,
    run_tree,
    to_binary_stl,
    AssemblyWorker,
    WorkerResponse,
)
from .backends import get_backend, get_available_backends
from .core import BranchSegment, FoliageCluster, FoliageResult, GeneratedMesh, SeededRandom
from .errors import TreeGenError, NoGeometryError, KernelInitError, NoMeshError
from .ops import FoliageGenerator, MeshKernel, assemble
from .specs import TreeSpec

__version__ = "0.1.0"

__all__ = [
    # High-level API
    "generate_skeleton",
    "generate_foliage",
    "build_tree",
    "run_tree",
    "to_binary_stl",
    "AssemblyWorker",
    "WorkerResponse",
    # Backends
    "get_backend",
    "get_available_backends",
    # Operations
    "FoliageGenerator",
    "MeshKernel",
    "assemble",
    # Types
    "TreeSpec",
    "BranchSegment",
    "FoliageCluster",
    "FoliageResult",
    "GeneratedMesh",
    "SeededRandom",
    # Errors
    "TreeGenError",
    "NoGeometryError",
    "KernelInitError",
    "NoMeshError",
]
