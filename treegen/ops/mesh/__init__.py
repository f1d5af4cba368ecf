"""
Mesh-level operations for tree solids.

This module provides the boolean kernel session and the assembly of
branch and foliage primitives into one unioned mesh.
"""

from .kernel import MeshKernel
from .assembly import (
    assemble,
    binary_union,
    realize_segment,
    realize_cluster,
    segment_facets,
)

__all__ = [
    "MeshKernel",
    "assemble",
    "binary_union",
    "realize_segment",
    "realize_cluster",
    "segment_facets",
]
