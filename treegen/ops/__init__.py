"""Operations on generated skeletons: foliage layout and mesh assembly."""

from .foliage import FoliageGenerator, foliage_from_branch_tips, branch_tips
from .mesh import MeshKernel, assemble, binary_union

__all__ = [
    "FoliageGenerator",
    "foliage_from_branch_tips",
    "branch_tips",
    "MeshKernel",
    "assemble",
    "binary_union",
]
