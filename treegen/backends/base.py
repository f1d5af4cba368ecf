"""
Base interface for branch generation backends.

Every strategy (envelope-constrained realistic growth, turtle/L-system,
organic loops, connected growth, attractor curve) produces the same
output: an ordered list of BranchSegment. The mesh assembly stage does not
know which backend produced its input.
"""

from abc import ABC, abstractmethod
from typing import List, TYPE_CHECKING

from ..core.rng import SeededRandom
from ..core.types import BranchSegment

if TYPE_CHECKING:
    from ..specs.tree_spec import TreeSpec


class GenerationBackend(ABC):
    """
    Abstract base class for branch generation backends.

    Backends own one SeededRandom each and reseed it at the start of every
    generation call. They declare whether their output is a pure forest
    via ``supports_closed_loops``.
    """

    name: str = "base"

    def __init__(self):
        self.rng = SeededRandom()

    @property
    @abstractmethod
    def supports_closed_loops(self) -> bool:
        """Whether the produced skeleton may contain cycles."""
        pass

    @abstractmethod
    def generate_from_spec(self, spec: "TreeSpec") -> List[BranchSegment]:
        """
        Generate a skeleton from a full tree specification.

        Parameters
        ----------
        spec : TreeSpec
            Request parameters; each backend reads the shared fields plus
            its own policy section

        Returns
        -------
        List[BranchSegment]
            Generated segments, in emission order
        """
        pass


__all__ = ["GenerationBackend"]
