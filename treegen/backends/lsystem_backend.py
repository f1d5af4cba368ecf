"""
Turtle/L-system branch generator.

Strings are expanded with one production rule built from the branching
factor and interpreted by a stack-based 3D turtle.

Symbols:
    F       move forward, emitting a tapered segment
    + -     yaw about the turtle's local Y axis
    & ^     pitch about the turtle's local X axis
    \\ /     roll about the turtle's heading (local Z)
    [ ]     push / pop the turtle state

Any other symbol is carried through expansion and ignored by the turtle.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging
import math

import numpy as np
from scipy.spatial.transform import Rotation

from .base import GenerationBackend
from ..core.types import BranchSegment, as_vec3
from ..policies import LSystemPolicy
from ..utils.geometry import UP, DOWN, X_AXIS, Y_AXIS, normalize, rotation_between, slerp_rotation

logger = logging.getLogger(__name__)

TURN_ANGLE = math.radians(25.0)
SEGMENT_TAPER = 0.9
GRAVITROPISM_WEIGHT = 0.3

_TURNS = {
    "+": (Y_AXIS, 1.0),
    "-": (Y_AXIS, -1.0),
    "&": (X_AXIS, 1.0),
    "^": (X_AXIS, -1.0),
    "\\": (UP, 1.0),
    "/": (UP, -1.0),
}


def production_rule(branching_factor: int) -> str:
    """
    Replacement for ``F`` given a branching factor.

    >>> production_rule(2)
    'FF[+F][-F]'
    """
    sides = "".join(
        f"[{'+' if i % 2 == 0 else '-'}F]" for i in range(max(int(branching_factor), 0))
    )
    return "FF" + sides


def expand(axiom: str, depth: int, branching_factor: int = 2) -> str:
    """Apply the production rule to every ``F`` in ``axiom``, ``depth`` times."""
    rule = production_rule(branching_factor)
    current = axiom
    for _ in range(max(int(depth), 0)):
        current = "".join(rule if ch == "F" else ch for ch in current)
    return current


@dataclass
class TurtleState:
    position: np.ndarray
    orientation: Rotation
    radius: float
    length: float
    level: int = 0

    def copy(self) -> "TurtleState":
        return TurtleState(
            position=self.position.copy(),
            orientation=self.orientation,
            radius=self.radius,
            length=self.length,
            level=self.level,
        )


def interpret(
    string: str,
    initial_radius: float,
    thickness_decay: float,
    length_decay: float,
    min_radius: float,
    model_scale: float = 1.0,
    gravitropism: float = 0.0,
    initial_length: float = 1.0,
) -> List[BranchSegment]:
    """
    Walk ``string`` with a 3D turtle and emit branch segments.

    Parameters
    ----------
    string : str
        Expanded L-system string
    initial_radius : float
        Radius at the first ``F``
    thickness_decay : float
        Da Vinci exponent; each ``[`` scales the radius by
        ``0.5 ** (1 / thickness_decay)``
    length_decay : float
        Step length multiplier applied after every ``F``
    min_radius : float
        Segments whose end radius times ``model_scale`` is below this are
        not emitted
    model_scale : float
        Model-to-physical radius factor
    gravitropism : float
        Droop strength in [-1, 1]; negative values bend upward
    initial_length : float
        Step length at the first ``F``

    Returns
    -------
    List[BranchSegment]
        Emitted segments in walk order
    """
    if thickness_decay <= 0:
        raise ValueError(f"thickness_decay must be positive, got {thickness_decay}")

    branch_factor = 0.5 ** (1.0 / thickness_decay)
    droop = float(np.clip(gravitropism, -1.0, 1.0)) * GRAVITROPISM_WEIGHT

    state = TurtleState(
        position=np.zeros(3),
        orientation=Rotation.identity(),
        radius=float(initial_radius),
        length=float(initial_length),
    )
    stack: List[TurtleState] = []
    segments: List[BranchSegment] = []

    for symbol in string:
        if symbol == "F":
            heading = state.orientation.apply(UP)
            if droop != 0.0:
                bent = normalize(heading + (DOWN - heading) * droop, fallback=heading)
                target = rotation_between(heading, bent) * state.orientation
                state.orientation = slerp_rotation(state.orientation, target, 0.5)
                heading = bent

            end = state.position + heading * state.length
            r2 = state.radius * SEGMENT_TAPER
            if r2 * model_scale >= min_radius:
                segments.append(
                    BranchSegment(
                        start=as_vec3(state.position),
                        end=as_vec3(end),
                        r1=state.radius,
                        r2=r2,
                        level=state.level,
                    )
                )
            state.position = end
            state.radius = r2
            state.length *= length_decay
        elif symbol in _TURNS:
            axis, sign = _TURNS[symbol]
            state.orientation = state.orientation * Rotation.from_rotvec(axis * sign * TURN_ANGLE)
        elif symbol == "[":
            stack.append(state.copy())
            state.radius *= branch_factor
            state.level += 1
        elif symbol == "]":
            if stack:
                state = stack.pop()

    return segments


class LSystemBackend(GenerationBackend):
    """Deterministic string-rewriting generator; draws no random numbers."""

    name = "lsystem"

    @property
    def supports_closed_loops(self) -> bool:
        return False

    def generate_from_spec(self, spec) -> List[BranchSegment]:
        return self.generate(spec.lsystem, min_radius=spec.min_radius, seed=spec.seed)

    def generate(
        self,
        policy: Optional[LSystemPolicy] = None,
        min_radius: float = 0.0,
        model_scale: float = 1.0,
        seed: Optional[int] = None,
    ) -> List[BranchSegment]:
        if policy is None:
            policy = LSystemPolicy()
        self.rng.reseed(seed)

        string = expand(policy.axiom, policy.depth, policy.branching_factor)
        segments = interpret(
            string,
            initial_radius=policy.initial_radius,
            thickness_decay=policy.thickness_decay,
            length_decay=policy.length_decay,
            min_radius=min_radius,
            model_scale=model_scale,
            gravitropism=policy.gravitropism,
            initial_length=policy.initial_length,
        )
        logger.info(
            f"L-system expanded to {len(string)} symbols, emitted {len(segments)} segments"
        )
        return segments


__all__ = [
    "LSystemBackend",
    "TurtleState",
    "production_rule",
    "expand",
    "interpret",
    "TURN_ANGLE",
]
