"""
Boolean mesh kernel session.

MeshKernel is the one object that talks to manifold3d. It owns the
lifetime bookkeeping of every solid it creates, remembers the most recent
assembled solid for export, and records an initialization failure once so
every later request fails fast with the same error until the session is
reinitialized.
"""

from typing import Any, Dict, Optional, Sequence
import logging

import numpy as np

from ...core.types import GeneratedMesh
from ...errors import KernelInitError, NoMeshError

logger = logging.getLogger(__name__)


class MeshKernel:
    """
    Session around the manifold3d boolean kernel.

    Parameters
    ----------
    lazy : bool
        Defer importing the kernel until the first primitive is requested

    Example:
        >>> with MeshKernel() as kernel:
        ...     a = kernel.sphere(1.0, 16)
        ...     b = kernel.sphere(1.0, 16, translation=(1.0, 0.0, 0.0))
        ...     merged = kernel.union(a, b)
    """

    def __init__(self, lazy: bool = True):
        self._m3d = None
        self.init_error: Optional[str] = None
        self.created = 0
        self.released = 0
        self._current = None
        if not lazy:
            self.initialize()

    def initialize(self) -> None:
        """Load the kernel; a failure is recorded and raised as KernelInitError."""
        if self._m3d is not None:
            return
        if self.init_error is not None:
            raise KernelInitError(f"Mesh kernel unavailable: {self.init_error}")
        try:
            import manifold3d
        except Exception as e:
            self.init_error = str(e) or e.__class__.__name__
            logger.error(f"Failed to initialize mesh kernel: {self.init_error}")
            raise KernelInitError(f"Mesh kernel unavailable: {self.init_error}") from e
        self._m3d = manifold3d
        logger.debug("Mesh kernel initialized")

    def reinitialize(self) -> None:
        """Clear a recorded failure and load the kernel again."""
        self.close()
        self._m3d = None
        self.init_error = None
        self.initialize()

    @property
    def is_ready(self) -> bool:
        return self._m3d is not None and self.init_error is None

    @property
    def live(self) -> int:
        """Solids created by this session and not yet released."""
        return self.created - self.released

    def _manifold(self):
        if self._m3d is None:
            self.initialize()
        return self._m3d.Manifold

    def _track(self, solid):
        self.created += 1
        return solid

    def tapered_cylinder(
        self,
        height: float,
        radius_low: float,
        radius_high: float,
        segments: int,
        rotation: Optional[Sequence[float]] = None,
        translation: Optional[Sequence[float]] = None,
    ):
        """
        Truncated cone along +Z from z=0 to z=height, then rotated and moved.

        ``rotation`` is (rx, ry, rz) in degrees applied about X, then Y,
        then Z.
        """
        solid = self._manifold().cylinder(
            float(height), float(radius_low), float(radius_high), int(segments)
        )
        if rotation is not None:
            solid = solid.rotate([float(a) for a in rotation])
        if translation is not None:
            solid = solid.translate([float(c) for c in translation])
        return self._track(solid)

    def sphere(self, radius: float, segments: int, translation: Optional[Sequence[float]] = None):
        solid = self._manifold().sphere(float(radius), int(segments))
        if translation is not None:
            solid = solid.translate([float(c) for c in translation])
        return self._track(solid)

    def union(self, a, b):
        return self._track(a + b)

    def release(self, solid) -> None:
        """
        Drop a solid the caller no longer needs.

        The native memory is freed once the last Python reference goes away;
        callers must not keep other references to released solids.
        """
        if solid is None:
            return
        if solid is self._current:
            self._current = None
        self.released += 1

    def set_current(self, solid) -> None:
        """Make ``solid`` the session's exportable result, releasing the previous one."""
        if self._current is not None and self._current is not solid:
            self.release(self._current)
        self._current = solid

    def detach_current(self):
        """Take the current solid out of the session without releasing it."""
        solid = self._current
        self._current = None
        return solid

    @property
    def has_current(self) -> bool:
        return self._current is not None

    @property
    def current(self):
        if self._current is None:
            raise NoMeshError()
        return self._current

    def to_generated_mesh(self, solid) -> GeneratedMesh:
        """Read the solid's vertex and triangle buffers out once."""
        mesh = solid.to_mesh()
        vertices = np.asarray(mesh.vert_properties, dtype=np.float32)[:, :3]
        indices = np.asarray(mesh.tri_verts, dtype=np.uint32)
        return GeneratedMesh(vertices=vertices, indices=indices)

    def current_mesh(self) -> GeneratedMesh:
        return self.to_generated_mesh(self.current)

    def stats(self) -> Dict[str, Any]:
        return {
            "created": self.created,
            "released": self.released,
            "live": self.live,
            "has_current": self.has_current,
        }

    def close(self) -> None:
        """Release the current solid; the session can still be used afterwards."""
        if self._current is not None:
            self.release(self._current)
            self._current = None

    def __enter__(self) -> "MeshKernel":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["MeshKernel"]
