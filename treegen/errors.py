"""
Error types for tree generation, assembly and export.

Generation-time degenerate cases (short branches, radii under the printable
floor, unknown species names) are handled locally and never raise. The
errors below are the ones surfaced to callers: each carries the pipeline
stage that failed so a host can report it without parsing the message.
"""

from typing import Optional


class TreeGenError(Exception):
    """Base class for failures surfaced by the tree pipeline."""

    stage: str = "unknown"

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage

    def to_dict(self) -> dict:
        return {"stage": self.stage, "message": self.message}


class NoGeometryError(TreeGenError):
    """Raised when assembly realizes no solids from its inputs."""

    stage = "assembly"

    def __init__(self, message: str = "No geometry generated"):
        super().__init__(message)


class KernelInitError(TreeGenError):
    """Raised when the boolean mesh kernel is not available."""

    stage = "init"


class NoMeshError(TreeGenError):
    """Raised when an export is requested before any successful assembly."""

    stage = "export"

    def __init__(self, message: str = "No tree generated yet. Generate a tree first."):
        super().__init__(message)


__all__ = [
    "TreeGenError",
    "NoGeometryError",
    "KernelInitError",
    "NoMeshError",
]
