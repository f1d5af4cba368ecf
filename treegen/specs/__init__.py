"""Declarative request specifications."""

from .tree_spec import TreeSpec, GeneratorKind, GENERATOR_KINDS

__all__ = ["TreeSpec", "GeneratorKind", "GENERATOR_KINDS"]
