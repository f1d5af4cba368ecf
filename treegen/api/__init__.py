"""High-level API for printable tree generation."""

from .generate import generate_skeleton, generate_foliage, build_tree, run_tree
from .export import (
    to_binary_stl,
    parse_binary_stl,
    scale_for_model_ratio,
    save_stl,
    save_mesh,
    write_json,
)
from .worker import AssemblyWorker, WorkerResponse

__all__ = [
    "generate_skeleton",
    "generate_foliage",
    "build_tree",
    "run_tree",
    "to_binary_stl",
    "parse_binary_stl",
    "scale_for_model_ratio",
    "save_stl",
    "save_mesh",
    "write_json",
    "AssemblyWorker",
    "WorkerResponse",
]
