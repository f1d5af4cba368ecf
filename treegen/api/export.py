"""
Export utilities for generated tree meshes.

Binary STL is written directly from the mesh buffers with a fixed numpy
record layout; other formats go through trimesh.

Binary STL layout (all little-endian):
    80-byte header
    uint32 triangle count
    per triangle: float32[3] normal, float32[3][3] vertices, uint16 attribute

UNIT CONVENTIONS
----------------
Internal units are model units. An optional uniform scale is applied to
vertex positions right before writing; ``scale_for_model_ratio(200)``
gives the factor for a 1:200 print.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union
import json
import logging

import numpy as np

from ..core.types import GeneratedMesh
from ..policies import ExportPolicy, OperationReport

logger = logging.getLogger(__name__)

HEADER_SIZE = 80
COUNT_SIZE = 4
RECORD_SIZE = 50

STL_RECORD_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attribute", "<u2"),
])


def scale_for_model_ratio(ratio: float) -> float:
    """
    Vertex scale for a 1:ratio print.

    >>> scale_for_model_ratio(200)
    0.005
    """
    if not ratio > 0:
        raise ValueError(f"Model ratio must be positive, got {ratio}")
    return 1.0 / float(ratio)


def face_normals(triangles: np.ndarray) -> np.ndarray:
    """
    Unit normals of (M, 3, 3) triangles from the edge cross product.

    Degenerate triangles get a zero normal.
    """
    triangles = np.asarray(triangles, dtype=np.float64)
    cross = np.cross(triangles[:, 1] - triangles[:, 0], triangles[:, 2] - triangles[:, 0])
    length = np.linalg.norm(cross, axis=1, keepdims=True)
    normals = np.zeros_like(cross)
    np.divide(cross, length, out=normals, where=length > 0.0)
    return normals


def _header_bytes(header: Union[str, bytes]) -> bytes:
    raw = header.encode("ascii", errors="replace") if isinstance(header, str) else bytes(header)
    return raw[:HEADER_SIZE].ljust(HEADER_SIZE, b"\0")


def to_binary_stl(
    mesh: GeneratedMesh,
    scale: Optional[float] = None,
    header: Union[str, bytes] = "Binary STL exported from treegen",
) -> bytes:
    """
    Serialize a mesh as binary STL.

    Parameters
    ----------
    mesh : GeneratedMesh
        Assembled mesh
    scale : float, optional
        Uniform factor applied to vertex positions only
    header : str or bytes
        Header text, truncated or zero-padded to 80 bytes

    Returns
    -------
    bytes
        Exactly ``84 + 50 * mesh.num_triangles`` bytes
    """
    triangles = mesh.triangles().astype(np.float64)
    if scale is not None:
        triangles = triangles * float(scale)

    records = np.zeros(mesh.num_triangles, dtype=STL_RECORD_DTYPE)
    if mesh.num_triangles:
        records["normal"] = face_normals(triangles)
        records["vertices"] = triangles

    return b"".join([
        _header_bytes(header),
        np.array([mesh.num_triangles], dtype="<u4").tobytes(),
        records.tobytes(),
    ])


def parse_binary_stl(data: bytes) -> Tuple[np.ndarray, np.ndarray]:
    """
    Read a binary STL buffer.

    Returns
    -------
    normals : np.ndarray
        (N, 3) float32
    triangles : np.ndarray
        (N, 3, 3) float32 corner positions

    Raises
    ------
    ValueError
        If the buffer length does not match the declared triangle count
    """
    if len(data) < HEADER_SIZE + COUNT_SIZE:
        raise ValueError(f"Binary STL needs at least 84 bytes, got {len(data)}")
    count = int(np.frombuffer(data, dtype="<u4", count=1, offset=HEADER_SIZE)[0])
    expected = HEADER_SIZE + COUNT_SIZE + RECORD_SIZE * count
    if len(data) != expected:
        raise ValueError(f"Binary STL declares {count} triangles ({expected} bytes), got {len(data)} bytes")

    records = np.frombuffer(data, dtype=STL_RECORD_DTYPE, count=count, offset=HEADER_SIZE + COUNT_SIZE)
    return records["normal"].copy(), records["vertices"].copy()


def save_stl(
    mesh: GeneratedMesh,
    policy: Optional[ExportPolicy] = None,
    output_dir: Optional[Union[str, Path]] = None,
    filename: Optional[str] = None,
) -> Tuple[Path, OperationReport]:
    """
    Write a mesh as binary STL using the export policy's model scale.

    Returns
    -------
    path : Path
        Written file
    report : OperationReport
        Scale, triangle count and byte size
    """
    if policy is None:
        policy = ExportPolicy()

    out_dir = Path(output_dir if output_dir is not None else policy.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / (filename or policy.filename)

    scale = scale_for_model_ratio(policy.model_scale)
    data = to_binary_stl(mesh, scale=None if scale == 1.0 else scale, header=policy.header)
    path.write_bytes(data)
    logger.info(f"Saved STL to {path} ({mesh.num_triangles:,} triangles, scale={scale:g})")

    report = OperationReport(
        operation="save_stl",
        success=True,
        requested_policy=policy.to_dict(),
        effective_policy={**policy.to_dict(), "output_dir": str(out_dir), "filename": path.name},
        metadata={
            "path": str(path),
            "scale": scale,
            "triangle_count": mesh.num_triangles,
            "bytes": len(data),
        },
    )
    return path, report


def save_mesh(
    mesh: GeneratedMesh,
    path: Union[str, Path],
    scale: Optional[float] = None,
) -> Path:
    """
    Save a mesh in any format trimesh can write, chosen by file extension.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    tm = mesh.to_trimesh()
    if scale is not None:
        tm.apply_scale(float(scale))
    tm.export(str(path))
    logger.info(f"Saved mesh to {path}")
    return path


def write_json(data: Union[Dict[str, Any], OperationReport], path: Union[str, Path]) -> Path:
    """
    Write JSON data to file.

    OperationReport and other objects with ``to_dict()`` are converted first.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if hasattr(data, "to_dict"):
        data = data.to_dict()

    with open(path, "w") as f:
        json.dump(data, f, indent=2, default=str)

    logger.info(f"Saved JSON to {path}")
    return path


__all__ = [
    "STL_RECORD_DTYPE",
    "scale_for_model_ratio",
    "face_normals",
    "to_binary_stl",
    "parse_binary_stl",
    "save_stl",
    "save_mesh",
    "write_json",
]
