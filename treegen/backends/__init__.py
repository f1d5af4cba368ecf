"""
Branch generation backends.

The set of strategies is closed and selected once per request by kind:
- realistic: envelope-constrained recursive growth
- lsystem: turtle interpretation of an expanded L-system string
- organic: branches plus decorative crown loops
- connected: endpoint-rooted growth with loop closures
- attractor: chaotic attractor tube (decorative)

Use get_available_backends() to list kinds and get_backend_capabilities()
to see which produce cycles.
"""

from typing import Dict, List, Type

from .base import GenerationBackend
from .realistic_backend import RealisticBackend
from .lsystem_backend import LSystemBackend, expand, interpret
from .organic_backend import OrganicBackend
from .connected_backend import ConnectedBackend
from .attractor_backend import AttractorBackend

_BACKEND_REGISTRY: Dict[str, Type[GenerationBackend]] = {
    "realistic": RealisticBackend,
    "lsystem": LSystemBackend,
    "organic": OrganicBackend,
    "connected": ConnectedBackend,
    "attractor": AttractorBackend,
}


def get_available_backends() -> List[str]:
    """
    Get list of backend kinds.

    Returns
    -------
    List[str]
        Registered generator kinds
    """
    return list(_BACKEND_REGISTRY.keys())


def get_backend(name: str) -> GenerationBackend:
    """
    Create a backend instance by kind.

    Parameters
    ----------
    name : str
        Generator kind (e.g., "realistic", "connected")

    Returns
    -------
    GenerationBackend
        Fresh backend instance

    Raises
    ------
    ValueError
        If the kind is not registered
    """
    backend_class = _BACKEND_REGISTRY.get(name)
    if backend_class is None:
        raise ValueError(
            f"Unknown generator '{name}'. Available: {get_available_backends()}"
        )
    return backend_class()


def get_backend_capabilities(name: str) -> Dict[str, bool]:
    """
    Get capabilities of a backend.

    Returns
    -------
    Dict[str, bool]
        Capability names to values (empty for unknown kinds)
    """
    backend_class = _BACKEND_REGISTRY.get(name)
    if backend_class is None:
        return {}
    return {"closed_loops": backend_class().supports_closed_loops}


__all__ = [
    "GenerationBackend",
    "RealisticBackend",
    "LSystemBackend",
    "OrganicBackend",
    "ConnectedBackend",
    "AttractorBackend",
    "expand",
    "interpret",
    "get_available_backends",
    "get_backend",
    "get_backend_capabilities",
]
