"""
Skeleton topology analysis.

Builds a networkx multigraph whose nodes are segment endpoints (snapped to
a tolerance grid) and whose edges are segments, then reports connectivity
and cycle counts. Useful for checking that a connected-growth skeleton is
one printable piece and that tree-shaped strategies really produce forests.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Sequence, Tuple

import networkx as nx

from ..core.types import BranchSegment

NodeKey = Tuple[int, int, int]


@dataclass
class TopologyReport:
    num_nodes: int
    num_edges: int
    num_components: int
    num_cycles: int
    is_forest: bool
    num_tips: int
    max_degree: int

    def to_dict(self) -> dict:
        return asdict(self)


def _snap(point: Sequence[float], tol: float) -> NodeKey:
    return tuple(int(round(c / tol)) for c in point)


def skeleton_graph(segments: Sequence[BranchSegment], tol: float = 1e-6) -> nx.MultiGraph:
    """
    Graph of a skeleton.

    Endpoints closer than ``tol`` (per axis, after snapping) share a node.
    Each node stores its first seen ``position``; each edge stores its
    segment ``index``, radii and level.
    """
    graph = nx.MultiGraph()
    positions: Dict[NodeKey, Tuple[float, float, float]] = {}

    for index, segment in enumerate(segments):
        a = _snap(segment.start, tol)
        b = _snap(segment.end, tol)
        positions.setdefault(a, segment.start)
        positions.setdefault(b, segment.end)
        graph.add_edge(a, b, index=index, r1=segment.r1, r2=segment.r2, level=segment.level)

    nx.set_node_attributes(graph, positions, "position")
    return graph


def analyze_topology(segments: Sequence[BranchSegment], tol: float = 1e-6) -> TopologyReport:
    """
    Connectivity summary of a skeleton.

    The cycle count is the cyclomatic number ``E - V + C`` of the
    multigraph, so parallel segments between the same two nodes count as
    a cycle.
    """
    graph = skeleton_graph(segments, tol)
    num_nodes = graph.number_of_nodes()
    num_edges = graph.number_of_edges()
    num_components = nx.number_connected_components(graph) if num_nodes else 0
    num_cycles = num_edges - num_nodes + num_components
    degrees = [d for _, d in graph.degree()]

    return TopologyReport(
        num_nodes=num_nodes,
        num_edges=num_edges,
        num_components=num_components,
        num_cycles=num_cycles,
        is_forest=num_cycles == 0,
        num_tips=sum(1 for d in degrees if d == 1),
        max_degree=max(degrees, default=0),
    )


__all__ = ["TopologyReport", "skeleton_graph", "analyze_topology"]
