"""Analysis of generated skeletons."""

from .topology import TopologyReport, skeleton_graph, analyze_topology

__all__ = ["TopologyReport", "skeleton_graph", "analyze_topology"]
