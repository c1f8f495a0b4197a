"""
Topology module - Edge classification, face adjacency and connectivity.
"""

from meshtopo.topology.analyzer import TopologyAnalyzer
from meshtopo.topology.edges import Edge, EdgeKind
from meshtopo.topology.graph import Graph

__all__ = [
    "TopologyAnalyzer",
    "Edge",
    "EdgeKind",
    "Graph",
]
