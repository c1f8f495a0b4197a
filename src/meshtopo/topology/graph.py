"""
Index-based undirected graph.

Nodes are the integers ``0..node_count-1`` and edges are rows of an
``(k, 2)`` integer array. There are no node objects and no reference
cycles, so a graph can be traversed read-only from several threads.
"""

from typing import Optional

import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components


class Graph:
    """
    Immutable undirected graph over integer nodes.

    Example:
        >>> g = Graph(3, [[0, 1]])
        >>> g.is_connected()
        False
        >>> [c.tolist() for c in g.connected_components()]
        [[0, 1], [2]]
    """

    def __init__(self, node_count: int, edges: Optional[np.ndarray] = None) -> None:
        self._node_count = int(node_count)
        if edges is None or len(edges) == 0:
            edge_array = np.empty((0, 2), dtype=np.int64)
        else:
            edge_array = np.sort(np.asarray(edges, dtype=np.int64).reshape(-1, 2), axis=1)
            edge_array = edge_array[edge_array[:, 0] != edge_array[:, 1]]
            edge_array = np.unique(edge_array, axis=0)
        edge_array.setflags(write=False)
        self._edges = edge_array

    @property
    def node_count(self) -> int:
        return self._node_count

    @property
    def edges(self) -> np.ndarray:
        """``(k, 2)`` array of ``(low, high)`` node pairs, lexicographically sorted."""
        return self._edges

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return f"Graph(nodes={self._node_count}, edges={self.edge_count})"

    def adjacency_lists(self) -> list[list[int]]:
        adjacency: list[list[int]] = [[] for _ in range(self._node_count)]
        for a, b in self._edges.tolist():
            adjacency[a].append(b)
            adjacency[b].append(a)
        for neighbours in adjacency:
            neighbours.sort()
        return adjacency

    def neighbours(self, node: int) -> list[int]:
        left = self._edges[self._edges[:, 0] == node, 1]
        right = self._edges[self._edges[:, 1] == node, 0]
        return sorted(np.concatenate([left, right]).tolist())

    def degree(self, node: int) -> int:
        return int(np.count_nonzero(self._edges == node))

    def filtered(self, keep: np.ndarray) -> "Graph":
        """Graph with the same nodes and only the edges where ``keep`` is true."""
        return Graph(self._node_count, self._edges[np.asarray(keep, dtype=bool)])

    def component_labels(self) -> np.ndarray:
        """Component label per node; labels are numbered by lowest member node."""
        if self._node_count == 0:
            return np.empty(0, dtype=np.int64)
        data = np.ones(len(self._edges), dtype=np.int8)
        matrix = coo_matrix(
            (data, (self._edges[:, 0], self._edges[:, 1])),
            shape=(self._node_count, self._node_count),
        )
        _, labels = connected_components(matrix, directed=False)

        # Renumber so component order follows the lowest node in each
        _, first = np.unique(labels, return_index=True)
        order = np.argsort(first)
        renumber = np.empty_like(order)
        renumber[order] = np.arange(len(order))
        return renumber[labels].astype(np.int64)

    def connected_components(self) -> list[np.ndarray]:
        """Node ids of each component (ascending), ordered by lowest node."""
        labels = self.component_labels()
        if not len(labels):
            return []
        order = np.argsort(labels, kind="stable")
        splits = np.flatnonzero(np.diff(labels[order])) + 1
        return np.split(order, splits)

    def is_connected(self) -> bool:
        """True for a single component; graphs with 0 or 1 nodes are connected."""
        if self._node_count <= 1:
            return True
        return bool(np.all(self.component_labels() == 0))
