"""Arena-backed directed graph with interned node names.

Every node lives in a single list (the arena) and is addressed by its index,
its handle. Nodes refer to each other only through handles, so the arena can
grow freely without invalidating anything held by callers.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

import structlog

logger = structlog.get_logger(__name__)


@dataclass
class Node:
    """A distinct name seen in the input.

    Attributes:
        handle: Dense zero-based index, assigned in order of first appearance
        name: The original name
        out_edges: Handles this node points to, in declaration order
    """

    handle: int
    name: str
    out_edges: list[int] = field(default_factory=list)


class GraphStore:
    """Directed graph owning all of its nodes in one growable arena.

    Names are interned into handles on first sight; handles are never reused
    or renumbered. Duplicate edges and self-loops are stored as given.

    Thread-safety:
        This class is NOT thread-safe. Build the store from a single thread
        and treat it as read-only while it is being sorted.

    Example:
        >>> store = GraphStore()
        >>> store.add_edge("a", "b")
        >>> store.intern("a")
        0
        >>> store.out_edges(0)
        (1,)
    """

    def __init__(self):
        """Initialize an empty store."""
        self.nodes: list[Node] = []
        self.handles: dict[str, int] = {}

    def intern(self, name: str) -> int:
        """Return the handle for ``name``, allocating a node if it is new.

        Args:
            name: Node name

        Returns:
            The node's handle. Repeated calls with the same name return the
            same handle and do not grow the arena.
        """
        handle = self.handles.get(name)
        if handle is not None:
            return handle

        handle = len(self.nodes)
        self.nodes.append(Node(handle=handle, name=name))
        self.handles[name] = handle

        logger.debug("node_interned", name=name, handle=handle)

        return handle

    def add_edge(self, source_name: str, target_name: str) -> None:
        """Add an edge ``source_name -> target_name``.

        Both names are interned (source first) before the target's handle is
        appended to the source's out-edges.

        Args:
            source_name: Name of the node the edge leaves
            target_name: Name of the node the edge enters
        """
        source = self.intern(source_name)
        target = self.intern(target_name)
        self.nodes[source].out_edges.append(target)

        logger.debug(
            "edge_added",
            source=source_name,
            target=target_name,
            source_handle=source,
            target_handle=target,
        )

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        """Total number of edges, duplicates included."""
        return sum(len(node.out_edges) for node in self.nodes)

    def out_edges(self, handle: int) -> tuple[int, ...]:
        """Return the handles ``handle`` points to, in declaration order.

        Raises:
            IndexError: If ``handle`` was not issued by this store
        """
        return tuple(self._node(handle).out_edges)

    def name_of(self, handle: int) -> str:
        """Return the name a handle was interned from.

        Raises:
            IndexError: If ``handle`` was not issued by this store
        """
        return self._node(handle).name

    def handle_of(self, name: str) -> int | None:
        """Look up a name without interning it."""
        return self.handles.get(name)

    def names(self, handles: Iterable[int]) -> list[str]:
        """Render a sequence of handles back to names."""
        return [self.name_of(handle) for handle in handles]

    def edges(self) -> Iterator[tuple[int, int]]:
        """Yield every ``(source, target)`` pair in handle, then declaration order."""
        for node in self.nodes:
            for target in node.out_edges:
                yield node.handle, target

    def get_stats(self) -> dict[str, int]:
        """Get statistics about the graph.

        Returns:
            Dictionary with:
                - total_nodes: Number of interned names
                - total_edges: Number of edges, duplicates included
                - self_loops: Number of edges from a node to itself
                - isolated_nodes: Nodes with neither incoming nor outgoing edges
        """
        has_incoming = [False] * len(self.nodes)
        self_loops = 0
        for source, target in self.edges():
            has_incoming[target] = True
            if source == target:
                self_loops += 1

        isolated = sum(
            1
            for node in self.nodes
            if not node.out_edges and not has_incoming[node.handle]
        )

        stats = {
            "total_nodes": len(self.nodes),
            "total_edges": self.edge_count(),
            "self_loops": self_loops,
            "isolated_nodes": isolated,
        }

        logger.debug("graph_stats_retrieved", **stats)

        return stats

    def _node(self, handle: int) -> Node:
        # Negative indices would silently wrap around the arena.
        if not 0 <= handle < len(self.nodes):
            msg = f"Unknown node handle: {handle}"
            raise IndexError(msg)
        return self.nodes[handle]

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, name: object) -> bool:
        return name in self.handles

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)
