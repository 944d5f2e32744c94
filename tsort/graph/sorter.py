"""Deterministic topological sorting of a GraphStore.

Kahn's algorithm with a LIFO ready stack: among nodes that are ready at the
same time, the one that became ready last is emitted next, and initially ready
nodes are taken in reverse order of first appearance.
"""

from collections.abc import Iterable

import structlog

from tsort.graph.store import GraphStore

logger = structlog.get_logger(__name__)


class CycleError(Exception):
    """Exception raised when the graph contains a cycle.

    Attributes:
        remaining: Handles that could not be ordered, in handle order
        cycle: One closed path among ``remaining``, first handle repeated last
        names: ``cycle`` rendered to node names
        message: Human-readable description
    """

    def __init__(
        self,
        message: str,
        remaining: Iterable[int] = (),
        cycle: Iterable[int] = (),
        names: Iterable[str] = (),
    ):
        """Initialize the exception.

        Args:
            message: Description of the cycle
            remaining: Handles left unsorted
            cycle: Handles forming one cycle
            names: Names of the handles in ``cycle``
        """
        super().__init__(message)
        self.message = message
        self.remaining = tuple(remaining)
        self.cycle = tuple(cycle)
        self.names = tuple(names)


def find_cycle(store: GraphStore, candidates: Iterable[int]) -> list[int]:
    """Find one cycle among ``candidates`` using an iterative DFS.

    Only edges between candidate handles are followed. Starting points are
    tried in increasing handle order, so the result is deterministic.

    Args:
        store: Graph to search
        candidates: Handles to restrict the search to

    Returns:
        A closed path ``[h0, ..., hk, h0]``, or an empty list when the
        candidates are acyclic.
    """
    allowed = set(candidates)
    on_path: set[int] = set()
    done: set[int] = set()

    for start in sorted(allowed):
        if start in done:
            continue

        path = [start]
        on_path.add(start)
        stack = [iter(store.out_edges(start))]

        while stack:
            for target in stack[-1]:
                if target not in allowed or target in done:
                    continue
                if target in on_path:
                    return [*path[path.index(target) :], target]
                path.append(target)
                on_path.add(target)
                stack.append(iter(store.out_edges(target)))
                break
            else:
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                stack.pop()

    return []


class TopologicalSorter:
    """Stateless sorter producing a handle order for a GraphStore.

    Each call builds its in-degree table and ready stack from scratch, so the
    same sorter can be reused and repeated calls on an unmodified store give
    identical results.

    Example:
        >>> store = GraphStore()
        >>> store.add_edge("a", "b")
        >>> store.add_edge("b", "c")
        >>> store.add_edge("a", "d")
        >>> store.names(TopologicalSorter().sort(store))
        ['a', 'd', 'b', 'c']
    """

    def sort(self, store: GraphStore) -> list[int]:
        """Order every handle so each edge points forward.

        Args:
            store: A fully built graph; it must not change during the call

        Returns:
            List of all handles in topological order

        Raises:
            CycleError: If some nodes cannot be ordered because of a cycle
        """
        node_count = store.node_count()

        logger.info(
            "sorting_graph",
            node_count=node_count,
            edge_count=store.edge_count(),
        )

        in_degree = [0] * node_count
        for handle in range(node_count):
            for target in store.out_edges(handle):
                in_degree[target] += 1

        ready = [handle for handle in range(node_count) if in_degree[handle] == 0]
        order: list[int] = []

        while ready:
            handle = ready.pop()
            order.append(handle)
            for target in store.out_edges(handle):
                in_degree[target] -= 1
                if in_degree[target] == 0:
                    ready.append(target)

        if len(order) != node_count:
            emitted = set(order)
            remaining = [handle for handle in range(node_count) if handle not in emitted]
            cycle = find_cycle(store, remaining)
            names = store.names(cycle)

            logger.warning(
                "cycle_detected",
                remaining_count=len(remaining),
                cycle=names,
            )

            error_msg = f"Cycle detected in graph: {' -> '.join(names)}"
            raise CycleError(error_msg, remaining=remaining, cycle=cycle, names=names)

        logger.info("graph_sorted", node_count=node_count)

        return order


def topological_sort(store: GraphStore) -> list[int]:
    """Sort ``store`` with a fresh TopologicalSorter."""
    return TopologicalSorter().sort(store)
