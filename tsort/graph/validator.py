"""Graph validation with cycle reporting.

This module checks a GraphStore for the conditions that make a topological
order impossible (cycles, self-loops) and for suspicious but harmless input
(duplicate edges, isolated nodes), collecting everything into a report.
"""

from collections import Counter
from dataclasses import dataclass, field

import structlog

from tsort.graph.sorter import CycleError, TopologicalSorter
from tsort.graph.store import GraphStore

logger = structlog.get_logger(__name__)


@dataclass
class ValidationReport:
    """Report containing validation results for a graph.

    Attributes:
        is_valid: Whether the graph can be topologically sorted
        errors: List of error messages (the graph cannot be sorted)
        warnings: List of warning messages (input worth a second look)
        cycles: Detected cycles, each a list of node names
        self_loops: Names of nodes with an edge to themselves
        duplicate_edges: ``(source, target)`` name pairs declared more than once
        isolated_nodes: Names of nodes with no edges at all
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    self_loops: list[str] = field(default_factory=list)
    duplicate_edges: list[tuple[str, str]] = field(default_factory=list)
    isolated_nodes: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        """Add an error message and mark validation as failed."""
        self.errors.append(message)
        self.is_valid = False
        logger.error("validation_error", message=message)

    def add_warning(self, message: str) -> None:
        """Add a warning message without failing validation."""
        self.warnings.append(message)
        logger.warning("validation_warning", message=message)

    def summary(self) -> str:
        """Generate a human-readable summary of the validation report."""
        lines = []
        lines.append(f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}")
        lines.append(f"Errors: {len(self.errors)}")
        lines.append(f"Warnings: {len(self.warnings)}")
        lines.append(f"Cycles: {len(self.cycles)}")
        lines.append(f"Self Loops: {len(self.self_loops)}")
        lines.append(f"Duplicate Edges: {len(self.duplicate_edges)}")
        lines.append(f"Isolated Nodes: {len(self.isolated_nodes)}")

        if self.errors:
            lines.append("\nErrors:")
            lines.extend(f"  - {error}" for error in self.errors)

        if self.warnings:
            lines.append("\nWarnings:")
            lines.extend(f"  - {warning}" for warning in self.warnings)

        if self.cycles:
            lines.append("\nCycles Detected:")
            for i, cycle in enumerate(self.cycles, 1):
                lines.append(f"  {i}. {' -> '.join(cycle)}")

        return "\n".join(lines)


class GraphValidator:
    """Validator for GraphStore instances.

    Checks performed:
    - Cycle detection, reporting one concrete cycle path
    - Self-loop detection
    - Duplicate edge detection
    - Isolated node detection
    """

    def __init__(self, sorter: TopologicalSorter | None = None):
        """Initialize the validator.

        Args:
            sorter: Sorter used to probe for cycles; a new one by default
        """
        self.sorter = sorter or TopologicalSorter()

    def validate(self, store: GraphStore) -> ValidationReport:
        """Validate a graph and generate a detailed report.

        Args:
            store: The graph to validate

        Returns:
            ValidationReport containing all validation results
        """
        logger.info("starting_graph_validation", node_count=store.node_count())

        report = ValidationReport()

        self_loops = self._find_self_loops(store)
        if self_loops:
            report.self_loops = self_loops
            for name in self_loops:
                report.add_error(f"Node depends on itself: {name}")

        # Self-loops are already reported; only look for longer cycles here.
        try:
            self.sorter.sort(self._without_self_loops(store))
        except CycleError as e:
            report.cycles.append(list(e.names))
            report.add_error(f"Cycle detected: {' -> '.join(e.names)}")

        duplicates = self._find_duplicate_edges(store)
        if duplicates:
            report.duplicate_edges = duplicates
            pairs = ", ".join(f"{source} -> {target}" for source, target in duplicates)
            report.add_warning(f"Edges declared more than once: {pairs}")

        isolated = self._find_isolated_nodes(store)
        if isolated:
            report.isolated_nodes = isolated
            report.add_warning(f"Nodes without any edges: {', '.join(isolated)}")

        logger.info(
            "graph_validation_complete",
            is_valid=report.is_valid,
            error_count=len(report.errors),
            warning_count=len(report.warnings),
        )

        return report

    def _find_self_loops(self, store: GraphStore) -> list[str]:
        return [
            node.name for node in store if node.handle in node.out_edges
        ]

    def _without_self_loops(self, store: GraphStore) -> GraphStore:
        """Copy ``store`` dropping self-loop edges, keeping handles aligned."""
        stripped = GraphStore()
        for node in store:
            stripped.intern(node.name)
        for source, target in store.edges():
            if source != target:
                stripped.add_edge(store.name_of(source), store.name_of(target))
        return stripped

    def _find_duplicate_edges(self, store: GraphStore) -> list[tuple[str, str]]:
        counts = Counter(store.edges())
        duplicates = [edge for edge, count in counts.items() if count > 1]

        if duplicates:
            logger.debug("duplicate_edges_found", count=len(duplicates))

        return [(store.name_of(source), store.name_of(target)) for source, target in duplicates]

    def _find_isolated_nodes(self, store: GraphStore) -> list[str]:
        """Find nodes that neither point to nor are pointed at by anything.

        Args:
            store: The graph to inspect

        Returns:
            Names of isolated nodes, in handle order
        """
        has_incoming = set()
        for _, target in store.edges():
            has_incoming.add(target)

        return [
            node.name
            for node in store
            if not node.out_edges and node.handle not in has_incoming
        ]
