"""Graph module for building edge-list graphs and sorting them topologically.

This module provides the arena-backed GraphStore, the deterministic
TopologicalSorter and a validator that explains why a graph cannot be sorted.
"""

from tsort.graph.sorter import CycleError, TopologicalSorter, find_cycle, topological_sort
from tsort.graph.store import GraphStore, Node
from tsort.graph.validator import GraphValidator, ValidationReport

__all__ = [
    "CycleError",
    "GraphStore",
    "GraphValidator",
    "Node",
    "TopologicalSorter",
    "ValidationReport",
    "find_cycle",
    "topological_sort",
]
