"""Topological sorting of textual edge lists, in the manner of tsort(1)."""

from tsort.graph import CycleError, GraphStore, TopologicalSorter, topological_sort
from tsort.parser import EdgeListParser, parse_graph

__version__ = "0.1.0"

__all__ = [
    "CycleError",
    "EdgeListParser",
    "GraphStore",
    "TopologicalSorter",
    "parse_graph",
    "topological_sort",
]
