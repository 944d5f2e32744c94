"""Edge-list parsing into a GraphStore.

Each non-blank line names a source node followed by zero or more targets:

    a b c     # a -> b, a -> c
    d         # isolated node d

A source that appears on several lines accumulates the edges of all of them.
"""

from collections.abc import Iterable

import structlog

from tsort.graph.store import GraphStore

logger = structlog.get_logger(__name__)


class EdgeListParser:
    """Feed whitespace-separated edge lines into a GraphStore.

    Example:
        >>> parser = EdgeListParser()
        >>> store = parser.parse("a b\\nb c\\n")
        >>> store.node_count()
        3
    """

    def __init__(self, store: GraphStore | None = None):
        """Initialize the parser.

        Args:
            store: Store to add nodes and edges to; a new one by default
        """
        self._store = store if store is not None else GraphStore()
        self.line_count = 0

    @property
    def store(self) -> GraphStore:
        return self._store

    def parse_line(self, line: str) -> None:
        """Parse one line; blank lines are ignored."""
        tokens = line.split()
        if not tokens:
            return

        self.line_count += 1
        source, *targets = tokens
        if not targets:
            self._store.intern(source)
            return

        for target in targets:
            self._store.add_edge(source, target)

    def parse_lines(self, lines: Iterable[str]) -> GraphStore:
        """Parse every line of an iterable, such as an open text file.

        Returns:
            The populated store
        """
        for line in lines:
            self.parse_line(line)

        logger.info(
            "edge_list_parsed",
            lines=self.line_count,
            node_count=self._store.node_count(),
            edge_count=self._store.edge_count(),
        )

        return self._store

    def parse(self, text: str) -> GraphStore:
        """Parse a whole edge list held in a string."""
        return self.parse_lines(text.splitlines())


def parse_graph(text: str) -> GraphStore:
    """Build a new GraphStore from edge-list text."""
    return EdgeListParser().parse(text)
