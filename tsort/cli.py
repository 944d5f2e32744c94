"""Command-line interface.

Reads an edge list from a file or stdin, writes the topological order to
stdout one name per line, and reports loops on stderr the way tsort(1) does.

Exit codes:
    0: The input was sorted (or validated) successfully
    1: The input contains a loop
    2: The input or configuration could not be read
"""

import argparse
import sys
from typing import TextIO

import structlog

from tsort.config import LoggingConfig, TsortConfig, load_config
from tsort.graph.sorter import CycleError, TopologicalSorter
from tsort.graph.store import GraphStore
from tsort.graph.validator import GraphValidator
from tsort.log_config import bind_context, clear_context, configure_logging
from tsort.parser import EdgeListParser

logger = structlog.get_logger(__name__)

EXIT_OK = 0
EXIT_CYCLE = 1
EXIT_ERROR = 2
PROG = "tsort"
STDIN_NAME = "-"


def read_graph(path: str) -> GraphStore:
    """Parse the edge list at ``path`` (``-`` for stdin).

    Raises:
        OSError: If the file cannot be opened or read
    """
    parser = EdgeListParser()
    if path == STDIN_NAME:
        return parser.parse_lines(sys.stdin)

    with open(path, encoding="utf-8") as f:
        return parser.parse_lines(f)


def write_order(store: GraphStore, order: list[int], stream: TextIO, separator: str = "\n") -> None:
    """Write the name of each handle in ``order``, one per separator."""
    for name in store.names(order):
        stream.write(f"{name}{separator}")


def report_cycle(error: CycleError, source: str, stream: TextIO, list_members: bool = True) -> None:
    """Describe a loop on ``stream`` in tsort(1) style.

    Args:
        error: The raised CycleError
        source: Input name shown in the message
        stream: Where to write, normally stderr
        list_members: Also print one line per node of the cycle
    """
    stream.write(f"{PROG}: {source}: input contains a loop:\n")
    if not list_members:
        return
    # The cycle path repeats its first node at the end.
    for name in error.names[:-1]:
        stream.write(f"{PROG}: {name}\n")


def resolve_config(args: argparse.Namespace) -> TsortConfig:
    """Load the configuration and apply command-line overrides.

    Raises:
        FileNotFoundError: If an explicit configuration file is missing
        ValueError: If the configuration is invalid
    """
    config = load_config(args.config)

    if args.debug:
        config.logging.level = "DEBUG"
    elif args.log_level is not None:
        config.logging.level = args.log_level
    if args.json_logs:
        config.logging.json_logs = True

    return config


def bootstrap_logging(args: argparse.Namespace) -> None:
    """Configure logging before any configuration file is read.

    Command-line flags win over TSORT_LOG_LEVEL and TSORT_JSON_LOGS. Invalid
    environment values fall back to the defaults here; loading the full
    configuration reports them afterwards.
    """
    try:
        settings = TsortConfig.from_env().logging
    except ValueError:
        settings = LoggingConfig()

    configure_logging(
        args.log_level or settings.level,
        json_logs=args.json_logs or settings.json_logs,
    )


def run(args: argparse.Namespace) -> int:
    """Run tsort with parsed arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    bootstrap_logging(args)

    try:
        config = resolve_config(args)
    except (OSError, ValueError) as e:
        logger.exception("configuration_error", error=str(e))
        sys.stderr.write(f"{PROG}: {e}\n")
        return EXIT_ERROR

    configure_logging(config.logging.level, json_logs=config.logging.json_logs)
    bind_context(input=args.file)

    try:
        try:
            store = read_graph(args.file)
        except (OSError, UnicodeDecodeError) as e:
            logger.exception("input_read_failed", error=str(e))
            sys.stderr.write(f"{PROG}: {args.file}: {e}\n")
            return EXIT_ERROR

        if args.check:
            report = GraphValidator().validate(store)
            sys.stdout.write(report.summary() + "\n")
            return EXIT_OK if report.is_valid else EXIT_CYCLE

        try:
            order = TopologicalSorter().sort(store)
        except CycleError as e:
            logger.error("input_contains_loop", cycle=list(e.names), remaining=len(e.remaining))
            report_cycle(e, args.file, sys.stderr, list_members=config.output.report_cycle)
            return EXIT_CYCLE

        write_order(store, order, sys.stdout, separator=config.output.separator)
        sys.stdout.flush()

        logger.info("output_written", node_count=len(order))
        return EXIT_OK
    finally:
        clear_context()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse; sys.argv[1:] when None

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Topologically sort an edge list. Each input line names a node "
        "followed by the nodes it must precede.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sort a file
  tsort deps.txt

  # Sort stdin
  printf 'a b\\nb c\\na d\\n' | tsort

  # Report cycles, self-loops and duplicate edges without sorting
  tsort --check deps.txt
        """,
    )

    parser.add_argument(
        "file",
        nargs="?",
        default=STDIN_NAME,
        help="Edge list to read (default: stdin)",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=str,
        default=None,
        help="Path to configuration YAML file (default: tsort.yaml if present)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug output (DEBUG level)",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level (default: WARNING)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write log entries to stderr as JSON",
    )

    parser.add_argument(
        "--check",
        action="store_true",
        help="Validate the graph and print a report instead of sorting",
    )

    args = parser.parse_args(argv)

    if args.debug:
        args.log_level = "DEBUG"

    return args


def main(argv: list[str] | None = None) -> None:
    """Main entry point: parse arguments, run, and exit with the result code."""
    sys.exit(run(parse_args(argv)))


if __name__ == "__main__":
    main()
