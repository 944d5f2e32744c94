"""Allow running the CLI with ``python -m tsort``."""

from tsort.cli import main

if __name__ == "__main__":
    main()
