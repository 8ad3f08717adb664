"""Main entry point for plm CLI."""
import sys
from plm.cli.main import cli


def main() -> int:
    """Run the CLI and return its exit code."""
    try:
        cli(prog_name="plm")
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
