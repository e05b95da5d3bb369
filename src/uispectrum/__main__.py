"""CLI entry point for uispectrum."""

import sys


def main() -> int:
    """Main entry point for the uispectrum CLI."""
    from uispectrum.cli import run_cli

    return run_cli(sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
