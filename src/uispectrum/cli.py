"""Command-line interface for uispectrum."""

from __future__ import annotations

import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console

if TYPE_CHECKING:
    from uispectrum.config import Config

# Exit codes
EXIT_OK = 0
EXIT_USAGE = 1
EXIT_INVALID_SCENE = 2

console = Console(stderr=True)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    from uispectrum import __version__

    parser = argparse.ArgumentParser(
        prog="uispectrum",
        description="Spectrum - print the activity/view/fragment hierarchy of a UI",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=None,
        help="Increase diagnostics verbosity (can be repeated)",
    )

    subparsers = parser.add_subparsers(dest="mode", help="Operating mode")

    # Render mode
    render_parser = subparsers.add_parser(
        "render",
        help="Launch a scene file and print one report",
    )
    render_parser.add_argument(
        "scene",
        type=Path,
        help="Scene file (YAML)",
    )
    render_parser.add_argument(
        "--config",
        type=Path,
        help="Config file layered over the system, user and project configs",
    )
    render_parser.add_argument(
        "--tag",
        help="Tag printed with every message",
    )
    render_parser.add_argument(
        "--level",
        help="Severity of report messages (verbose, debug, info, warn, error, assert)",
    )
    render_parser.add_argument(
        "--packages",
        action="store_true",
        help="Print qualified class names",
    )
    render_parser.add_argument(
        "--no-ids",
        action="store_true",
        help="Omit view identifier names",
    )
    render_parser.add_argument(
        "--locations",
        action="store_true",
        help="Print view screen locations",
    )
    render_parser.add_argument(
        "--no-hierarchy",
        action="store_true",
        help="Skip the view tree, print activities and fragments only",
    )
    render_parser.add_argument(
        "--max-bytes",
        type=int,
        help="Maximum size of one message in bytes",
    )
    render_parser.add_argument(
        "--show-tag",
        action="store_true",
        help="Prefix every printed line with the tag",
    )

    return parser


def apply_options(config: Config, parsed: argparse.Namespace) -> None:
    """Apply render options to config.

    Raises:
        ValueError: If an option value is invalid.
    """
    from uispectrum.config import ConfigurationBuilder

    builder = ConfigurationBuilder(config.report)
    if parsed.tag is not None:
        builder.log_tag(parsed.tag)
    if parsed.level is not None:
        builder.log_level(parsed.level)
    if parsed.packages:
        builder.append_package_names(True)
    if parsed.no_ids:
        builder.append_element_id(False)
    if parsed.locations:
        builder.append_element_location(True)
    if parsed.no_hierarchy:
        builder.show_hierarchy(False)
    if parsed.max_bytes is not None:
        builder.max_message_bytes(parsed.max_bytes)
    # One report for the whole launch
    builder.auto_report(False)


async def run_render(config: Config, scene_path: Path, show_tag: bool = False) -> int:
    """Launch a scene and print its report.

    Args:
        config: Configuration
        scene_path: Scene file
        show_tag: Prefix printed lines with the tag

    Returns:
        Exit code
    """
    from uispectrum.engine import ReportEngine
    from uispectrum.errors import SceneError
    from uispectrum.report.sink import ConsoleSink
    from uispectrum.toolkit.loader import load_scene

    try:
        scene = load_scene(scene_path)
    except SceneError as e:
        console.print(f"Error: {e}", style="red", markup=False, highlight=False)
        return EXIT_INVALID_SCENE

    engine = ReportEngine(scene.toolkit, ConsoleSink(Console(), show_tag=show_tag), config)
    try:
        engine.explore(scene.application)
        try:
            scene.launch()
        except (ValueError, RuntimeError) as e:
            console.print(f"Error: cannot launch {scene_path}: {e}", style="red", markup=False, highlight=False)
            return EXIT_INVALID_SCENE
        engine.report()
    finally:
        engine.close()
    return EXIT_OK


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    try:
        parsed = parser.parse_args(args)
    except SystemExit as e:
        # --help and --version exit with 0, argparse errors with 2
        return EXIT_OK if not e.code else EXIT_USAGE

    if parsed.mode is None:
        parser.print_help()
        return EXIT_USAGE

    if parsed.mode == "render":
        # Load config
        from uispectrum.config import load_config
        from uispectrum.logging import setup_logging

        config = load_config(project_root=Path.cwd(), config_file=parsed.config)
        setup_logging(config.logging, verbose=parsed.verbose)

        try:
            apply_options(config, parsed)
        except ValueError as e:
            console.print(f"Error: {e}", style="red", markup=False, highlight=False)
            return EXIT_USAGE
        return asyncio.run(run_render(config, parsed.scene, parsed.show_tag))
    else:
        parser.print_help()
        return EXIT_USAGE
