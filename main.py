#!/usr/bin/env python3
"""Main Entry Point and CLI Integration.

This module provides the command-line interface of conftool. It loads the
settings and the option catalog, builds the dependency graph and dispatches
to the list, validate, enable, disable, set and generate commands.
"""

import argparse
import sys
from pathlib import Path

import structlog

from conftool import planner
from conftool.catalog import Catalog
from conftool.config import ToolSettings, load_settings
from conftool.errors import ConftoolError
from conftool.generate import generate_defconfig
from conftool.graph.dependency_graph import DependencyGraph
from conftool.kvfile import load_config, read_lines, write_config
from conftool.listing import describe_dependencies, describe_entry
from conftool.log_config import bind_context, clear_context, configure_logging, verbosity_to_level
from conftool.validation import validate_config

logger = structlog.get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse; defaults to ``sys.argv[1:]``

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="conftool",
        description="Config file dependency management made easy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show an option and everything it depends on
  conftool list --show CONFIG_NET --dependencies CONFIG_NET

  # Enable an option, enabling its dependencies as well
  conftool enable CONFIG_NET

  # Set a value and check the result
  conftool set CONFIG_PORT 8080
  conftool validate

  # Write a config made of catalog defaults
  conftool -c defconfig generate defconfig
        """,
    )

    parser.add_argument(
        "-s",
        "--specification",
        type=Path,
        default=None,
        help="Path to config specification (default: .conftool.json)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path of config file (default: .config)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity, may be passed repeatedly",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Path to a YAML settings file (default: .conftool.yaml if present)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Set logging level, overriding --verbose",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit log events as JSON",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List configuration options")
    list_parser.add_argument(
        "-s",
        "--show",
        metavar="OPTION",
        help="Show information regarding configuration option",
    )
    list_parser.add_argument(
        "-a",
        "--all",
        action="store_true",
        help="Show information about all options",
    )
    list_parser.add_argument(
        "-d",
        "--dependencies",
        metavar="OPTION",
        help="List dependencies of option, including indirect ones",
    )

    subparsers.add_parser("validate", help="Validate config file")

    enable_parser = subparsers.add_parser("enable", help="Enable config options")
    enable_parser.add_argument("option", help="Option to enable, automatically handling dependencies")

    disable_parser = subparsers.add_parser("disable", help="Disable config options")
    disable_parser.add_argument("option", help="Option to disable, disabling its dependents")

    set_parser = subparsers.add_parser("set", help="Set config option")
    set_parser.add_argument("option", help="The option to set")
    set_parser.add_argument("value", help="The value to assign the option")

    generate_parser = subparsers.add_parser("generate", help="Config generation")
    generate_parser.add_argument(
        "conftype",
        choices=["defconfig"],
        help="Type of config to generate",
    )

    args = parser.parse_args(argv)

    if args.command == "list" and not (args.show or args.all or args.dependencies):
        list_parser.error("one of --show, --all or --dependencies is required")

    return args


def resolve_settings(args: argparse.Namespace) -> ToolSettings:
    """Combine the settings file with command-line overrides.

    Args:
        args: Parsed command-line arguments

    Returns:
        Effective settings
    """
    settings = load_settings(args.settings)

    overrides: dict[str, object] = {}
    if args.specification is not None:
        overrides["specification"] = args.specification
    if args.config is not None:
        overrides["config"] = args.config
    if args.log_level is not None:
        overrides["logging_level"] = args.log_level
    elif args.verbose:
        overrides["logging_level"] = verbosity_to_level(args.verbose)
    if args.json_logs:
        overrides["json_logs"] = True

    return settings.model_copy(update=overrides)


def run_list(args: argparse.Namespace, catalog: Catalog, graph: DependencyGraph) -> int:
    """Print catalog entries and dependency listings."""
    if args.all:
        print("\n".join(describe_entry(entry) for entry in catalog.entries))
        return EXIT_SUCCESS

    if args.show:
        entry = catalog.get(args.show)
        if entry is None:
            print(f"Invalid config option {args.show}", file=sys.stderr)
            return EXIT_FAILURE
        print(describe_entry(entry))

    if args.dependencies:
        print(describe_dependencies(args.dependencies, graph))

    return EXIT_SUCCESS


def run_command(args: argparse.Namespace, settings: ToolSettings) -> int:
    """Load the catalog and execute the selected command.

    Args:
        args: Parsed command-line arguments
        settings: Effective settings

    Returns:
        Exit code (0 for success, 1 for failure)

    Raises:
        ConftoolError: If the catalog or an operation fails
        FileNotFoundError: If the catalog or the config file is missing
    """
    catalog = Catalog.from_file(settings.specification)
    graph = catalog.build_graph()
    config_path = settings.config

    if args.command == "list":
        return run_list(args, catalog, graph)

    if args.command == "validate":
        report = validate_config(read_lines(config_path), catalog, graph)
        print(report.summary())
        return EXIT_SUCCESS if report.is_valid else EXIT_FAILURE

    if args.command == "generate":
        write_config(generate_defconfig(catalog, graph), config_path)
        return EXIT_SUCCESS

    values = load_config(config_path, missing_ok=True)
    if args.command == "enable":
        values = planner.enable(args.option, values, catalog, graph)
    elif args.command == "disable":
        values = planner.disable(args.option, values, catalog, graph)
    elif args.command == "set":
        values = planner.set_value(args.option, args.value, values, catalog, graph)

    write_config(values, config_path)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    """Main entry point for conftool.

    Args:
        argv: Command-line arguments; defaults to ``sys.argv[1:]``

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    args = parse_args(argv)

    try:
        settings = resolve_settings(args)
        configure_logging(settings.logging_level, json_logs=settings.json_logs)
    except (FileNotFoundError, ValueError) as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return EXIT_FAILURE

    bind_context(command=args.command)
    logger.debug(
        "settings_resolved",
        specification=str(settings.specification),
        config=str(settings.config),
    )

    try:
        return run_command(args, settings)
    except (ConftoolError, OSError, UnicodeDecodeError) as e:
        logger.debug("command_failed", error=str(e), exc_info=True)
        print(e, file=sys.stderr)
        return EXIT_FAILURE
    finally:
        clear_context()


if __name__ == "__main__":
    sys.exit(main())
