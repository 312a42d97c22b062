#!/usr/bin/env python3
"""Command-line interface for callermatch.

This module provides the ``callermatch`` command for working with filter
configurations outside a running application:
- check: load a configuration and build every filter
- evaluate: dry-run one filter against a synthetic call stack

Example:
    >>> from callermatch.cli import main
    >>> main(["check", "logging.yaml"])
    0
"""

import argparse
import sys
from typing import List, Optional

from callermatch.core.constants import CALLERMATCH_VERSION, ConfigKey, FrameInfo
from callermatch.core.validators import ConfigurationError
from callermatch.infrastructure.config_manager import ConfigManager
from callermatch.infrastructure.logger import Logger, get_logger, set_global_logger
from callermatch.integration.frames import synthetic_inspector

DESCRIPTION = "callermatch - accept or reject log events by their call frames"

# Stands for a frame past the top of the stack
UNAVAILABLE_FRAME = "-"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
    """
    parser = argparse.ArgumentParser(
        prog="callermatch",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate every filter in a YAML configuration
  callermatch check logging.yaml

  # Validate one filter from a Log4perl properties file
  callermatch check log4perl.conf --filter MyFilter

  # Would BillingOnly accept this event? Frames listed from depth 0 upward
  callermatch evaluate logging.yaml --filter BillingOnly \\
      --message "charge failed" \\
      --frame app.util:retry --frame billing.invoices:Invoice.charge
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {CALLERMATCH_VERSION}",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Build filters and report their settings")
    check.add_argument("config", metavar="FILE", help="Configuration file (YAML or properties)")
    check.add_argument("-f", "--filter", metavar="NAME", help="Only check this filter")

    evaluate = subparsers.add_parser("evaluate", help="Dry-run a filter decision")
    evaluate.add_argument("config", metavar="FILE", help="Configuration file (YAML or properties)")
    evaluate.add_argument("-f", "--filter", metavar="NAME", required=True, help="Filter to run")
    evaluate.add_argument("-m", "--message", default="", help="Rendered log message")
    evaluate.add_argument(
        "--frame",
        metavar="MODULE:FUNC",
        action="append",
        dest="frames",
        default=[],
        help=f"Call frame, innermost first; '{UNAVAILABLE_FRAME}' for a missing frame",
    )

    return parser.parse_args(args)


def parse_frame(spec: str) -> Optional[FrameInfo]:
    """
    Parse a --frame argument.

    Args:
        spec: "module:function", or "-" for an unavailable frame

    Returns:
        FrameInfo with subroutine "module.function", or None

    Raises:
        CLIError: If the spec has no module part
    """
    if spec == UNAVAILABLE_FRAME:
        return None

    module, _, function = spec.partition(":")
    if not module:
        raise CLIError(f"Invalid frame '{spec}': expected MODULE:FUNC")

    subroutine = f"{module}.{function}" if function else module
    return FrameInfo(module=module, subroutine=subroutine)


def setup_logging(args: argparse.Namespace, config: ConfigManager) -> Logger:
    """
    Install the CLI's console (and optional file) handlers on the package logger.

    Args:
        args: Parsed arguments namespace
        config: Loaded configuration

    Returns:
        Configured package logger
    """
    level = "DEBUG" if args.debug else config.get(ConfigKey.LOGGING_LEVEL, "INFO")
    handlers = [Logger.create_console_handler()]

    try:
        logger = Logger(level=level, handlers=handlers)
    except KeyError:
        raise CLIError(f"Invalid log level in configuration: {level}")

    log_file = config.get(ConfigKey.LOGGING_FILE)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def run_check(args: argparse.Namespace, config: ConfigManager) -> int:
    """
    Build filters and print one summary line per filter.

    Returns:
        Exit code
    """
    if args.filter:
        predicates = {args.filter: config.build_filter(args.filter)}
    else:
        predicates = config.build_filters()

    if not predicates:
        print("No filters configured")
        return 0

    for name, predicate in predicates.items():
        print(f"{name}: {predicate.describe()}")

    get_logger().info("Checked filters", count=len(predicates))
    return 0


def run_evaluate(args: argparse.Namespace, config: ConfigManager) -> int:
    """
    Evaluate one filter against the frames given on the command line.

    Returns:
        Exit code
    """
    predicate = config.build_filter(args.filter)
    inspector = synthetic_inspector(parse_frame(spec) for spec in args.frames)

    depth = predicate.matching_frame(args.message, inspector)
    decision = predicate.evaluate(args.message, inspector)

    where = f"matched at frame {depth}" if depth is not None else "no frame matched"
    print(f"{'ACCEPT' if decision else 'REJECT'} ({where})")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code
    """
    try:
        args = parse_arguments(argv)

        config = ConfigManager()
        config.load_file(args.config)

        setup_logging(args, config)

        if args.command == "check":
            return run_check(args, config)
        return run_evaluate(args, config)

    except (CLIError, ConfigurationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
