"""Command line argument parser for mini telnet.

This module builds the argument parser from the grouped argument table in
the constants module and applies the requested log verbosity.
"""

from __future__ import annotations

from argparse import (
    ArgumentParser,
    Namespace as Arguments,
    RawDescriptionHelpFormatter as Formatter,
)
from sys import argv as sys_argv, exit as sys_exit

from mini_telnet.constants import (
    CLI_ARGUMENTS,
    CLI_HELP_DESCRIPTION,
    CLI_HELP_EPILOGUE,
    CLI_HELP_NAME,
)

from .console import configure_logging


def build_parser() -> ArgumentParser:
    """Create the argument parser with all argument groups.

    Returns:
        Configured ArgumentParser instance
    """
    parser = ArgumentParser(
        description=CLI_HELP_DESCRIPTION,
        epilog=CLI_HELP_EPILOGUE,
        prog=CLI_HELP_NAME,
        formatter_class=Formatter,
    )
    for category_name, args in CLI_ARGUMENTS.items():
        category = parser.add_argument_group(category_name)
        for flags, kwargs in args:
            category.add_argument(*flags, **kwargs)
    return parser


def parse_args(argv: list[str] | None = None) -> Arguments:
    """Parse and validate command line arguments.

    Args:
        argv: Arguments to parse, defaults to the process arguments

    Returns:
        The parsed arguments
    """
    if argv is None:
        argv = sys_argv[1:]
    parser = build_parser()

    # Show help rather than an error when run without arguments
    if not argv:
        parser.print_help()
        sys_exit(0)

    parsed_args = parser.parse_args(argv)
    if not parsed_args.host and parsed_args.input is None:
        parser.error("at least one --host or an --input inventory is required")
    if parsed_args.concurrency < 1:
        parser.error("--concurrency must be at least 1")

    configure_logging(parsed_args.verbose)
    return parsed_args
