"""Command-line entry point for paramgen."""

import argparse
import sys

from .cli import add_document_subparsers
from .codegen.cli_integration import (
    add_codegen_args,
    create_codegen_subparser,
    create_resume_subparser,
    handle_codegen_command,
)
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser with every subcommand."""
    parser = argparse.ArgumentParser(
        prog="paramgen",
        description="Generate Unity C# classes and assets from parameter documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  paramgen new Stats.json
  paramgen edit Stats.json add speed float 3.5
  paramgen generate Stats.json -o Assets/Scripts/Stats.cs
  paramgen interactive Stats.json
        """.strip(),
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Console log level (default: WARNING)",
    )
    parser.add_argument("--log-file", help="Also write DEBUG logs to this file")
    add_codegen_args(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    add_document_subparsers(subparsers)
    create_codegen_subparser(subparsers)
    create_resume_subparser(subparsers)

    return parser


def main(argv=None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.log_level, args.log_file)
    logger.debug("Arguments: %s", args)

    if args.list_languages or args.language_info:
        return handle_codegen_command(args)

    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1

    try:
        return func(args)
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
