"""
Command-line interface for the new-document-state transform.

Available commands:
- run: Transform a JSON-lines record stream
- validate-config: Validate transform properties
"""

import sys

from utils.logging import setup_logging

from .commands import cmd_run, cmd_validate_config, parse_properties, transform_stream
from .parser import create_parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the cdc-flatten CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, json_format=args.log_json)

    if args.command == "run":
        sys.exit(cmd_run(args))
    elif args.command == "validate-config":
        sys.exit(cmd_validate_config(args))
    else:
        parser.print_help()
        sys.exit(1)


__all__ = [
    "main",
    "cmd_run",
    "cmd_validate_config",
    "create_parser",
    "parse_properties",
    "transform_stream",
]


if __name__ == "__main__":
    main()
