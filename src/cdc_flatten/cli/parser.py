"""
Command-line argument parser configuration.
"""

import argparse
import os


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="cdc-flatten",
        description="Flatten CDC envelopes from JSON-lines record streams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Flatten a captured topic dump with default settings
  cdc-flatten run --input orders.jsonl --output orders-flat.jsonl

  # Use a properties file and override a single option
  cdc-flatten run --config flatten.properties --set delete.handling.mode=rewrite < in.jsonl

  # Encode arrays as documents and copy source metadata
  cdc-flatten run --set array.encoding=document --set add.source.fields=rs,collection

  # Check a configuration file without processing records
  cdc-flatten validate-config --config flatten.properties
        """,
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit logs as JSON lines",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_config_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--config",
            help="Transform properties file (key=value per line)",
        )
        sub.add_argument(
            "--set",
            dest="overrides",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Override a single property (repeatable)",
        )

    # ========== Run command ==========
    run_parser = subparsers.add_parser("run", help="Transform a JSON-lines record stream")
    add_config_options(run_parser)
    run_parser.add_argument(
        "--input",
        help="Input file with one JSON record per line (default: stdin)",
    )
    run_parser.add_argument(
        "--output",
        help="Output file (default: stdout)",
    )
    run_parser.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Skip records that fail instead of stopping",
    )
    run_parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while running",
    )
    run_parser.add_argument(
        "--otlp-endpoint",
        default=os.getenv("OTLP_ENDPOINT"),
        help="Export trace spans to this OTLP collector (default: OTLP_ENDPOINT env var)",
    )

    # ========== Validate-config command ==========
    validate_parser = subparsers.add_parser(
        "validate-config", help="Validate transform properties"
    )
    add_config_options(validate_parser)

    return parser
