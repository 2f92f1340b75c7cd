"""
CLI command implementations.

- run: transform a JSON-lines stream of records
- validate-config: check transform properties
"""

import argparse
import contextlib
import json
import logging
import sys
from collections.abc import Iterable
from typing import IO, Any

from utils.metrics import MetricsPublisher
from utils.tracing import initialize_tracing, shutdown_tracing

from ..config import FlattenConfig
from ..errors import ConfigurationError, FlattenError
from ..records import record_from_dict, record_to_dict
from ..transform import ExtractNewDocumentState

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_RECORD_FAILED = 1
EXIT_CONFIG_ERROR = 2


def parse_properties(lines: Iterable[str]) -> dict[str, str]:
    """
    Parse Java-style properties lines.

    Blank lines and lines starting with '#' or '!' are ignored; keys and
    values are separated by the first '=' or ':'.

    Raises:
        ConfigurationError: If a line has no separator
    """
    properties = {}
    for number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line[0] in "#!":
            continue
        positions = [p for p in (line.find("="), line.find(":")) if p != -1]
        if not positions:
            raise ConfigurationError(f"Line {number}: expected key=value, got {line!r}")
        split_at = min(positions)
        properties[line[:split_at].strip()] = line[split_at + 1:].strip()
    return properties


def load_config(args: argparse.Namespace) -> FlattenConfig:
    """
    Build the transform configuration from --config and --set options.

    Raises:
        ConfigurationError: On unreadable files or invalid properties
    """
    properties: dict[str, Any] = {}

    if args.config:
        try:
            with open(args.config, encoding="utf-8") as f:
                properties.update(parse_properties(f))
        except OSError as e:
            raise ConfigurationError(f"Cannot read {args.config}: {e}") from e

    properties.update(parse_properties(args.overrides))
    return FlattenConfig.from_properties(properties)


def transform_stream(
    transform: ExtractNewDocumentState,
    source: IO[str],
    sink: IO[str],
    continue_on_error: bool = False,
) -> tuple[int, int, int]:
    """
    Transform every JSON record in source and write results to sink.

    Args:
        transform: Configured transform
        source: Text stream with one JSON record per line
        sink: Text stream receiving one JSON record per emitted record
        continue_on_error: Skip failing records instead of stopping

    Returns:
        Tuple of (records read, records written, records failed)
    """
    read = written = failed = 0

    for number, line in enumerate(source, start=1):
        if not line.strip():
            continue
        read += 1

        try:
            record = record_from_dict(json.loads(line))
            result = transform.apply(record)
            if result is not None:
                output = json.dumps(record_to_dict(result), default=str)
        except (FlattenError, ValueError, KeyError, TypeError, AttributeError) as e:
            failed += 1
            logger.error(f"Record on line {number} failed: {type(e).__name__}: {e}")
            if not continue_on_error:
                break
            continue

        if result is not None:
            sink.write(output + "\n")
            written += 1

    return read, written, failed


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the transform over a record stream

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    try:
        config = load_config(args)
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return EXIT_CONFIG_ERROR

    if args.metrics_port:
        MetricsPublisher(port=args.metrics_port).start()

    if args.otlp_endpoint:
        initialize_tracing(service_name="cdc-flatten", otlp_endpoint=args.otlp_endpoint)

    transform = ExtractNewDocumentState(config)

    with contextlib.ExitStack() as stack:
        source = sys.stdin
        if args.input:
            source = stack.enter_context(open(args.input, encoding="utf-8"))
        sink = sys.stdout
        if args.output:
            sink = stack.enter_context(open(args.output, "w", encoding="utf-8"))

        try:
            read, written, failed = transform_stream(
                transform, source, sink, continue_on_error=args.continue_on_error
            )
        finally:
            transform.close()
            shutdown_tracing()

    logger.info(f"Processed {read} record(s): {written} written, {failed} failed")
    return EXIT_RECORD_FAILED if failed and not args.continue_on_error else EXIT_OK


def cmd_validate_config(args: argparse.Namespace) -> int:
    """
    Validate transform properties and print the effective configuration

    Args:
        args: Parsed command-line arguments

    Returns:
        Process exit code
    """
    try:
        config = load_config(args)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    print(json.dumps({
        "array.encoding": config.array_encoding.value,
        "flatten.struct": True,
        "flatten.struct.delimiter": config.delimiter,
        "delete.handling.mode": config.delete_handling.value,
        "drop.tombstones": config.drop_tombstones,
        "operation.header": config.operation_header,
        "add.source.fields": ",".join(config.source_fields),
    }, indent=2))
    return EXIT_OK
