"""Command line entry point: ``shapecheck``.

    shapecheck validate shapes.yaml user payload.json [more.json ...]
    shapecheck schema shapes.yaml user
    shapecheck list shapes.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from .exceptions import ManifestLoadError
from .json_engine import validate_named
from .manifest_loader import load_payload, load_shape_manifest
from .registry import ShapeRegistry
from .schema_export import to_json_schema

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "SHAPECHECK_LOG_LEVEL"

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_level(value: str) -> str:
    level = value.upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError(
            f"invalid log level '{value}' (choose from {', '.join(LOG_LEVELS)})"
        )
    return level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shapecheck",
        description="Check JSON/YAML documents against declarative shapes.",
    )
    parser.add_argument(
        "--log-level",
        type=_log_level,
        default=os.getenv(LOG_LEVEL_ENV_VAR, "WARNING"),
        help=f"Logging level (default: ${LOG_LEVEL_ENV_VAR} or WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    validate_cmd = sub.add_parser("validate", help="Check payload files against a shape")
    validate_cmd.add_argument("manifest", help="Shape manifest (YAML or JSON)")
    validate_cmd.add_argument("shape", help="Name of the shape to check against")
    validate_cmd.add_argument("payloads", nargs="+", help="Payload files (YAML or JSON)")

    schema_cmd = sub.add_parser("schema", help="Print the JSON Schema for a shape")
    schema_cmd.add_argument("manifest")
    schema_cmd.add_argument("shape")

    list_cmd = sub.add_parser("list", help="List the shapes in a manifest")
    list_cmd.add_argument("manifest")
    return parser


def _has_shape(registry: ShapeRegistry, shape: str) -> bool:
    if shape in registry:
        return True
    print(f"Unknown shape '{shape}'. Available shapes: {registry.names()}", file=sys.stderr)
    return False


def _cmd_validate(args: argparse.Namespace) -> int:
    registry = load_shape_manifest(args.manifest)
    if not _has_shape(registry, args.shape):
        return EXIT_ERROR
    exit_code = EXIT_OK
    for payload_path in args.payloads:
        payload = load_payload(payload_path)
        _, err = validate_named(registry, args.shape, payload)
        if err is None:
            print(f"{payload_path}: ok")
            continue
        logger.debug("%s rejected: %s", payload_path, err.message)
        print(f"{payload_path}: invalid ({err.message})")
        exit_code = EXIT_INVALID
    return exit_code


def _cmd_schema(args: argparse.Namespace) -> int:
    registry = load_shape_manifest(args.manifest)
    if not _has_shape(registry, args.shape):
        return EXIT_ERROR
    schema = to_json_schema(registry.get(args.shape), title=args.shape)
    print(json.dumps(schema, indent=2))
    return EXIT_OK


def _cmd_list(args: argparse.Namespace) -> int:
    registry = load_shape_manifest(args.manifest)
    for name in registry.names():
        print(name)
    return EXIT_OK


COMMANDS = {
    "validate": _cmd_validate,
    "schema": _cmd_schema,
    "list": _cmd_list,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return COMMANDS[args.command](args)
    except ManifestLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
