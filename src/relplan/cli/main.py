#!/usr/bin/env python3
"""
relplan CLI - Main entry point.

Usage:
    relplan check [--schema schema.yaml]              # Validate a schema document
    relplan plan Post payload.json --mode create      # Resolve a payload
    relplan plan Post - --mode update --where '{"id": "p1"}' < payload.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from ..config import DEFAULT_CONFIG_PATH, PlannerConfig, load_config
from ..core.errors import RelplanError, SchemaConfigError
from ..core.registry import SchemaRegistry
from ..service.planner import EntityPlanner


def _load_settings(args: argparse.Namespace) -> tuple[PlannerConfig, SchemaRegistry]:
    """Load config (optional) and the schema registry."""
    config_path = Path(args.config)
    config = load_config(config_path) or PlannerConfig()

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.schema:
        schema_path = Path(args.schema)
    else:
        schema_path = config.schema_path(config_path.parent)
    if schema_path is None:
        raise SchemaConfigError([
            f"No schema given. Pass --schema or set 'schema' in {config_path}"
        ])

    return config, SchemaRegistry.from_file(schema_path)


def _read_payload(source: str) -> object:
    if source == "-":
        return json.load(sys.stdin)
    return json.loads(Path(source).read_text())


def cmd_check(args: argparse.Namespace) -> int:
    """Validate a schema document and print a summary."""
    _, registry = _load_settings(args)

    for name in registry.entity_names:
        entity = registry.get_entity(name)
        print(f"{name} (keys: {', '.join(entity.keys)})")
        print(f"  fields: {', '.join(sorted(entity.fields))}")
        if entity.unique_fields:
            print(f"  unique: {', '.join(sorted(entity.unique_fields))}")
        for rel in entity.relations:
            arity = "[]" if rel.is_list else ""
            print(f"  {rel.name} -> {rel.target}{arity}")

    print(f"\nSchema OK: {len(registry)} entities")
    return 0


def cmd_plan(args: argparse.Namespace) -> int:
    """Resolve a payload and print the store arguments."""
    config, registry = _load_settings(args)
    planner = EntityPlanner(registry, args.entity, config)
    payload = _read_payload(args.payload)

    if args.mode == "create":
        if isinstance(payload, list):
            result = planner.plan_create_many(payload)
        else:
            result = planner.plan_create_one(payload)
    else:
        where = json.loads(args.where) if args.where else {}
        result = planner.plan_update_one(where, payload)

    print(json.dumps(result, indent=args.indent, default=str))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="relplan",
        description="relplan - compile nested write payloads into relation mutations"
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--schema", "-s", help="Schema document (.yaml, .yml or .json)")
    common.add_argument(
        "--config", "-c",
        default=DEFAULT_CONFIG_PATH,
        help=f"Config file (default: {DEFAULT_CONFIG_PATH})",
    )

    # check
    subparsers.add_parser("check", parents=[common], help="Validate a schema document")

    # plan
    plan_parser = subparsers.add_parser("plan", parents=[common], help="Resolve a write payload")
    plan_parser.add_argument("entity", help="Root entity name")
    plan_parser.add_argument("payload", help="JSON payload file, or - for stdin")
    plan_parser.add_argument(
        "--mode", "-m",
        choices=["create", "update"],
        default="create",
        help="Calling convention (default: create)",
    )
    plan_parser.add_argument("--where", "-w", help="JSON filter for update mode")
    plan_parser.add_argument("--indent", type=int, default=2, help="JSON indent")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    commands = {
        "check": cmd_check,
        "plan": cmd_plan,
    }

    handler = commands.get(parsed.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(parsed)
    except RelplanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
