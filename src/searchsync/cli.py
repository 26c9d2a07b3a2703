"""CLI entry point — Inspect and query the configured search index."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from searchsync.adapters.base.adapter import IndexBackend
from searchsync.adapters.base.exceptions import AdapterError
from searchsync.adapters.base.registry import BackendNotFoundError, BackendRegistry
from searchsync.bootstrap import build_gateway, create_backend, resolve_entity_type
from searchsync.config.settings import Settings
from searchsync.exceptions import SearchSyncError, SearchUnavailable
from searchsync.observability.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="searchsync",
        description="searchsync — Entity search index tooling",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--backend",
        "-b",
        type=str,
        default=None,
        help="Search backend name (overrides config)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"searchsync {_get_version()}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("health", help="Check the search backend")

    get = commands.add_parser("get", help="Fetch one indexed entity by id")
    get.add_argument("entity", help="Entity name, e.g. region or opportunity")
    get.add_argument("id", type=int, help="Entity id")

    search = commands.add_parser("search", help="Free-text search over one entity index")
    search.add_argument("entity", help="Entity name, e.g. region or opportunity")
    search.add_argument("query", help="Query text")
    search.add_argument("--limit", "-n", type=int, default=None, help="Maximum number of results")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()

    # Apply CLI overrides
    if args.backend:
        settings.search.backend = args.backend
    if args.log_level:
        settings.observability.log_level = args.log_level

    setup_logging(settings.observability)

    try:
        exit_code = asyncio.run(_run(args, settings))
    except (SearchSyncError, BackendNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(exit_code)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    registry = BackendRegistry.with_builtins()
    backend = await _connect(settings, registry)
    try:
        if args.command == "health":
            health = (await registry.health_check_all())[settings.search.backend]
            _emit(health.model_dump())
            return 0 if health.status != "unhealthy" else 2

        gateway = build_gateway(backend, resolve_entity_type(args.entity), settings)
        if args.command == "get":
            entity = await gateway.get(args.id)
            if entity is None:
                print(f"{args.entity} #{args.id} is not indexed", file=sys.stderr)
                return 1
            print(gateway.codec.map_to_string(entity))
            return 0

        for entity in await gateway.query(args.query, limit=args.limit):
            print(gateway.codec.map_to_string(entity))
        return 0
    finally:
        await registry.shutdown_all()


async def _connect(settings: Settings, registry: BackendRegistry) -> IndexBackend:
    try:
        return await create_backend(settings, registry)
    except AdapterError as e:
        raise SearchUnavailable(str(e), operation="connect") from e


def _emit(data: dict[str, Any]) -> None:
    print(json.dumps(data, ensure_ascii=False))


def _get_version() -> str:
    """Get the package version."""
    try:
        from searchsync import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
