"""Command-line interface for the EA client API."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence

from ea_client.config import Settings
from ea_client.containers import AppContainer, build_container
from ea_client.domain.collections import CollectionSchema

logger = logging.getLogger("ea_client.main")

_KNOWN_COMMANDS = {"serve", "stats"}


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="EA client API utilities")
    subparsers = parser.add_subparsers(dest="command")
    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API server")
    serve_parser.add_argument(
        "--host", default=None, help="Bind address (default: HOST or 0.0.0.0)"
    )
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Listen port (default: PORT or 3001)"
    )

    subparsers.add_parser(
        "stats", help="Print the stored accounts and users with their counts"
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    if not args_list:
        args_list = ["serve"]
    elif args_list[0] not in _KNOWN_COMMANDS and args_list[0] not in ("-h", "--help"):
        args_list = ["serve", *args_list]
    return parser.parse_args(args_list)


def _serve(container: AppContainer, host: str, port: int) -> None:
    import uvicorn

    from ea_client.api.app import create_app

    logger.info(
        "Starting API on http://%s:%s (%s backend)",
        host,
        port,
        container.settings.storage_backend,
    )
    uvicorn.run(
        create_app(container),
        host=host,
        port=port,
        log_level=container.settings.log_level.lower(),
    )


def _print_stats(container: AppContainer) -> None:
    for store in (container.auth_store, container.user_store):
        schema: CollectionSchema = store.schema
        print(f"{schema.name}:")
        rows = store.find_all()
        if not rows:
            print("  (no records)")
        for row in rows:
            visible = {
                key: value for key, value in row.items() if key != "password"
            }
            print("  " + ", ".join(f"{key}={value}" for key, value in visible.items()))
    print("Counts:")
    print(f"  auth_users: {container.auth_store.count()}")
    print(f"  users: {container.user_store.count()}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
    )
    args = _parse_args(argv)
    settings = Settings()
    container = build_container(settings)

    if args.command == "stats":
        _print_stats(container)
        return
    _serve(
        container,
        host=args.host or settings.host,
        port=args.port or settings.port,
    )


if __name__ == "__main__":
    main()
