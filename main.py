"""Command-line interface for the ManagePetro dashboard."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from typing import Sequence

from managepetro.api_client import APIError, OrderDirectoryClient
from managepetro.auth import authenticate
from managepetro.config import ConfigurationError, Settings, load_settings, resolve_config_path
from managepetro.resources import format_date

logger = logging.getLogger("managepetro.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="ManagePetro dashboard utilities")
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML settings file (default: MANAGEPETRO_CONFIG)",
    )
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the dashboard web server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the dashboard")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=3000,
        help="Port for the dashboard (default: 3000)",
    )
    serve_parser.add_argument(
        "--ssl-certfile",
        default=None,
        help="Path to the TLS certificate chain in PEM format",
    )
    serve_parser.add_argument(
        "--ssl-keyfile",
        default=None,
        help="Path to the TLS private key in PEM format",
    )

    subparsers.add_parser(
        "check-config", help="Validate the configuration and print the resolved settings"
    )

    orders_parser = subparsers.add_parser(
        "orders",
        help=(
            "Sign in with MANAGEPETRO_CLI_EMAIL / MANAGEPETRO_CLI_PASSWORD and list a page of orders"
        ),
    )
    orders_parser.add_argument("--page", type=int, default=1, help="Page number to fetch")

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "check-config", "orders"}

    # Global options come before the sub-command; default to "serve" when none is given.
    index = 0
    while index < len(args_list):
        if args_list[index] == "--config":
            index += 2
        elif args_list[index].startswith("--config="):
            index += 1
        else:
            break
    rest = args_list[index:]
    if not rest:
        args_list = [*args_list[:index], "serve"]
    else:
        first = rest[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in rest for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = [*args_list[:index], "serve", *rest]

    return parser.parse_args(args_list)


def _load(config: str | None) -> Settings:
    path = resolve_config_path(config) if config else None
    return load_settings(config_path=path)


def _serve(
    settings: Settings,
    *,
    host: str,
    port: int,
    ssl_certfile: str | None,
    ssl_keyfile: str | None,
) -> None:
    from managepetro.web import create_app
    import uvicorn

    if bool(ssl_certfile) ^ bool(ssl_keyfile):
        raise SystemExit("Both --ssl-certfile and --ssl-keyfile must be provided together.")

    protocol = "https" if ssl_certfile and ssl_keyfile else "http"
    logger.info("Starting ManagePetro dashboard on %s://%s:%s", protocol, host, port)
    logger.info("Using ManagePetro API at %s", settings.api_base_url)

    app = create_app(settings=settings)
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info",
        ssl_certfile=ssl_certfile,
        ssl_keyfile=ssl_keyfile,
    )


def _check_config(settings: Settings) -> None:
    for key, value in settings.describe().items():
        print(f"{key:<16} {value}")
    if settings.using_development_secret:
        print("\nWARNING: no session secret configured; the development fallback is in use.")


def _list_orders(settings: Settings, page: int) -> int:
    email = os.getenv("MANAGEPETRO_CLI_EMAIL")
    password = os.getenv("MANAGEPETRO_CLI_PASSWORD")
    if not email or not password:
        print(
            "Set MANAGEPETRO_CLI_EMAIL and MANAGEPETRO_CLI_PASSWORD before running this command."
        )
        return 1

    user = authenticate(settings, email, password)
    if user is None:
        print("Unable to sign in. Verify the configured credentials.")
        return 1

    client = OrderDirectoryClient(settings.api_base_url, user.access_token, timeout=settings.api_timeout)
    try:
        order_page = client.list_orders(page)
    except APIError as exc:
        print(exc.message)
        return 1

    pagination = order_page.pagination
    print(f"{order_page.total_count} order(s); page {pagination.page} of {pagination.last_page}")
    print(f"{'ID':>6}  {'Status':<12}  {'Fuel':>8}  {'Created':<10}  Address")
    print("-" * 80)
    for order in order_page.items:
        print(
            f"{str(order.id):>6}  {order.status:<12}  {order.fuel_amount:>8}  "
            f"{format_date(order.created_at):<10}  {order.delivery_address}"
        )
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    try:
        settings = _load(args.config)
    except ConfigurationError as exc:
        raise SystemExit(f"Configuration error: {exc}") from exc

    if args.command == "serve":
        _serve(
            settings,
            host=args.host,
            port=args.port,
            ssl_certfile=args.ssl_certfile,
            ssl_keyfile=args.ssl_keyfile,
        )
    elif args.command == "check-config":
        _check_config(settings)
    elif args.command == "orders":
        raise SystemExit(_list_orders(settings, args.page))


if __name__ == "__main__":
    main()
