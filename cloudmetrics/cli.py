"""
cloudmetrics CLI — entry point.

Usage:
    cloudmetrics serve --listen 127.0.0.1:8989 --loglevel debug
    cloudmetrics version
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import replace

from cloudmetrics.config import LOG_LEVELS, get_config


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="cloudmetrics",
        description="cloudmetrics — tenant credential and exporter API over Hasura.",
    )
    parser.add_argument("--version", action="store_true", help="Show version and exit")

    subparsers = parser.add_subparsers(dest="command")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--listen", help="HOST:PORT to bind (default: $CLOUDMETRICS_LISTEN)")
    serve_parser.add_argument(
        "--loglevel", help="error|warning|info|debug (default: $CLOUDMETRICS_LOG_LEVEL)"
    )

    # version
    subparsers.add_parser("version", help="Show version")

    args = parser.parse_args(argv)

    if args.version or args.command == "version":
        from cloudmetrics import __version__

        print(f"cloudmetrics {__version__}")
        return 0

    if args.command == "serve":
        return _cmd_serve(args)

    parser.print_help()
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    cfg = get_config()
    cfg = replace(
        cfg,
        listen=args.listen or cfg.listen,
        log_level=(args.loglevel or cfg.log_level).lower(),
    )

    level = cfg.log_level
    if level not in LOG_LEVELS:
        print(f"Error: bad --loglevel: {level} (expected {'|'.join(LOG_LEVELS)})")
        return 1

    try:
        host, port = cfg.host, cfg.port
    except ValueError as e:
        print(f"Error: bad --listen: {e}")
        return 1

    if not cfg.graphql.admin_secret:
        print("Error: missing required HASURA_GRAPHQL_ADMIN_SECRET")
        return 1

    try:
        import uvicorn
    except ImportError:
        print("Error: uvicorn is required. Install with: pip install cloudmetrics")
        return 1

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger(__name__).info("listen address: %s:%d", host, port)

    from cloudmetrics.api.app import create_app

    uvicorn.run(create_app(cfg), host=host, port=port, log_level=level)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
