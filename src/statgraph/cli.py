"""CLI interface for statgraph."""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from . import __version__
from .config import load_config

logger = logging.getLogger(__name__)


def _cmd_series(args: argparse.Namespace) -> int:
    """Extract one resource property's series for the requested scope."""
    cfg = load_config(args.config)

    from .errors import ResourcePathError, TopologyError
    from .resources import parse_resource_path
    from .series.aggregator import build_aggregator
    from .series.dataset import print_dataset, save_dataset, write_dataset
    from .series.model import Scope, TimeWindow, parse_datetime

    try:
        ref = parse_resource_path(args.resource_path)
    except ResourcePathError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    try:
        end_time = parse_datetime(args.end) if args.end else datetime.now().replace(microsecond=0)
        duration = cfg.query.default_duration_minutes if args.duration is None else args.duration
        window = TimeWindow.ending_at(end_time, duration)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    scope = Scope.parse(args.scope or cfg.query.default_scope)
    aggregator = build_aggregator(cfg)
    try:
        dataset = aggregator.dataset(ref, window, scope)
    except TopologyError as exc:
        logger.error("Error querying the management endpoint for live hosts: %s", exc)
        return 2

    if args.json:
        write_dataset(dataset, sys.stdout)
        return 0

    if args.output:
        save_dataset(dataset, args.output)
        print(f"Dataset saved to {args.output}")

    if not args.no_table:
        print_dataset(dataset)
    return 0


def _cmd_serve(args: argparse.Namespace) -> int:
    """Serve chart datasets over HTTP."""
    cfg = load_config(args.config)

    import uvicorn

    from .web import create_app

    host = args.host or cfg.server.host
    port = args.port or cfg.server.port
    print(f"statgraph serving {cfg.storage.output_path} on http://{host}:{port}")
    uvicorn.run(create_app(cfg), host=host, port=port)
    return 0


def _cmd_version(_args: argparse.Namespace) -> int:
    print(f"statgraph {__version__}")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the statgraph CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(
        prog="statgraph",
        description="Extract per-host metric series from collected statistics files",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to statgraph.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # series
    series_p = sub.add_parser("series", help="Extract a resource property's time series")
    series_p.add_argument("resource_path", help="type[/name]/property, e.g. datasource/MyDS/ActiveConnectionsCurrentCount")
    series_p.add_argument("--end", default=None, help="Window end (dd/mm/yyyy HH:MM:SS or ISO 8601); defaults to now")
    series_p.add_argument("--duration", type=int, default=None, help="Window length in minutes")
    series_p.add_argument("--scope", default=None, help="Host name, or ALL for every host")
    series_p.add_argument("--output", "-o", default=None, help="Also save the dataset as JSON to this file")
    series_p.add_argument("--json", action="store_true", help="Write the dataset as JSON to stdout")
    series_p.add_argument("--no-table", action="store_true", help="Skip rich table output")
    series_p.set_defaults(func=_cmd_series)

    # serve
    serve_p = sub.add_parser("serve", help="Serve chart datasets over HTTP")
    serve_p.add_argument("--host", default=None, help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Listen port")
    serve_p.set_defaults(func=_cmd_serve)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    code = args.func(args)
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
