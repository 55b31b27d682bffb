"""
GeoHunt CLI entrypoint.

Operator tooling for running an event without the web client:
- `serve`: run the API under uvicorn
- `seed`: load a seed JSON file into the configured JSON store
- `nearby`: list questions within range of a coordinate (same radius as the game)
- `leaderboard`: print team standings
"""

from __future__ import annotations

import argparse
import json
from typing import Any

from geohunt.catalog.loader import apply_seed, load_seed
from geohunt.config.settings import get_settings
from geohunt.core.env import resolve_project_path
from geohunt.core.geo import GeoPoint
from geohunt.core.logging import configure_logging
from geohunt.engine.service import build_service, build_store, leaderboard
from geohunt.stores.json_file import JsonFileStore


def _cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run(
        "geohunt.api.app:create_app",
        factory=True,
        host=str(args.host),
        port=int(args.port),
        log_config=None,
    )
    return 0


def _cmd_seed(args: argparse.Namespace) -> int:
    settings = get_settings()
    seed = load_seed(args.path, default_points=settings.game.default_points)
    store = JsonFileStore(
        resolve_project_path(args.store or settings.store.path),
        timeout_seconds=settings.store.timeout_seconds,
    )
    apply_seed(store, seed)
    print(f"Seeded {len(seed.questions)} question(s) and {len(seed.teams)} team(s) into {store.base_dir}")
    return 0


def _cmd_nearby(args: argparse.Namespace) -> int:
    settings = get_settings()
    service = build_service(settings)
    service.start()
    targets = service.finder.find_nearby(GeoPoint(lat=float(args.lat), lng=float(args.lng)), args.radius_m)

    if args.json:
        print(json.dumps({"questions": [t.model_dump() for t in targets]}, ensure_ascii=False, indent=2))
        return 0

    radius = args.radius_m if args.radius_m is not None else service.proximity.radius_m
    print(f"{len(targets)} question(s) within {radius:g}m of ({args.lat}, {args.lng}):")
    origin = GeoPoint(lat=float(args.lat), lng=float(args.lng))
    for t in targets:
        d = service.proximity.distance_m(origin, GeoPoint(lat=t.lat, lng=t.lng))
        print(f"  {t.id}  {d:7.1f}m  {t.title or t.question}")
    return 0


def _cmd_leaderboard(args: argparse.Namespace) -> int:
    settings = get_settings()
    rows = leaderboard(build_store(settings))
    if args.json:
        print(json.dumps({"teams": rows}, ensure_ascii=False, indent=2))
        return 0
    for i, row in enumerate(rows, start=1):
        print(f"{i:>3}. {row['name']:<30} {row['points']:>6}  ({row['solved']} solved)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the GeoHunt CLI."""
    parser = argparse.ArgumentParser(prog="geohunt")
    sub = parser.add_subparsers(dest="command", required=True)

    srv = sub.add_parser("serve", help="Run the HTTP API.")
    srv.add_argument("--host", default="0.0.0.0")
    srv.add_argument("--port", type=int, default=3000)
    srv.set_defaults(func=_cmd_serve)

    seed = sub.add_parser("seed", help="Write questions and teams from a seed JSON file into the JSON store.")
    seed.add_argument("path", help="Seed file: {\"questions\": [...], \"teams\": [...]}")
    seed.add_argument("--store", default=None, help="Store directory (defaults to store.path).")
    seed.set_defaults(func=_cmd_seed)

    near = sub.add_parser("nearby", help="List questions within range of a coordinate.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lng", required=True, type=float)
    near.add_argument("--radius-m", dest="radius_m", type=float, default=None, help="Defaults to game.radius_m")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    lb = sub.add_parser("leaderboard", help="Print team standings.")
    lb.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    lb.set_defaults(func=_cmd_leaderboard)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m geohunt.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command != "serve":
        configure_logging()
    func: Any = getattr(args, "func")
    return int(func(args))


if __name__ == "__main__":
    raise SystemExit(main())
