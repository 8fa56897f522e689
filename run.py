"""CLI entrypoint."""
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from komwolf import config
from komwolf.geo import InvalidBoundingBoxError, parse_bounds
from komwolf.http import RequestMetrics
from komwolf.pipeline import run
from komwolf.reporting import render_results, render_summary

logger = logging.getLogger("komwolf.cli")


class MissingTokenError(RuntimeError):
    pass


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    load_dotenv(dotenv_path=env_path, override=False)


def find_token(token_dir: Optional[Path] = None) -> str:
    """Find the Strava access token in the environment, then in a token file."""
    val = (os.environ.get(config.TOKEN_ENV_VAR) or "").strip()
    if val:
        return val
    token_path = Path(token_dir or Path.cwd()) / config.TOKEN_FILENAME
    if token_path.is_file():
        contents = token_path.read_text(encoding="utf-8").strip()
        if contents:
            return contents
    raise MissingTokenError(
        f"Could not find a Strava access token in ${config.TOKEN_ENV_VAR} or ./{config.TOKEN_FILENAME}"
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find and rank Strava segments in an area")
    parser.add_argument(
        "-b",
        "--bounds",
        default=config.DEFAULT_BOUNDS,
        help="Comma-separated south west north east bounds",
    )
    parser.add_argument(
        "-i",
        "--iterations",
        type=int,
        default=config.DEFAULT_DEPTH,
        help="Number of bisection iterations",
    )
    parser.add_argument("-m", "--metric", action="store_true", help="Use km for distance")
    parser.add_argument(
        "-d",
        "--details",
        action="store_true",
        help="Print leader pace on each found segment (may be slow)",
    )
    parser.add_argument(
        "-t",
        "--type",
        dest="activity_type",
        default=config.DEFAULT_ACTIVITY_TYPE,
        help="Activity type, either 'running' or 'riding'",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every explored box")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_env()
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        box = parse_bounds(args.bounds)
    except InvalidBoundingBoxError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.iterations < 0:
        print("Error: --iterations must be >= 0", file=sys.stderr)
        return 1

    try:
        access_token = find_token()
    except MissingTokenError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    unit = config.distance_unit(args.metric)
    metrics = RequestMetrics()
    try:
        result = run(
            access_token=access_token,
            box=box,
            activity_type=args.activity_type,
            depth=args.iterations,
            with_leaders=args.details,
            metrics=metrics,
        )
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for line in render_results(result.segments, result.leaders, unit):
        print(line)
    for line in render_summary(result.summary):
        logger.info(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
