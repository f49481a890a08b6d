import argparse
import sys
from typing import Sequence

from nt_leaderboard.commands.build_views import run_build_views
from nt_leaderboard.commands.rotate_snapshot import run_rotate_snapshot
from nt_leaderboard.config import SPEED_METHODS
from nt_leaderboard.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nt-leaderboard build")
    parser.add_argument(
        "--source-root",
        help="Directory or base URL holding the snapshot files. Defaults to the repo data/ dir.",
    )
    parser.add_argument("--out", help="Output views JSON path. Defaults to views.json.")
    parser.add_argument(
        "--anomaly-threshold",
        type=int,
        help="Race deltas at or above this value are treated as glitched (default 2600).",
    )
    parser.add_argument(
        "--speed-method",
        choices=SPEED_METHODS,
        help="How event-period WPM is derived (default weighted).",
    )
    return parser


def build_rotate_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="nt-leaderboard rotate")
    parser.add_argument("--source-url", help="Remote endpoint returning a JSON array of racers.")
    parser.add_argument(
        "--dir",
        help="Directory holding sample_data.json / sample_data_prev.json. Defaults to the repo data/ dir.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging()
    argv_list = list(argv) if argv is not None else sys.argv[1:]
    if argv_list and argv_list[0] == "rotate":
        parser = build_rotate_parser()
        args = parser.parse_args(argv_list[1:])
        return int(run_rotate_snapshot(args) or 0)
    if argv_list and argv_list[0] == "build":
        argv_list = argv_list[1:]
    parser = build_parser()
    args = parser.parse_args(argv_list)
    return int(run_build_views(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
