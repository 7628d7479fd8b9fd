from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

import requests

from ffhistory.constants import SCHEMA_VERSION
from ffhistory.errors import HistoryError
from ffhistory.history.collect import build_league_history
from ffhistory.history.config import HistoryConfig
from ffhistory.history.formatters import format_json, summary_lines


def _pretty(data: Any) -> str:
    return json.dumps(data, indent=2, sort_keys=True)


def _print_progress(percent: int, message: str) -> None:
    print(f"[league_history] {percent:3d}% {message}")


def generate_league_history_report(
    *,
    config: HistoryConfig,
    out_dir: str = "reports/history",
    json_pretty: bool = True,
    verbose: bool = False,
    dry_run: bool = False,
) -> dict:
    if not config.league_id:
        raise ValueError("No league id given (use --league-id or SLEEPER_LEAGUE_ID)")
    history = build_league_history(
        config.league_id,
        config=config,
        progress_callback=_print_progress if verbose else None,
    )
    content = format_json(history, SCHEMA_VERSION, pretty=json_pretty)
    dest_dir = Path(out_dir) / config.league_id
    path = dest_dir / "history.json"
    if not dry_run:
        dest_dir.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    if verbose:
        for line in summary_lines(history):
            print(f"[league_history] {line}")
    meta = history.league_metadata
    return {
        "path": str(path),
        "bytes": len(content),
        "written": not dry_run,
        "meta": {
            "schema_version": SCHEMA_VERSION,
            "league_id": config.league_id,
            "seasons": list(history.season_stats),
            "linked_league_ids": list(meta.linked_league_ids),
        },
        "entries": {
            "records": len(history.records),
            "users": len(history.all_time_stats),
        },
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Generate a multi-season Sleeper league history (JSON)"
    )
    parser.add_argument(
        "--league-id", default=None, help="Any league_id in the chain (default from env)"
    )
    parser.add_argument("--sport", default=None, help="Sport key (default nfl)")
    parser.add_argument("--config", default=None, help="YAML configuration file")
    parser.add_argument("--out-dir", default="reports/history", help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Debug logging and progress")
    parser.add_argument(
        "--dry-run", action="store_true", help="Build history but do not write files"
    )
    parser.set_defaults(json_pretty=True)
    parser.add_argument(
        "--json-compact",
        dest="json_pretty",
        action="store_false",
        help="Use compact JSON (no whitespace)",
    )
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = HistoryConfig.load(args.config)
        if args.league_id:
            config.league_id = args.league_id
        if args.sport:
            config.sport = args.sport
        summary = generate_league_history_report(
            config=config,
            out_dir=args.out_dir,
            json_pretty=args.json_pretty,
            verbose=args.verbose,
            dry_run=args.dry_run,
        )
        print(_pretty(summary))
        if summary["written"]:
            print(f"Wrote [json]: {summary['path']}")
        return 0
    except requests.HTTPError as e:  # pragma: no cover
        print(f"HTTPError: {e}", file=sys.stderr)
        return 1
    except HistoryError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
