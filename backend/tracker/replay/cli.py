"""Print the shanten trace of an mjai event log.

Usage:
    uv run shanten-replay path/to/log.jsonl
    uv run shanten-replay path/to/log.jsonl --seat 0 --lenient
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from shared.logging import setup_logging
from tracker.logic.tiles import tiles_to_string
from tracker.replay.loader import ReplayLoadError, load_events_from_file
from tracker.replay.models import ReplayError
from tracker.replay.runner import run_replay
from tracker.settings import TrackerSettings

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tracker.replay.models import ReplayTrace


def _print_trace(trace: ReplayTrace) -> None:
    print(f"Events: {trace.num_events}")
    print(f"Decision points: {len(trace.steps)}")
    if trace.skipped:
        skipped = ", ".join(f"{index}@seat{actor}" for index, actor in trace.skipped)
        print(f"Skipped events: {skipped}")
    print()
    print(f"{'event':>6}  {'seat':>4}  {'type':<6}  {'shanten':>7}  hand")
    for step in trace.steps:
        hand = tiles_to_string(step.snapshot.tehai)
        melds = " ".join(f"[{tiles_to_string(fuuro.tiles)}]" for fuuro in step.snapshot.fuuros)
        print(f"{step.index:>6}  {step.actor:>4}  {step.event_type:<6}  {step.shanten:>7}  {hand} {melds}".rstrip())


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Replay an mjai log and report shanten per decision point")
    parser.add_argument("log", type=Path, help="path to an mjai event log (one JSON object per line)")
    parser.add_argument(
        "--seat",
        type=int,
        action="append",
        choices=range(4),
        help="seat to track; repeat for several (default: all four)",
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="log and skip inconsistent events instead of aborting",
    )
    args = parser.parse_args(argv)

    settings = TrackerSettings()
    if args.lenient:
        settings = settings.model_copy(update={"strict": False})
    setup_logging(log_dir=settings.log_dir)

    try:
        events = load_events_from_file(args.log, max_events=settings.max_events)
        trace = run_replay(events, seats=args.seat, settings=settings)
    except (ReplayLoadError, ReplayError) as exc:
        print(str(exc), file=sys.stderr)
        return 1

    _print_trace(trace)
    return 0


if __name__ == "__main__":
    sys.exit(main())
