"""Replay loader: parse an mjai event log (one JSON object per line) into typed events.

Blank lines are skipped. Every other line must decode to a JSON object that
validates as one of the known mjai event types; the first failing line aborts
the load with its 1-based line number in the message.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError

from tracker.logic.events import Event, parse_event

# Safety limit to prevent memory exhaustion from oversized logs.
_MAX_REPLAY_EVENTS = 100_000


class ReplayLoadError(Exception):
    """Raised when a replay file cannot be loaded or parsed."""


def load_events_from_string(content: str, *, max_events: int = _MAX_REPLAY_EVENTS) -> tuple[Event, ...]:
    """Parse newline-delimited mjai JSON into a tuple of events."""
    events: list[Event] = []
    for line_no, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if len(events) >= max_events:
            raise ReplayLoadError(f"Replay exceeds maximum event count ({max_events}) at line {line_no}")
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ReplayLoadError(f"Malformed JSON on line {line_no}: {exc}") from exc
        if not isinstance(data, dict):
            raise ReplayLoadError(f"Line {line_no} is not a JSON object")
        try:
            events.append(parse_event(data))
        except ValidationError as exc:
            raise ReplayLoadError(f"Invalid event on line {line_no}: {exc}") from exc

    if not events:
        raise ReplayLoadError("Empty replay content")
    return tuple(events)


def load_events_from_file(path: str | Path, *, max_events: int = _MAX_REPLAY_EVENTS) -> tuple[Event, ...]:
    """Load an mjai event log from a file path."""
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ReplayLoadError(f"Cannot read replay file {path}: {exc}") from exc
    return load_events_from_string(content, max_events=max_events)
