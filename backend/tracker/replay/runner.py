"""
Replay runner: feeds a recorded mjai event stream through per-seat trackers.

Each tracked seat keeps its own SeatState. After a seat's own tsumo, chi or
pon (the points where it must choose a discard) the runner evaluates the
seat's shanten and records a ReplayStep.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from tracker.logic.events import EventType, event_actor
from tracker.logic.exceptions import TrackerError
from tracker.logic.seat import SeatState
from tracker.logic.shanten import LoggingObserver
from tracker.replay.models import ReplayError, ReplayStep, ReplayTrace
from tracker.settings import TrackerSettings

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from tracker.logic.events import Event
    from tracker.logic.shanten import SearchObserver

logger = structlog.get_logger()

NUM_SEATS = 4

_DECISION_EVENTS = frozenset({EventType.TSUMO, EventType.CHI, EventType.PON})


def run_replay(
    events: Iterable[Event],
    *,
    seats: Sequence[int] | None = None,
    settings: TrackerSettings | None = None,
) -> ReplayTrace:
    """
    Run an event stream through one SeatState per tracked seat.

    In strict mode the first event a seat cannot apply raises ReplayError;
    otherwise the event is logged and skipped for that seat.
    """
    resolved = settings or TrackerSettings()
    tracked = tuple(range(NUM_SEATS)) if seats is None else tuple(seats)
    states = {actor: SeatState(actor) for actor in tracked}
    observer: SearchObserver | None = LoggingObserver() if resolved.trace_search else None

    steps: list[ReplayStep] = []
    skipped: list[tuple[int, int]] = []
    num_events = 0
    for index, event in enumerate(events):
        if index >= resolved.max_events:
            raise ReplayError(index, event.type, ValueError(f"more than {resolved.max_events} events"))
        num_events += 1
        for actor, state in states.items():
            try:
                state.update(event)
            except TrackerError as exc:
                if resolved.strict:
                    raise ReplayError(index, event.type, exc) from exc
                logger.warning(
                    "replay event skipped",
                    step_index=index,
                    event_type=event.type,
                    seat=actor,
                    error=str(exc),
                )
                skipped.append((index, actor))
                continue

            if event.type in _DECISION_EVENTS and event_actor(event) == actor:
                shanten = state.calc_shanten(observer=observer)
                steps.append(
                    ReplayStep(
                        index=index,
                        actor=actor,
                        event_type=event.type,
                        shanten=shanten,
                        snapshot=state.snapshot(),
                    ),
                )

    logger.info("replay finished", num_events=num_events, num_steps=len(steps), num_skipped=len(skipped))
    return ReplayTrace(
        seats=tracked,
        num_events=num_events,
        steps=tuple(steps),
        skipped=tuple(skipped),
        final=tuple(state.snapshot() for state in states.values()),
    )
