"""
Replay data models: output trace and error types.

ReplayTrace records, for every decision point of a tracked seat, the
shanten of its concealed tiles together with a snapshot of its hand.
"""

from pydantic import BaseModel, ConfigDict

from tracker.logic.events import EventType
from tracker.logic.seat import SeatSnapshot


class ReplayStep(BaseModel):
    """Shanten of one seat right after a draw or call (a decision point)."""

    model_config = ConfigDict(frozen=True)

    index: int
    actor: int
    event_type: EventType
    shanten: int
    snapshot: SeatSnapshot


class ReplayTrace(BaseModel):
    """Complete output of a replay execution."""

    model_config = ConfigDict(frozen=True)

    seats: tuple[int, ...]
    num_events: int
    steps: tuple[ReplayStep, ...]
    # (event index, seat) of every event a seat skipped in lenient mode
    skipped: tuple[tuple[int, int], ...] = ()
    final: tuple[SeatSnapshot, ...]

    def steps_for(self, actor: int) -> tuple[ReplayStep, ...]:
        return tuple(step for step in self.steps if step.actor == actor)


class ReplayError(Exception):
    """Raised when an event cannot be applied to a seat in strict mode."""

    def __init__(self, step_index: int, event_type: EventType, cause: Exception) -> None:
        self.step_index = step_index
        self.event_type = event_type
        self.cause = cause
        super().__init__(f"Replay error at event {step_index} ({event_type}): {cause}")
