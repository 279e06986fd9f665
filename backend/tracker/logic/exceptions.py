"""Typed domain exceptions for hand tracking.

All tracking failures use subclasses of TrackerError rather than raw
ValueError, so a replay driver can catch them at one boundary and decide
whether to abort or skip the offending event.
"""


class TrackerError(Exception):
    """Base exception for hand and meld tracking failures."""


class InvalidDiscardError(TrackerError):
    """Tile cannot be discarded (not in hand, no pending draw for tsumogiri)."""


class InvalidMeldError(TrackerError):
    """Tiles consumed by a call are not held in the concealed hand."""


class InvalidStateError(TrackerError):
    """Raised when an event is inconsistent with the tracked state of a seat.

    The canonical case is an added kan (kakan) for which no matching pon is
    on record: the event stream and the tracked melds disagree.

    Attributes:
        actor: The seat whose state is inconsistent.
        reason: Human-readable explanation of the mismatch.

    """

    def __init__(self, *, actor: int, reason: str) -> None:
        self.actor = actor
        self.reason = reason
        super().__init__(f"invalid state for seat {actor}: {reason}")


class InvalidTileError(ValueError):
    """Tile notation cannot be decoded."""
