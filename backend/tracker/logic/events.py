"""Typed mjai game events consumed by the seat trackers.

Every event is a frozen pydantic model discriminated on its `type` field.
parse_event() turns a decoded JSON object into the matching model; consumed
tile arities are enforced by the tuple field types. Tiles hidden from the log
perspective ("?") parse to None.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tracker.logic.tiles import MaybeMjaiTile, MjaiTile


class EventType(StrEnum):
    """mjai event types."""

    START_GAME = "start_game"
    START_KYOKU = "start_kyoku"
    TSUMO = "tsumo"
    DAHAI = "dahai"
    CHI = "chi"
    PON = "pon"
    DAIMINKAN = "daiminkan"
    KAKAN = "kakan"
    ANKAN = "ankan"
    DORA = "dora"
    REACH = "reach"
    REACH_ACCEPTED = "reach_accepted"
    HORA = "hora"
    RYUKYOKU = "ryukyoku"
    END_KYOKU = "end_kyoku"
    END_GAME = "end_game"
    NONE = "none"


class MjaiEvent(BaseModel):
    """Base class for all mjai events."""

    model_config = ConfigDict(frozen=True)

    type: EventType


class StartGameEvent(MjaiEvent):
    type: Literal[EventType.START_GAME] = EventType.START_GAME
    names: list[str] = Field(default_factory=list)


class StartKyokuEvent(MjaiEvent):
    """A new hand is dealt; `tehais` holds the 13 starting tiles of each seat."""

    type: Literal[EventType.START_KYOKU] = EventType.START_KYOKU
    bakaze: MjaiTile
    dora_marker: MjaiTile
    kyoku: int
    honba: int
    kyotaku: int
    oya: int
    scores: list[int] = Field(default_factory=list)
    tehais: list[list[MaybeMjaiTile]]


class TsumoEvent(MjaiEvent):
    type: Literal[EventType.TSUMO] = EventType.TSUMO
    actor: int
    pai: MaybeMjaiTile


class DahaiEvent(MjaiEvent):
    """A discard; `tsumogiri` marks a discard of the tile just drawn."""

    type: Literal[EventType.DAHAI] = EventType.DAHAI
    actor: int
    pai: MjaiTile
    tsumogiri: bool


class ChiEvent(MjaiEvent):
    type: Literal[EventType.CHI] = EventType.CHI
    actor: int
    target: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile]


class PonEvent(MjaiEvent):
    type: Literal[EventType.PON] = EventType.PON
    actor: int
    target: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile]


class DaiminkanEvent(MjaiEvent):
    type: Literal[EventType.DAIMINKAN] = EventType.DAIMINKAN
    actor: int
    target: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile, MjaiTile]


class KakanEvent(MjaiEvent):
    """Added kan; `consumed` are the three tiles of the pon being promoted."""

    type: Literal[EventType.KAKAN] = EventType.KAKAN
    actor: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile, MjaiTile]


class AnkanEvent(MjaiEvent):
    type: Literal[EventType.ANKAN] = EventType.ANKAN
    actor: int
    consumed: tuple[MjaiTile, MjaiTile, MjaiTile, MjaiTile]


class DoraEvent(MjaiEvent):
    type: Literal[EventType.DORA] = EventType.DORA
    dora_marker: MjaiTile


class ReachEvent(MjaiEvent):
    type: Literal[EventType.REACH] = EventType.REACH
    actor: int


class ReachAcceptedEvent(MjaiEvent):
    type: Literal[EventType.REACH_ACCEPTED] = EventType.REACH_ACCEPTED
    actor: int
    deltas: list[int] | None = None
    scores: list[int] | None = None


class HoraEvent(MjaiEvent):
    type: Literal[EventType.HORA] = EventType.HORA
    actor: int
    target: int
    deltas: list[int] | None = None
    ura_markers: list[MjaiTile] | None = None


class RyukyokuEvent(MjaiEvent):
    type: Literal[EventType.RYUKYOKU] = EventType.RYUKYOKU
    deltas: list[int] | None = None


class EndKyokuEvent(MjaiEvent):
    type: Literal[EventType.END_KYOKU] = EventType.END_KYOKU


class EndGameEvent(MjaiEvent):
    type: Literal[EventType.END_GAME] = EventType.END_GAME


class NoneEvent(MjaiEvent):
    type: Literal[EventType.NONE] = EventType.NONE


Event = Annotated[
    StartGameEvent
    | StartKyokuEvent
    | TsumoEvent
    | DahaiEvent
    | ChiEvent
    | PonEvent
    | DaiminkanEvent
    | KakanEvent
    | AnkanEvent
    | DoraEvent
    | ReachEvent
    | ReachAcceptedEvent
    | HoraEvent
    | RyukyokuEvent
    | EndKyokuEvent
    | EndGameEvent
    | NoneEvent,
    Field(discriminator="type"),
]

_event_adapter: TypeAdapter[Event] = TypeAdapter(Event)


def parse_event(data: dict[str, Any]) -> Event:
    """Parse a decoded mjai JSON object into a typed event.

    Raises pydantic.ValidationError for unknown types or malformed payloads.
    """
    return _event_adapter.validate_python(data)


def event_actor(event: Event) -> int | None:
    """Return the seat an event is addressed to, or None for untargeted events."""
    return getattr(event, "actor", None)
