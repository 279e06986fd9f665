"""
Per-seat hand state: concealed tiles plus called melds, driven by mjai events.

SeatState is a reducer over one event at a time. It reacts only to the
events listed in SeatState.update() and only when they are addressed to its
own seat; everything else is a no-op.
"""

from __future__ import annotations

from itertools import chain
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

from tracker.logic.events import (
    AnkanEvent,
    ChiEvent,
    DahaiEvent,
    DaiminkanEvent,
    KakanEvent,
    PonEvent,
    StartKyokuEvent,
    TsumoEvent,
    event_actor,
)
from tracker.logic.exceptions import InvalidStateError
from tracker.logic.hand import Hand
from tracker.logic.melds import Ankan, Chi, Daiminkan, Fuuro, Pon, promote_pon
from tracker.logic.shanten import ShantenEngine
from tracker.logic.tiles import MjaiTile, Tile

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tracker.logic.events import Event
    from tracker.logic.shanten import SearchObserver

logger = structlog.get_logger()


class SeatSnapshot(BaseModel):
    """Read-only export of a seat's concealed tiles and melds."""

    model_config = ConfigDict(frozen=True)

    actor: int
    tehai: tuple[MjaiTile, ...]
    fuuros: tuple[Fuuro, ...]


class SeatState:
    """
    Hand and meld state of one seat for the current hand of play.

    Reset on every start_kyoku; mutated by events whose actor is this seat.
    """

    def __init__(self, actor: int) -> None:
        self.actor = actor
        self.hand = Hand()
        self.fuuros: list[Fuuro] = []

    def update(self, event: Event) -> None:
        """
        Apply one event.

        Reacts to start_kyoku, and to tsumo, dahai, chi, pon, daiminkan,
        kakan and ankan addressed to this seat. Raises InvalidStateError
        when a kakan has no matching pon or when this seat's own tiles are
        hidden in the log.
        """
        if isinstance(event, StartKyokuEvent):
            self._start_kyoku(event)
            return

        if event_actor(event) != self.actor:
            return

        if isinstance(event, TsumoEvent):
            self.hand.draw(self._known(event.pai, "tsumo"))
        elif isinstance(event, DahaiEvent):
            self.hand.discard(event.pai, tsumogiri=event.tsumogiri)
        elif isinstance(event, ChiEvent):
            self.hand.remove(event.consumed)
            self._add_fuuro(Chi(target=event.target, pai=event.pai, consumed=event.consumed))
        elif isinstance(event, PonEvent):
            self.hand.remove(event.consumed)
            self._add_fuuro(Pon(target=event.target, pai=event.pai, consumed=event.consumed))
        elif isinstance(event, DaiminkanEvent):
            self.hand.remove(event.consumed)
            self._add_fuuro(Daiminkan(target=event.target, pai=event.pai, consumed=event.consumed))
        elif isinstance(event, KakanEvent):
            self._kakan(event)
        elif isinstance(event, AnkanEvent):
            self.hand.remove(event.consumed)
            self._add_fuuro(Ankan(consumed=event.consumed))

    def _start_kyoku(self, event: StartKyokuEvent) -> None:
        if self.actor >= len(event.tehais):
            raise InvalidStateError(actor=self.actor, reason="start_kyoku has no tehai for this seat")
        tehai = [self._known(tile, "start_kyoku") for tile in event.tehais[self.actor]]
        self.hand.deal(tehai)
        self.fuuros.clear()
        logger.debug("hand dealt", seat=self.actor, kyoku=event.kyoku, honba=event.honba)

    def _kakan(self, event: KakanEvent) -> None:
        promoted = promote_pon(self.fuuros, actor=self.actor, pai=event.pai, consumed=event.consumed)
        # the added tile leaves the hand like a discard would
        self.hand.discard(event.pai)
        self.fuuros = promoted
        logger.debug("pon promoted to kakan", seat=self.actor, pai=event.pai)

    def _add_fuuro(self, fuuro: Fuuro) -> None:
        self.fuuros.append(fuuro)
        logger.debug("meld recorded", seat=self.actor, meld_type=fuuro.type, num_fuuros=len(self.fuuros))

    def _known(self, tile: Tile | None, event_type: str) -> Tile:
        if tile is None:
            raise InvalidStateError(actor=self.actor, reason=f"{event_type} carries an unknown tile for this seat")
        return tile

    def tiles(self) -> Iterator[Tile]:
        """Concealed tiles followed by every meld's tiles, meld by meld."""
        return chain(self.hand, chain.from_iterable(fuuro.tiles for fuuro in self.fuuros))

    @property
    def num_committed(self) -> int:
        """Hand size plus 3 per meld: 13 between turns, 14 right after a draw or call."""
        return len(self.hand) + 3 * len(self.fuuros)

    def calc_shanten(self, *, observer: SearchObserver | None = None) -> int:
        """Evaluate shanten for the current concealed tiles."""
        return ShantenEngine(self.hand.view, observer=observer).shanten()

    def snapshot(self) -> SeatSnapshot:
        return SeatSnapshot(actor=self.actor, tehai=self.hand.view, fuuros=tuple(self.fuuros))
