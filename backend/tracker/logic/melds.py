"""
Meld records (fuuro): the five ways tiles leave the concealed hand.

Each record is an immutable pydantic model tagged by a snake_case `type`,
so `model_dump(mode="json")` yields the same shape as an mjai call event
(tiles in mjai notation). The only mutation is pon -> kakan promotion,
which replaces the matching pon record rather than appending.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from tracker.logic.exceptions import InvalidStateError
from tracker.logic.tiles import MjaiTile, Tile

if TYPE_CHECKING:
    from collections.abc import Sequence


class _FuuroBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    @abstractmethod
    def tiles(self) -> tuple[Tile, ...]:
        """All tiles of the meld, called tile first."""

    @property
    @abstractmethod
    def hand_tiles(self) -> tuple[Tile, ...]:
        """Tiles this meld took out of the concealed hand."""


class Chi(_FuuroBase):
    """Run completed with the left player's discard."""

    type: Literal["chi"] = "chi"
    target: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile]

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return (self.pai, *self.consumed)

    @property
    def hand_tiles(self) -> tuple[Tile, ...]:
        return self.consumed


class Pon(_FuuroBase):
    """Triplet completed with any opponent's discard."""

    type: Literal["pon"] = "pon"
    target: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile]

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return (self.pai, *self.consumed)

    @property
    def hand_tiles(self) -> tuple[Tile, ...]:
        return self.consumed


class Daiminkan(_FuuroBase):
    """Open kan: three concealed tiles plus an opponent's discard."""

    type: Literal["daiminkan"] = "daiminkan"
    target: int
    pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile, MjaiTile]

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return (self.pai, *self.consumed)

    @property
    def hand_tiles(self) -> tuple[Tile, ...]:
        return self.consumed


class Kakan(_FuuroBase):
    """
    Added kan: a pon promoted with a fourth tile from the hand.

    Keeps the original pon's caller, called tile and consumed pair, because the
    record replaces that pon in place.
    """

    type: Literal["kakan"] = "kakan"
    pai: MjaiTile
    previous_pon_target: int
    previous_pon_pai: MjaiTile
    consumed: tuple[MjaiTile, MjaiTile]

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return (self.pai, self.previous_pon_pai, *self.consumed)

    @property
    def hand_tiles(self) -> tuple[Tile, ...]:
        return (self.pai, *self.consumed)


class Ankan(_FuuroBase):
    """Concealed kan declared from four tiles in hand."""

    type: Literal["ankan"] = "ankan"
    consumed: tuple[MjaiTile, MjaiTile, MjaiTile, MjaiTile]

    @property
    def tiles(self) -> tuple[Tile, ...]:
        return self.consumed

    @property
    def hand_tiles(self) -> tuple[Tile, ...]:
        return self.consumed


Fuuro = Annotated[Chi | Pon | Daiminkan | Kakan | Ankan, Field(discriminator="type")]


def promote_pon(
    fuuros: Sequence[Fuuro],
    *,
    actor: int,
    pai: Tile,
    consumed: Sequence[Tile],
) -> list[Fuuro]:
    """
    Replace the pon matched by a kakan's consumed tiles with a Kakan record.

    The kakan's three consumed tiles must equal, as a multiset, the pon's
    called tile plus its consumed pair. Returns a new list; raises
    InvalidStateError when no pon matches.
    """
    wanted = sorted(consumed)
    for idx, fuuro in enumerate(fuuros):
        if isinstance(fuuro, Pon) and sorted((fuuro.pai, *fuuro.consumed)) == wanted:
            kakan = Kakan(
                pai=pai,
                previous_pon_target=fuuro.target,
                previous_pon_pai=fuuro.pai,
                consumed=fuuro.consumed,
            )
            return [*fuuros[:idx], kakan, *fuuros[idx + 1 :]]
    raise InvalidStateError(actor=actor, reason="previous pon not found for kakan")
