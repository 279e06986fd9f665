"""
Tile representation for the hand tracker and shanten engine.

Tiles live in a 48-slot rank space so that run arithmetic (rank + 1, rank + 2)
never crosses a suit boundary:

    man (characters): 11-19 (1m-9m)
    pin (circles):    21-29 (1p-9p)
    sou (bamboo):     31-39 (1s-9s)
    honors:           41-47 (E, S, W, N, Haku, Hatsu, Chun)

Red fives take the otherwise unused first slot of their suit block
(10, 20, 30) and count as a plain five. Slots 0-9 and 40 are gaps.
"""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Annotated

from mahjong.constants import FIVE_RED_MAN, FIVE_RED_PIN, FIVE_RED_SOU
from mahjong.tile import TilesConverter
from pydantic import BeforeValidator, PlainSerializer

from tracker.logic.exceptions import InvalidTileError

RANK_SPACE = 48

# mjai notation for a tile hidden from the log perspective
UNKNOWN_TILE = "?"

MAN_START = 11
PIN_START = 21
SOU_START = 31
HONOR_START = 41

# tile ranges in 34-format, as returned by TilesConverter (136-format // 4)
HONOR_34_START = 27

_RED_136 = frozenset({FIVE_RED_MAN, FIVE_RED_PIN, FIVE_RED_SOU})
_SUIT_LETTERS = "mps"
_HONOR_LETTERS = "ESWNPFC"

_MPSZ_GROUP = re.compile(r"([0-9r]+)([mpsz])")


class Tile(IntEnum):
    """A single tile kind, valued by its slot in the rank space."""

    MAN5_RED = 10
    MAN1 = 11
    MAN2 = 12
    MAN3 = 13
    MAN4 = 14
    MAN5 = 15
    MAN6 = 16
    MAN7 = 17
    MAN8 = 18
    MAN9 = 19
    PIN5_RED = 20
    PIN1 = 21
    PIN2 = 22
    PIN3 = 23
    PIN4 = 24
    PIN5 = 25
    PIN6 = 26
    PIN7 = 27
    PIN8 = 28
    PIN9 = 29
    SOU5_RED = 30
    SOU1 = 31
    SOU2 = 32
    SOU3 = 33
    SOU4 = 34
    SOU5 = 35
    SOU6 = 36
    SOU7 = 37
    SOU8 = 38
    SOU9 = 39
    EAST = 41
    SOUTH = 42
    WEST = 43
    NORTH = 44
    HAKU = 45
    HATSU = 46
    CHUN = 47

    @property
    def is_red(self) -> bool:
        return self.value % 10 == 0

    @property
    def rank(self) -> int:
        """Counting rank: red fives share the rank of the plain five."""
        if self.is_red:
            return self.value + 5
        return self.value

    @property
    def is_honor(self) -> bool:
        return self.value >= HONOR_START

    @property
    def is_suited(self) -> bool:
        return not self.is_honor

    @property
    def number(self) -> int:
        """Face number within the suit (1-9) or honor index (1-7)."""
        return self.rank % 10

    @property
    def is_terminal(self) -> bool:
        return self.is_suited and self.number in (1, 9)

    @property
    def is_terminal_or_honor(self) -> bool:
        return self.is_terminal or self.is_honor

    @property
    def mjai(self) -> str:
        """mjai notation: "1m", "5pr", "E", "C"."""
        if self.is_honor:
            return _HONOR_LETTERS[self.number - 1]
        suit = _SUIT_LETTERS[self.value // 10 - 1]
        if self.is_red:
            return f"5{suit}r"
        return f"{self.number}{suit}"

    @classmethod
    def from_mjai(cls, value: str) -> Tile:
        """Parse an mjai tile string. Raises InvalidTileError on anything else."""
        if len(value) == 1 and value in _HONOR_LETTERS:
            return cls(HONOR_START + _HONOR_LETTERS.index(value))
        if len(value) in (2, 3) and value[0].isdigit() and value[1] in _SUIT_LETTERS:
            block = (_SUIT_LETTERS.index(value[1]) + 1) * 10
            number = int(value[0])
            if len(value) == 2 and 1 <= number <= 9:
                return cls(block + number)
            if value[2:] == "r" and number == 5:
                return cls(block)
        raise InvalidTileError(f"invalid mjai tile: {value!r}")

    def __str__(self) -> str:
        return self.mjai


TERMINALS_AND_HONORS: tuple[Tile, ...] = (
    Tile.MAN1,
    Tile.MAN9,
    Tile.PIN1,
    Tile.PIN9,
    Tile.SOU1,
    Tile.SOU9,
    Tile.EAST,
    Tile.SOUTH,
    Tile.WEST,
    Tile.NORTH,
    Tile.HAKU,
    Tile.HATSU,
    Tile.CHUN,
)


def tile_at(rank: int) -> Tile | None:
    """
    Return the tile at a slot of the rank space, or None for an unused slot.
    """
    try:
        return Tile(rank)
    except ValueError:
        return None


def tile_from_136(tile_id: int) -> Tile:
    """
    Convert a 136-format tile id (as used by the mahjong library) to a Tile.
    """
    if not (0 <= tile_id <= 135):
        raise InvalidTileError(f"tile_id must be in [0, 135], got {tile_id}")
    if tile_id in _RED_136:
        return Tile((tile_id // 36 + 1) * 10)
    tile_34 = tile_id // 4
    if tile_34 >= HONOR_34_START:
        return Tile(HONOR_START + tile_34 - HONOR_34_START)
    return Tile((tile_34 // 9 + 1) * 10 + tile_34 % 9 + 1)


def tiles_from_string(notation: str) -> list[Tile]:
    """
    Parse mpsz notation ("40m12356p4699s222z", 0 = red five) into tiles.

    Tiles come back grouped by suit in the order the mahjong library emits them.
    """
    notation = notation.replace(" ", "")
    groups = _MPSZ_GROUP.findall(notation)
    if not groups or "".join(digits + suit for digits, suit in groups) != notation:
        raise InvalidTileError(f"invalid tile notation: {notation!r}")

    parts = {"m": "", "p": "", "s": "", "z": ""}
    for digits, suit in groups:
        if suit == "z":
            if not all("1" <= d <= "7" for d in digits):
                raise InvalidTileError(f"invalid honor tile in notation: {notation!r}")
            parts[suit] += digits
        else:
            parts[suit] += digits.replace("0", "r")

    tile_ids = TilesConverter.string_to_136_array(
        man=parts["m"],
        pin=parts["p"],
        sou=parts["s"],
        honors=parts["z"],
        has_aka_dora=True,
    )
    return [tile_from_136(tile_id) for tile_id in tile_ids]


def tiles_to_string(tiles: list[Tile] | tuple[Tile, ...]) -> str:
    """
    Render tiles in compact mpsz notation, sorted, red fives as 0.
    """
    groups: dict[str, str] = {"m": "", "p": "", "s": "", "z": ""}
    for tile in sorted(tiles, key=lambda t: (t.rank, not t.is_red)):
        suit = "z" if tile.is_honor else _SUIT_LETTERS[tile.value // 10 - 1]
        groups[suit] += "0" if tile.is_red else str(tile.number)
    return "".join(digits + suit for suit, digits in groups.items() if digits)


def _parse_tile(value: object) -> object:
    if isinstance(value, str):
        return Tile.from_mjai(value)
    return value


def _parse_maybe_tile(value: object) -> object:
    if value == UNKNOWN_TILE:
        return None
    return _parse_tile(value)


def _tile_to_mjai(tile: Tile) -> str:
    return tile.mjai


def _maybe_tile_to_mjai(tile: Tile | None) -> str:
    return UNKNOWN_TILE if tile is None else tile.mjai


# Pydantic field types: tiles travel as mjai strings, "?" is an unknown tile.
MjaiTile = Annotated[Tile, BeforeValidator(_parse_tile), PlainSerializer(_tile_to_mjai, return_type=str)]
MaybeMjaiTile = Annotated[
    Tile | None,
    BeforeValidator(_parse_maybe_tile),
    PlainSerializer(_maybe_tile_to_mjai, return_type=str),
]
