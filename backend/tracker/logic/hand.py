"""
Concealed-hand tracker (tehai) for a single seat.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tracker.logic.exceptions import InvalidDiscardError, InvalidMeldError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from tracker.logic.tiles import Tile


class Hand:
    """
    Ordered multiset of concealed tiles.

    Holds 13 - 3 * (number of melds) tiles between turns, one more right
    after a draw. Draws are appended, so the most recently drawn tile is
    always the last element while a draw is pending.
    """

    def __init__(self, tiles: Iterable[Tile] = ()) -> None:
        self._tiles: list[Tile] = list(tiles)
        self._pending_draw = False

    def deal(self, tiles: Iterable[Tile]) -> None:
        """Replace the contents with the dealt tiles (haipai)."""
        self._tiles = list(tiles)
        self._pending_draw = False

    def draw(self, tile: Tile) -> None:
        self._tiles.append(tile)
        self._pending_draw = True

    def discard(self, tile: Tile, *, tsumogiri: bool = False) -> Tile:
        """
        Remove a discarded tile and return it.

        With tsumogiri the just-drawn tile is removed whatever its value;
        otherwise the first concealed tile equal to `tile` is removed.
        """
        if tsumogiri:
            if not self._pending_draw:
                raise InvalidDiscardError("tsumogiri without a pending draw")
            self._pending_draw = False
            return self._tiles.pop()

        try:
            self._tiles.remove(tile)
        except ValueError:
            raise InvalidDiscardError(f"tile {tile} not in hand") from None
        self._pending_draw = False
        return tile

    def remove(self, tiles: Iterable[Tile]) -> None:
        """Remove each tile once; used when tiles are consumed into a meld."""
        remaining = list(self._tiles)
        for tile in tiles:
            try:
                remaining.remove(tile)
            except ValueError:
                raise InvalidMeldError(f"consumed tile {tile} not in hand") from None
        self._tiles = remaining
        self._pending_draw = False

    @property
    def view(self) -> tuple[Tile, ...]:
        return tuple(self._tiles)

    @property
    def has_pending_draw(self) -> bool:
        return self._pending_draw

    def __len__(self) -> int:
        return len(self._tiles)

    def __iter__(self) -> Iterator[Tile]:
        return iter(tuple(self._tiles))

    def __repr__(self) -> str:
        return f"Hand({' '.join(tile.mjai for tile in self._tiles)})"
