"""Shanten calculation by branch-and-bound search over tile counts.

Three winning shapes are evaluated independently and the minimum is returned:

- kokushi (thirteen orphans) and chiitoi (seven pairs) in closed form,
- the standard shape (4 groups + 1 eye) by a two-phase search.

Search outline for the standard shape
-------------------------------------
For every rank holding a pair, the pair is taken as the eye and the rest of
the hand is decomposed; one more pass runs with no eye taken.

Phase one extracts complete groups (triplets, runs) at the lowest remaining
rank, and also tries leaving that rank alone. Once no group can be formed,
phase two splits what is left into partial groups (pairs, adjacent or
one-gap suited tiles) and singles.

A branch is abandoned when the tiles still unclassified cannot lift its block
score c = 3 * groups + 2 * partials + 2 * eye to the best c seen at a leaf.

All extraction happens in place on one count array. Every take is paired with
its rollback by a context manager, so the array is restored on every exit path.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Protocol

import structlog

from tracker.logic.tiles import RANK_SPACE, TERMINALS_AND_HONORS, tile_at

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from tracker.logic.tiles import Tile

logger = structlog.get_logger()

AGARI_STATE: int = -1

MAX_NORMAL_SHANTEN: int = 8
MAX_KOKUSHI_SHANTEN: int = 8
MAX_CHIITOI_SHANTEN: int = 6

# a full concealed hand: 4 groups + eye, counted with the tile drawn
FULL_HAND_SIZE = 14
CLOSED_HAND_SIZE = 13


def leaf_shanten(num_groups: int, num_partials: int, has_eye: int, num_fuuros: int) -> int:
    """Score a fully classified decomposition.

    The over-count penalty is applied unclamped, so decompositions with fewer
    than five blocks get a negative penalty. The result reduces to
    4 - groups - eye - fuuros.
    """
    penalty = num_groups + num_partials + has_eye - 5
    return 9 - 2 * num_groups - num_partials - 2 * has_eye - num_fuuros + penalty


def _is_suited_rank(rank: int) -> bool:
    return rank < 40 and rank % 10 != 0


class SearchObserver(Protocol):
    """Receives search progress from ShantenEngine.normal_shanten()."""

    def leaf(self, blocks: Sequence[tuple[Tile | None, ...]], shanten: int, score: int) -> None: ...

    def pruned(self, remaining: int, best_score: int, score: int) -> None: ...


class LoggingObserver:
    """SearchObserver that writes every leaf and cut as a debug log event."""

    def __init__(self) -> None:
        self._log = logger.bind(component="shanten_search")

    def leaf(self, blocks: Sequence[tuple[Tile | None, ...]], shanten: int, score: int) -> None:
        self._log.debug(
            "search leaf",
            blocks=[" ".join(tile.mjai if tile else "?" for tile in block) for block in blocks],
            shanten=shanten,
            score=score,
        )

    def pruned(self, remaining: int, best_score: int, score: int) -> None:
        self._log.debug("search pruned", remaining=remaining, best_score=best_score, score=score)


class ShantenEngine:
    """
    Shanten evaluator for one snapshot of concealed tiles.

    The called-meld count is derived from the concealed tile count
    ((14 - concealed) // 3), so only concealed tiles are passed in.
    Not reentrant: each caller needs its own instance.
    """

    def __init__(self, tiles: Iterable[Tile], *, observer: SearchObserver | None = None) -> None:
        self._counts = [0] * RANK_SPACE
        num_tiles = 0
        for tile in tiles:
            self._counts[tile.rank] += 1
            num_tiles += 1
        self._num_tehai = num_tiles
        self._remaining = num_tiles
        self._observer = observer
        self._taken: list[tuple[int, ...]] = []
        self._best = MAX_NORMAL_SHANTEN
        self._best_score = 0

    @property
    def num_tehai(self) -> int:
        return self._num_tehai

    @property
    def num_fuuros(self) -> int:
        return (FULL_HAND_SIZE - self._num_tehai) // 3

    @property
    def counts(self) -> tuple[int, ...]:
        return tuple(self._counts)

    def shanten(self) -> int:
        """Minimum shanten across kokushi, chiitoi and the standard shape."""
        return min(self.kokushi_shanten(), self.chiitoi_shanten(), self.normal_shanten())

    def kokushi_shanten(self) -> int:
        """13 - distinct terminal/honor kinds - 1 if any of them is paired."""
        if self._num_tehai < CLOSED_HAND_SIZE:
            return MAX_KOKUSHI_SHANTEN
        num_kinds = 0
        has_pair = False
        for tile in TERMINALS_AND_HONORS:
            count = self._counts[tile.rank]
            if count > 0:
                num_kinds += 1
            if count > 1:
                has_pair = True
        return CLOSED_HAND_SIZE - num_kinds - (1 if has_pair else 0)

    def chiitoi_shanten(self) -> int:
        """6 - paired kinds + max(0, 7 - distinct kinds)."""
        if self._num_tehai < CLOSED_HAND_SIZE:
            return MAX_CHIITOI_SHANTEN
        shanten = MAX_CHIITOI_SHANTEN
        num_kinds = 0
        for count in self._counts:
            if count == 0:
                continue
            if count >= 2:
                shanten -= 1
            num_kinds += 1
        return shanten + max(0, 7 - num_kinds)

    def normal_shanten(self) -> int:
        """Shanten for 4 groups + 1 eye, in [-1, 8]."""
        self._best = MAX_NORMAL_SHANTEN
        self._best_score = 0
        for rank in self._eye_candidates():
            with self._taking((rank, rank)):
                self._search_groups(self._next_nonzero(0), has_eye=1, num_groups=0)
        self._search_groups(self._next_nonzero(0), has_eye=0, num_groups=0)
        logger.debug(
            "normal shanten evaluated",
            num_tehai=self._num_tehai,
            shanten=self._best,
            best_score=self._best_score,
        )
        return self._best

    def _eye_candidates(self) -> list[int]:
        return [rank for rank, count in enumerate(self._counts) if count >= 2]

    def _next_nonzero(self, rank: int) -> int:
        for idx in range(rank, RANK_SPACE):
            if self._counts[idx] > 0:
                return idx
        return RANK_SPACE

    @contextmanager
    def _taking(self, ranks: tuple[int, ...]) -> Iterator[None]:
        for rank in ranks:
            self._counts[rank] -= 1
        self._remaining -= len(ranks)
        self._taken.append(ranks)
        try:
            yield
        finally:
            self._taken.pop()
            self._remaining += len(ranks)
            for rank in ranks:
                self._counts[rank] += 1

    def _search_groups(self, rank: int, *, has_eye: int, num_groups: int) -> None:
        if self._best == AGARI_STATE:
            return
        if rank >= RANK_SPACE or self._remaining < 3:
            self._search_partials(0, has_eye=has_eye, num_groups=num_groups, num_partials=0)
            return

        counts = self._counts
        if counts[rank] >= 3:
            with self._taking((rank, rank, rank)):
                self._search_groups(rank, has_eye=has_eye, num_groups=num_groups + 1)
        if (
            _is_suited_rank(rank)
            and rank % 10 <= 7
            and counts[rank] > 0
            and counts[rank + 1] > 0
            and counts[rank + 2] > 0
        ):
            with self._taking((rank, rank + 1, rank + 2)):
                self._search_groups(rank, has_eye=has_eye, num_groups=num_groups + 1)

        self._search_groups(self._next_nonzero(rank + 1), has_eye=has_eye, num_groups=num_groups)

    def _search_partials(self, rank: int, *, has_eye: int, num_groups: int, num_partials: int) -> None:
        if self._best == AGARI_STATE:
            return
        score = 3 * num_groups + 2 * num_partials + 2 * has_eye
        if self._remaining < self._best_score - score:
            if self._observer is not None:
                self._observer.pruned(self._remaining, self._best_score, score)
            return
        if self._remaining == 0:
            shanten = leaf_shanten(num_groups, num_partials, has_eye, self.num_fuuros)
            self._best = min(self._best, shanten)
            self._best_score = max(self._best_score, score)
            if self._observer is not None:
                blocks = [tuple(tile_at(r) for r in block) for block in self._taken]
                self._observer.leaf(blocks, shanten, score)
            return

        # every rank below `rank` is already classified
        rank = self._next_nonzero(rank)
        counts = self._counts
        if counts[rank] >= 2:
            with self._taking((rank, rank)):
                self._search_partials(rank, has_eye=has_eye, num_groups=num_groups, num_partials=num_partials + 1)
        if _is_suited_rank(rank):
            if rank % 10 <= 8 and counts[rank + 1] > 0:
                with self._taking((rank, rank + 1)):
                    self._search_partials(
                        rank,
                        has_eye=has_eye,
                        num_groups=num_groups,
                        num_partials=num_partials + 1,
                    )
            if rank % 10 <= 7 and counts[rank + 2] > 0:
                with self._taking((rank, rank + 2)):
                    self._search_partials(
                        rank,
                        has_eye=has_eye,
                        num_groups=num_groups,
                        num_partials=num_partials + 1,
                    )
        with self._taking((rank,)):
            self._search_partials(
                rank,
                has_eye=has_eye,
                num_groups=num_groups,
                num_partials=num_partials,
            )


def calculate_shanten(tiles: Iterable[Tile], *, observer: SearchObserver | None = None) -> int:
    """Calculate the minimum shanten of a set of concealed tiles."""
    return ShantenEngine(tiles, observer=observer).shanten()
