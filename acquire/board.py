from __future__ import annotations

from typing import List, Optional, Sequence

from .types import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    CHAINS,
    NUM_TILES,
    SAFE_CHAIN_SIZE,
    BoardType,
    Tile,
    is_chain,
    tile_at,
    tile_xy,
)


class Board:
    def __init__(self) -> None:
        # cells[y][x]; only chains, NOTHING and NOTHING_YET are ever stored
        self.cells: List[List[BoardType]] = [
            [BoardType.NOTHING for _ in range(BOARD_WIDTH)] for _ in range(BOARD_HEIGHT)
        ]

    def get(self, tile: Tile) -> BoardType:
        x, y = tile_xy(tile)
        return self.cells[y][x]

    def set(self, tile: Tile, t: BoardType) -> None:
        x, y = tile_xy(tile)
        self.cells[y][x] = t

    def is_empty(self, tile: Tile) -> bool:
        return self.get(tile) == BoardType.NOTHING

    def placed_tiles(self) -> List[Tile]:
        return [t for t in range(NUM_TILES) if not self.is_empty(t)]

    def count(self, t: BoardType) -> int:
        return sum(1 for row in self.cells for cell in row if cell == t)

    @staticmethod
    def neighbors(tile: Tile) -> List[Tile]:
        x, y = tile_xy(tile)
        out: List[Tile] = []
        if x > 0:
            out.append(tile_at(x - 1, y))
        if x < BOARD_WIDTH - 1:
            out.append(tile_at(x + 1, y))
        if y > 0:
            out.append(tile_at(x, y - 1))
        if y < BOARD_HEIGHT - 1:
            out.append(tile_at(x, y + 1))
        return out

    def touched_chains(self, tile: Tile) -> List[BoardType]:
        found = {self.get(n) for n in Board.neighbors(tile)}
        return [c for c in CHAINS if c in found]

    def has_orphan_neighbor(self, tile: Tile) -> bool:
        return any(self.get(n) == BoardType.NOTHING_YET for n in Board.neighbors(tile))

    def fill(self, tile: Tile, chain: BoardType) -> int:
        """Flood-fill every placed cell connected to ``tile`` with ``chain``.

        Returns the number of cells now tagged with ``chain``.
        """
        assert is_chain(chain)
        self.set(tile, chain)
        todo = [tile]
        while todo:
            cur = todo.pop()
            for n in Board.neighbors(cur):
                t = self.get(n)
                if t != BoardType.NOTHING and t != chain:
                    self.set(n, chain)
                    todo.append(n)
        return self.count(chain)


def classify_tile(
    board: Board,
    tile: Tile,
    rack: Sequence[Optional[Tile]],
    chain_sizes: Sequence[int],
) -> BoardType:
    """What would happen if ``tile`` from ``rack`` were played now."""
    chains = board.touched_chains(tile)
    if not chains:
        if board.has_orphan_neighbor(tile):
            if all(chain_sizes[c] > 0 for c in CHAINS):
                return BoardType.CANT_PLAY_NOW
            return BoardType.WILL_FORM_NEW_CHAIN
        neighbors = Board.neighbors(tile)
        for other in rack:
            if other is not None and other != tile and other in neighbors:
                return BoardType.HAVE_NEIGHBORING_TILE_TOO
        return BoardType.WILL_PUT_LONELY_TILE_DOWN
    if len(chains) == 1:
        return chains[0]
    safe = sum(1 for c in chains if chain_sizes[c] >= SAFE_CHAIN_SIZE)
    if safe >= 2:
        return BoardType.CANT_PLAY_EVER
    return BoardType.WILL_MERGE_CHAINS


def group_chains_by_size(chains: Sequence[BoardType], chain_sizes: Sequence[int]) -> List[List[BoardType]]:
    # Largest size first; chains keep their board order inside a group
    sizes = sorted({chain_sizes[c] for c in chains}, reverse=True)
    return [[c for c in chains if chain_sizes[c] == s] for s in sizes]
