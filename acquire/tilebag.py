from __future__ import annotations

from typing import List, Optional, Sequence
import random

from .errors import SnapshotError
from .types import NUM_TILES, Tile, all_tiles


class TileBag:
    """Ordered tile supply; ``order`` is the full bag, drawn front to back."""

    def __init__(self, order: Sequence[Tile]) -> None:
        self.order: List[Tile] = list(order)
        self.position: int = 0

    @staticmethod
    def build(tiles: Optional[Sequence[Tile]] = None, seed: Optional[int] = None) -> "TileBag":
        if tiles is None:
            order = all_tiles()
            random.Random(seed).shuffle(order)
            return TileBag(order)
        seen = set()
        duplicated: List[Tile] = []
        for t in tiles:
            if not isinstance(t, int) or isinstance(t, bool) or t < 0 or t >= NUM_TILES:
                raise SnapshotError("tile bag holds an invalid tile", code="INVALID_TILE_BAG", context={"tile": t})
            if t in seen:
                duplicated.append(t)
            seen.add(t)
        if duplicated:
            raise SnapshotError("tile bag holds duplicated tiles", code="INVALID_TILE_BAG", context={"tiles": duplicated})
        # A partial bag is completed in ascending order
        order = list(tiles) + [t for t in all_tiles() if t not in seen]
        return TileBag(order)

    def remaining(self) -> int:
        return len(self.order) - self.position

    def is_empty(self) -> bool:
        return self.position >= len(self.order)

    def draw(self) -> Optional[Tile]:
        if self.is_empty():
            return None
        tile = self.order[self.position]
        self.position += 1
        return tile

    def undrawn(self) -> List[Tile]:
        return self.order[self.position:]
