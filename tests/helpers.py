from typing import Dict, List, Optional, Sequence

from acquire import CHAINS, BoardType, GameConfig, GameMode, GameState, new_game
from acquire.core import refresh_rack_types
from acquire.decisions import PlayTileDecision
from acquire.notation import tile_from_str


def T(s: str) -> int:
    return tile_from_str(s)


def build_state(
    board: Dict[str, BoardType],
    racks: Sequence[Sequence[str]],
    bag_next: Sequence[str] = (),
    mode: GameMode = GameMode.SINGLES_2,
    shares: Optional[Dict[int, Dict[BoardType, int]]] = None,
) -> GameState:
    """Mid-game state with seat 0 about to play a tile.

    Board and rack tiles are taken from the front of the bag so tile
    conservation holds; ``bag_next`` are the next tiles drawn.
    """
    placed = [T(s) for s in board]
    rack_tiles: List[List[int]] = [[T(s) for s in r] for r in racks]
    head = placed + [t for r in rack_tiles for t in r] + [T(s) for s in bag_next]
    n = len(rack_tiles)
    cfg = GameConfig(
        game_mode=mode,
        user_ids=list(range(1, n + 1)),
        usernames=[f"p{i}" for i in range(n)],
        host_user_id=1,
        tile_bag=head,
    )
    state = new_game(cfg)
    state.bag.position = len(placed) + sum(len(r) for r in rack_tiles)
    for s, t in board.items():
        state.board.set(T(s), t)
    for c in CHAINS:
        state.scores.chain_size[c] = state.board.count(c)
    for p, r in zip(state.players, rack_tiles):
        p.rack = list(r) + [None] * (6 - len(r))
    for pid, held in (shares or {}).items():
        for chain, count in held.items():
            state.scores.shares[pid][chain] = count
    state.stack = [PlayTileDecision(0)]
    refresh_rack_types(state)
    return state


def row(chain: BoardType, letter: str, first: int, last: int) -> Dict[str, BoardType]:
    return {f"{x}{letter}": chain for x in range(first, last + 1)}


def empty_bag(state: GameState) -> None:
    # Undrawn tiles leave play so tile conservation still holds
    state.dead_tiles.extend(state.bag.undrawn())
    state.bag.position = len(state.bag.order)
