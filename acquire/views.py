from __future__ import annotations

from typing import Any, Dict, List, Optional

from .core import GameState, current_decision, final_standings, is_game_over
from .decisions import decision_to_obj
from .history import record_to_obj
from .types import CHAINS, BoardType, tile_xy


def can_see_rack(state: GameState, viewer: Optional[int], owner: int) -> bool:
    # Own rack and teammates' racks; spectators see no rack
    if viewer is None:
        return False
    return state.players[viewer].team == state.players[owner].team


def board_for(state: GameState, viewer: Optional[int]) -> List[List[int]]:
    rows = [[int(cell) for cell in row] for row in state.board.cells]
    if viewer is not None:
        for tile in state.players[viewer].rack:
            if tile is not None:
                x, y = tile_xy(tile)
                rows[y][x] = int(BoardType.I_HAVE_THIS)
    return rows


def rack_for(state: GameState, viewer: Optional[int], owner: int) -> Dict[str, Any]:
    p = state.players[owner]
    full = can_see_rack(state, viewer, owner)
    tiles: List[Optional[int]] = []
    types: List[Optional[int]] = []
    for tile, t in zip(p.rack, p.rack_types):
        if tile is not None and (full or tile in state.revealed_rack_tiles):
            tiles.append(tile)
            types.append(None if t is None else int(t))
        else:
            # Placeholder keeps the slot count visible
            tiles.append(None)
            types.append(None)
    return {"tiles": tiles, "types": types, "count": sum(1 for t in p.rack if t is not None)}


def revealed_bag_tiles_for(state: GameState, viewer: Optional[int]) -> List[Optional[int]]:
    # A draw is seen by the drawing team; position tiles by everyone
    out: List[Optional[int]] = []
    for tile, seat in state.revealed_bag_tiles:
        if seat is None or can_see_rack(state, viewer, seat):
            out.append(tile)
        else:
            out.append(None)
    return out


def view_for(state: GameState, viewer: Optional[int]) -> Dict[str, Any]:
    """Projection of the current state for one seat, or a spectator (None)."""
    if viewer is not None and not 0 <= viewer < len(state.players):
        raise ValueError(f"unknown viewer seat {viewer}")
    players_obj: List[Dict[str, Any]] = []
    for p in state.players:
        players_obj.append({
            "id": p.id,
            "userId": p.user_id,
            "name": p.name,
            "team": p.team,
            "rack": rack_for(state, viewer, p.id),
            "cash": state.scores.cash[p.id],
            "shares": list(state.scores.shares[p.id]),
            "netWorth": state.scores.net_worth(p.id),
        })
    last = state.records[-1] if state.records else None
    data: Dict[str, Any] = {
        "viewer": viewer,
        "board": board_for(state, viewer),
        "players": players_obj,
        "scoreBoard": {
            "available": [state.scores.available(c) for c in CHAINS],
            "chainSize": list(state.scores.chain_size),
            "price": [state.scores.price(c) for c in CHAINS],
        },
        "tileBagRemaining": state.bag.remaining(),
        "revealedTileBagTiles": revealed_bag_tiles_for(state, viewer),
        "turnPlayerId": state.turn_player_id,
        "nextAction": decision_to_obj(current_decision(state)),
        "lastMove": None if last is None else record_to_obj(last, viewer),
        "gameOver": is_game_over(state),
    }
    if data["gameOver"]:
        data["standings"] = final_standings(state)
    return data


def history_for(state: GameState, viewer: Optional[int]) -> List[Dict[str, Any]]:
    return [record_to_obj(r, viewer) for r in state.records]
