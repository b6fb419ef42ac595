from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple
import copy
import logging

from . import rules
from .board import Board
from .decisions import Decision, GameOverDecision, StartGameDecision, decision_to_obj
from .errors import InvariantViolationError, RuleViolationError, SnapshotError
from .history import HistoryMessage, MoveRecord, record_to_obj
from .moves import Move, move_from_obj, move_to_obj
from .scoreboard import ScoreBoard
from .tilebag import TileBag
from .types import (
    CHAINS,
    NUM_TILES,
    RACK_SIZE,
    SHARES_PER_CHAIN,
    ArrangementMode,
    BoardType,
    GameMode,
    Tile,
    seats_for_mode,
    team_of,
)

logger = logging.getLogger(__name__)


@dataclass
class Player:
    id: int           # seat, 0..n-1
    user_id: int
    name: str
    team: int
    rack: List[Optional[Tile]] = field(default_factory=lambda: [None] * RACK_SIZE)
    rack_types: List[Optional[BoardType]] = field(default_factory=lambda: [None] * RACK_SIZE)


@dataclass
class GameConfig:
    game_mode: GameMode
    user_ids: List[int]
    usernames: List[str]
    host_user_id: int
    arrangement_mode: ArrangementMode = ArrangementMode.RANDOM_ORDER
    tile_bag: Optional[List[Tile]] = None  # partial bags are completed in ascending order
    seed: Optional[int] = None             # shuffle seed when no bag is given
    time_control_start: Optional[int] = None
    time_control_increment: Optional[int] = None


@dataclass
class GameState:
    cfg: GameConfig
    players: List[Player]
    board: Board
    bag: TileBag
    scores: ScoreBoard
    stack: List[Decision]
    records: List[MoveRecord] = field(default_factory=list)
    turn_player_id: int = 0
    position_tiles: List[Tile] = field(default_factory=list)
    dead_tiles: List[Tile] = field(default_factory=list)
    revealed_rack_tiles: Set[Tile] = field(default_factory=set)
    # Tiles drawn during the last move, with the seat allowed to see each (None: everyone)
    revealed_bag_tiles: List[Tuple[Tile, Optional[int]]] = field(default_factory=list)
    turns_without_tile: int = 0
    final_scored: bool = False


# Everything apply_move may touch besides the append-only records
_MUTABLE_FIELDS: Tuple[str, ...] = (
    "players",
    "board",
    "bag",
    "scores",
    "stack",
    "turn_player_id",
    "position_tiles",
    "dead_tiles",
    "revealed_rack_tiles",
    "revealed_bag_tiles",
    "turns_without_tile",
    "final_scored",
)


def new_game(cfg: GameConfig) -> GameState:
    try:
        mode = GameMode(cfg.game_mode)
        arrangement = ArrangementMode(cfg.arrangement_mode)
    except ValueError as e:
        raise SnapshotError(str(e), code="INVALID_SETUP") from e
    num_players, _team_size = seats_for_mode(mode)
    if len(cfg.user_ids) != num_players or len(cfg.usernames) != num_players:
        raise SnapshotError(
            "number of users does not match the game mode",
            code="INVALID_SETUP",
            context={"mode": mode.name, "users": len(cfg.user_ids)},
        )
    if len(set(cfg.user_ids)) != len(cfg.user_ids):
        raise SnapshotError("duplicated user id", code="INVALID_SETUP")
    if cfg.host_user_id not in cfg.user_ids:
        raise SnapshotError("host is not seated", code="INVALID_SETUP", context={"host": cfg.host_user_id})
    cfg.game_mode = mode
    cfg.arrangement_mode = arrangement

    players: List[Player] = []
    for i, (uid, name) in enumerate(zip(cfg.user_ids, cfg.usernames)):
        players.append(Player(id=i, user_id=uid, name=name, team=team_of(mode, i)))
    host_seat = cfg.user_ids.index(cfg.host_user_id)
    return GameState(
        cfg=cfg,
        players=players,
        board=Board(),
        bag=TileBag.build(cfg.tile_bag, cfg.seed),
        scores=ScoreBoard(num_players),
        stack=[StartGameDecision(host_seat)],
    )


def current_decision(state: GameState) -> Decision:
    if not state.stack:
        raise InvariantViolationError("decision stack is empty")
    return state.stack[-1]


def is_game_over(state: GameState) -> bool:
    return isinstance(current_decision(state), GameOverDecision)


def seat_of_user(state: GameState, user_id: int) -> Optional[int]:
    for p in state.players:
        if p.user_id == user_id:
            return p.id
    return None


def refresh_rack_types(state: GameState) -> None:
    for p in state.players:
        p.rack_types = [
            None if tile is None else rules.tile_type(state, tile, p.id) for tile in p.rack
        ]


def _push(state: GameState, decisions: List[Decision]) -> None:
    # The first decision of the list is resolved first
    pending = list(decisions)
    while True:
        state.stack.extend(reversed(pending))
        top = current_decision(state)
        follow = rules.prepare(state, top)
        if follow is None:
            return
        state.stack.pop()
        pending = follow


def _checkpoint(state: GameState) -> Tuple[Dict[str, Any], int]:
    return {name: copy.deepcopy(getattr(state, name)) for name in _MUTABLE_FIELDS}, len(state.records)


def _restore(state: GameState, backup: Tuple[Dict[str, Any], int]) -> None:
    values, num_records = backup
    for name, value in values.items():
        setattr(state, name, value)
    del state.records[num_records:]


def apply_move(
    state: GameState,
    move: Move,
    *,
    player_id: Optional[int] = None,
    timestamp: Optional[int] = None,
) -> List[HistoryMessage]:
    """Resolve the top decision with ``move``.

    Either the move is fully applied and its history messages are returned,
    or an error is raised and the state is left exactly as it was.
    """
    d = current_decision(state)
    if isinstance(d, GameOverDecision):
        raise RuleViolationError("game is over", code="GAME_OVER")
    if player_id is not None and player_id != d.player_id:
        raise RuleViolationError(
            "not this player's turn", code="NOT_YOUR_TURN", context={"expected": d.player_id, "got": player_id}
        )
    if move.kind != d.kind:
        raise RuleViolationError(
            "move does not answer the pending decision", code="WRONG_ACTION", context={"expected": d.kind, "got": move.kind}
        )

    backup = _checkpoint(state)
    record = MoveRecord(player_id=d.player_id, move=move, timestamp=timestamp)
    state.records.append(record)
    state.revealed_bag_tiles = []
    try:
        follow = rules.execute(state, d, move)
        state.stack.pop()
        _push(state, follow)
        refresh_rack_types(state)
        check_invariants(state)
    except RuleViolationError:
        _restore(state, backup)
        raise
    except InvariantViolationError as e:
        logger.error("invariant violated while applying %s: %s", move.kind, e, exc_info=True)
        _restore(state, backup)
        raise
    return list(record.messages)


def check_invariants(state: GameState) -> None:
    seen: List[Tile] = []
    for p in state.players:
        tiles = [t for t in p.rack if t is not None]
        if len(p.rack) != RACK_SIZE:
            raise InvariantViolationError("rack has the wrong number of slots", context={"player": p.id})
        seen.extend(tiles)
    seen.extend(state.bag.undrawn())
    seen.extend(state.board.placed_tiles())
    seen.extend(state.dead_tiles)
    if sorted(seen) != list(range(NUM_TILES)):
        raise InvariantViolationError("tiles are not conserved", context={"count": len(seen)})

    for c in CHAINS:
        size = state.scores.chain_size[c]
        if size < 0 or size > NUM_TILES or state.board.count(c) != size:
            raise InvariantViolationError("chain size does not match the board", context={"chain": c.name, "size": size})
        available = state.scores.available(c)
        if available < 0 or available > SHARES_PER_CHAIN:
            raise InvariantViolationError("bank shares out of range", context={"chain": c.name, "available": available})
    for p in state.players:
        if any(n < 0 for n in state.scores.shares[p.id]) or state.scores.cash[p.id] < 0:
            raise InvariantViolationError("negative holdings", context={"player": p.id})

    top = current_decision(state)
    if not 0 <= top.player_id < len(state.players):
        raise InvariantViolationError("decision names an unknown player", context={"player": top.player_id})


def final_standings(state: GameState) -> List[Dict[str, Any]]:
    """Players ordered by net worth (best first); in team games teams are
    ranked by the sum of their members' net worth."""
    rows: List[Dict[str, Any]] = []
    for p in state.players:
        rows.append({"playerId": p.id, "team": p.team, "netWorth": state.scores.net_worth(p.id)})
    team_totals: Dict[int, int] = {}
    for row in rows:
        team_totals[row["team"]] = team_totals.get(row["team"], 0) + row["netWorth"]
    for row in rows:
        row["teamNetWorth"] = team_totals[row["team"]]
    rows.sort(key=lambda r: (-r["teamNetWorth"], -r["netWorth"], r["playerId"]))
    return rows


# --- snapshots (configuration + move list) ---

def to_snapshot(state: GameState) -> List[Any]:
    cfg = state.cfg
    return [
        int(cfg.game_mode),
        int(cfg.arrangement_mode),
        cfg.time_control_start,
        cfg.time_control_increment,
        list(cfg.user_ids),
        list(cfg.usernames),
        cfg.host_user_id,
        list(state.bag.order),
        [[move_to_obj(r.move), r.timestamp] for r in state.records],
    ]


def from_snapshot(data: Any) -> GameState:
    if not isinstance(data, list) or len(data) != 9:
        raise SnapshotError("snapshot must be a list of 9 entries")
    mode, arrangement, tc_start, tc_inc, user_ids, usernames, host, bag, moves = data
    if not isinstance(user_ids, list) or not isinstance(usernames, list) or not isinstance(bag, list):
        raise SnapshotError("snapshot users and tile bag must be lists")
    if not isinstance(moves, list):
        raise SnapshotError("snapshot moves must be a list")
    try:
        cfg = GameConfig(
            game_mode=GameMode(mode),
            arrangement_mode=ArrangementMode(arrangement),
            user_ids=list(user_ids),
            usernames=list(usernames),
            host_user_id=host,
            tile_bag=list(bag),
            time_control_start=tc_start,
            time_control_increment=tc_inc,
        )
    except ValueError as e:
        raise SnapshotError(str(e)) from e
    state = new_game(cfg)
    return replay(state, moves)


def replay(state: GameState, moves: List[Any]) -> GameState:
    for i, entry in enumerate(moves):
        if not isinstance(entry, list) or len(entry) != 2:
            raise SnapshotError("snapshot move must be [move, timestamp]", context={"index": i})
        obj, timestamp = entry
        try:
            apply_move(state, move_from_obj(obj), timestamp=timestamp)
        except RuleViolationError as e:
            raise SnapshotError(f"move {i} cannot be replayed: {e.message}", context={"index": i, "code": e.code}) from e
    return state


# --- full JSON (unredacted, for debugging and tests) ---

def to_json(state: GameState) -> Dict[str, object]:
    cfg = state.cfg
    players_obj: List[Dict[str, object]] = []
    for p in state.players:
        players_obj.append({
            "id": p.id,
            "userId": p.user_id,
            "name": p.name,
            "team": p.team,
            "rack": list(p.rack),
            "rackTypes": [None if t is None else int(t) for t in p.rack_types],
            "cash": state.scores.cash[p.id],
            "shares": list(state.scores.shares[p.id]),
            "netWorth": state.scores.net_worth(p.id),
        })
    data: Dict[str, object] = {
        "schemaVersion": 1,
        "config": {
            "gameMode": int(cfg.game_mode),
            "playerArrangementMode": int(cfg.arrangement_mode),
            "hostUserId": cfg.host_user_id,
            "timeControlStart": cfg.time_control_start,
            "timeControlIncrement": cfg.time_control_increment,
        },
        "players": players_obj,
        "board": [[int(cell) for cell in row] for row in state.board.cells],
        "scoreBoard": {
            "available": [state.scores.available(c) for c in CHAINS],
            "chainSize": list(state.scores.chain_size),
            "price": [state.scores.price(c) for c in CHAINS],
        },
        "tileBagRemaining": state.bag.remaining(),
        "deadTiles": list(state.dead_tiles),
        "revealedTileBagTiles": [[tile, seat] for tile, seat in state.revealed_bag_tiles],
        "turnPlayerId": state.turn_player_id,
        "nextAction": decision_to_obj(current_decision(state)),
        "history": [record_to_obj(r, reveal_all=True) for r in state.records],
    }
    if is_game_over(state):
        data["standings"] = final_standings(state)
    return data
