"""
Plain-text game scripts.

A script is a header (one ``key: value`` per line, closed by a blank line)
followed by moves:

    game mode: SINGLES_2
    player arrangement mode: EXACT_ORDER
    tile bag: 1A, 2A, 3A
    user: 1 Alice
    user: 2 Bob
    host: 1

    action: 0 StartGame
    timestamp: 1500
    action: 0 PlayTile 5C

``run_script`` replays it and returns the printable trace (board, score
board, racks, tiles drawn, history messages and next decision after every move,
errors inline) followed by the game snapshot. A ``me: <user id>`` header line
renders racks, draws and history as that user would see them.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence, Tuple
import json

from .core import GameConfig, GameState, apply_move, current_decision, is_game_over, new_game, to_snapshot
from .errors import AcquireError, RuleViolationError
from .notation import (
    board_lines,
    decision_to_str,
    message_to_str,
    move_from_params,
    rack_to_str,
    score_board_lines,
    tile_to_str,
    tiles_from_str,
    tiles_to_str,
)
from .types import ArrangementMode, BoardType, GameMode
from .views import board_for, can_see_rack, revealed_bag_tiles_for

_BOARD_SPACER = " " * 12


def _header_lines(cfg: GameConfig, me: Optional[int]) -> List[str]:
    lines = [
        f"game mode: {GameMode(cfg.game_mode).name}",
        f"player arrangement mode: {ArrangementMode(cfg.arrangement_mode).name}",
    ]
    if cfg.tile_bag:
        lines.append(f"tile bag: {tiles_to_str(cfg.tile_bag)}")
    for uid, name in zip(cfg.user_ids, cfg.usernames):
        lines.append(f"user: {uid} {name}")
    lines.append(f"host: {cfg.host_user_id}")
    if me is not None:
        lines.append(f"me: {me}")
    return lines


def state_lines(state: GameState, viewer: Optional[int] = None, *, reveal_all: bool = True) -> List[str]:
    """Board beside the score board, then racks, last messages and next decision."""
    game_over = is_game_over(state)
    top = current_decision(state)
    cells = board_for(state, viewer) if not reveal_all else [[int(c) for c in row] for row in state.board.cells]
    left = board_lines(cells)
    right = score_board_lines(
        state.scores,
        -1 if game_over else state.turn_player_id,
        -1 if game_over else top.player_id,
    )
    lines: List[str] = []
    for i in range(max(len(left), len(right))):
        parts = [left[i] if i < len(left) else _BOARD_SPACER]
        if i < len(right):
            parts.append("  " + right[i])
        lines.append("  " + "".join(parts))

    lines.append("  tile racks:")
    for p in state.players:
        if reveal_all or can_see_rack(state, viewer, p.id):
            lines.append(f"    {p.id}: {rack_to_str(p.rack, p.rack_types)}")
        else:
            shown = [t if t in state.revealed_rack_tiles else None for t in p.rack]
            types: List[Optional[BoardType]] = [None] * len(shown)
            lines.append(f"    {p.id}: {rack_to_str(shown, types).replace('none', '?')}")

    if state.revealed_bag_tiles:
        if reveal_all:
            shown_bag = ", ".join(
                f"{tile_to_str(t)}:{'all' if seat is None else seat}" for t, seat in state.revealed_bag_tiles
            )
        else:
            shown_bag = tiles_to_str(revealed_bag_tiles_for(state, viewer))
        lines.append(f"  revealed tile bag tiles: {shown_bag}")

    lines.append("  history messages:")
    if state.records:
        for msg in state.records[-1].messages:
            shown_msg = msg if reveal_all else msg.redacted_for(viewer)
            lines.append(f"    {message_to_str(shown_msg)}")
    lines.append(f"  next action: {decision_to_str(top)}")
    return lines


def snapshot_lines(state: GameState) -> List[str]:
    snap = to_snapshot(state)
    lines = ["["]
    for entry in snap[:-1]:
        lines.append(f"  {json.dumps(entry, ensure_ascii=False)},")
    lines.append("  [")
    moves: List[Any] = snap[-1]
    for i, move in enumerate(moves):
        comma = "," if i < len(moves) - 1 else ""
        lines.append(f"    {json.dumps(move, ensure_ascii=False)}{comma}")
    lines.append("  ]")
    lines.append("]")
    return lines


def _parse_header(lines: Sequence[str], out: List[str]) -> Tuple[Optional[GameConfig], Optional[int], int]:
    mode = GameMode.SINGLES_1
    arrangement = ArrangementMode.RANDOM_ORDER
    bag: List[int] = []
    user_ids: List[int] = []
    usernames: List[str] = []
    host = 0
    me: Optional[int] = None
    for i, line in enumerate(lines):
        if not line:
            cfg = GameConfig(
                game_mode=mode,
                arrangement_mode=arrangement,
                user_ids=user_ids,
                usernames=usernames,
                host_user_id=host,
                tile_bag=bag or None,
            )
            return cfg, me, i + 1
        key, _, value = line.partition(": ")
        if key == "game mode":
            mode = GameMode[value]
        elif key == "player arrangement mode":
            arrangement = ArrangementMode[value]
        elif key == "tile bag":
            bag = tiles_from_str(value)
        elif key == "user":
            uid, _, name = value.partition(" ")
            user_ids.append(int(uid))
            usernames.append(name)
        elif key == "host":
            host = int(value)
        elif key == "me":
            me = None if value == "null" else int(value)
        else:
            out.append(f"unrecognized line: {line}")
    return None, me, len(lines)


def run_script(lines: Sequence[str]) -> Tuple[List[str], Optional[GameState]]:
    out: List[str] = []
    cfg, me, start = _parse_header(lines, out)
    if cfg is None:
        out.append("missing blank line after the header")
        return out, None
    state = new_game(cfg)
    out.extend(_header_lines(cfg, me))
    viewer = None
    if me is not None:
        viewer = cfg.user_ids.index(me) if me in cfg.user_ids else None

    timestamp: Optional[int] = None
    for line in lines[start:]:
        key, _, value = line.partition(": ")
        if key == "timestamp":
            timestamp = int(value)
            continue
        if key != "action":
            if line.strip():
                out.append(f"unrecognized line: {line}")
            continue
        parts = value.split()
        out.append("")
        if timestamp is not None:
            out.append(f"timestamp: {timestamp}")
        out.append(f"action: {value}")
        try:
            if len(parts) < 2:
                raise ValueError("action needs a player id and an action name")
            player_id = int(parts[0])
            move = move_from_params(parts[1], parts[2:])  # type: ignore[arg-type]
            apply_move(state, move, player_id=player_id, timestamp=timestamp)
            out.extend(state_lines(state, viewer, reveal_all=viewer is None))
        except RuleViolationError as e:
            out.append(f"  error: {e.message}")
        except (AcquireError, ValueError) as e:
            out.append(f"  unknown error: {e}")
        timestamp = None

    out.append("")
    out.append("Game JSON:")
    out.extend(snapshot_lines(state))
    out.append("")
    return out, state
