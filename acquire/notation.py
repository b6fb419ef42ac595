from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .decisions import (
    Decision,
    DisposeOfSharesDecision,
    SelectChainToDisposeOfNextDecision,
    SelectMergerSurvivorDecision,
    SelectNewChainDecision,
)
from .errors import RuleViolationError
from .history import HistoryMessage
from .moves import (
    DisposeOfShares,
    Move,
    PlayTile,
    PurchaseShares,
    SelectChainToDisposeOfNext,
    SelectMergerSurvivor,
    SelectNewChain,
    StartGame,
)
from .scoreboard import ScoreBoard
from .types import BOARD_WIDTH, CHAINS, ActionKind, BoardType, Tile, tile_at, tile_xy

ROW_LETTERS = "ABCDEFGHI"

# Board / rack legend
BOARD_TYPE_CHARS: Dict[BoardType, str] = {
    BoardType.LUXOR: "L",
    BoardType.TOWER: "T",
    BoardType.AMERICAN: "A",
    BoardType.FESTIVAL: "F",
    BoardType.WORLDWIDE: "W",
    BoardType.CONTINENTAL: "C",
    BoardType.IMPERIAL: "I",
    BoardType.NOTHING: "·",
    BoardType.NOTHING_YET: "O",
    BoardType.CANT_PLAY_EVER: "█",
    BoardType.I_HAVE_THIS: "i",
    BoardType.WILL_PUT_LONELY_TILE_DOWN: "l",
    BoardType.HAVE_NEIGHBORING_TILE_TOO: "h",
    BoardType.WILL_FORM_NEW_CHAIN: "n",
    BoardType.WILL_MERGE_CHAINS: "m",
    BoardType.CANT_PLAY_NOW: "c",
}
CHAINS_BY_LETTER: Dict[str, BoardType] = {BOARD_TYPE_CHARS[c]: c for c in CHAINS}
NO_CHAINS = "x"


def tile_to_str(tile: Optional[Tile]) -> str:
    if tile is None:
        return "?"
    x, y = tile_xy(tile)
    return f"{x + 1}{ROW_LETTERS[y]}"


def tile_from_str(s: str) -> Tile:
    s = s.strip().upper()
    if len(s) < 2 or not s[:-1].isdigit() or s[-1] not in ROW_LETTERS:
        raise RuleViolationError("not a tile", code="INVALID_TILE", context={"tile": s})
    x = int(s[:-1]) - 1
    y = ROW_LETTERS.index(s[-1])
    if x < 0 or x >= BOARD_WIDTH:
        raise RuleViolationError("not a tile", code="INVALID_TILE", context={"tile": s})
    return tile_at(x, y)


def tiles_to_str(tiles: Sequence[Optional[Tile]]) -> str:
    return ", ".join(tile_to_str(t) for t in tiles)


def tiles_from_str(s: str) -> List[Tile]:
    return [tile_from_str(part) for part in s.split(",") if part.strip()]


def chain_to_str(chain: BoardType) -> str:
    return BOARD_TYPE_CHARS[chain]


def chain_from_str(s: str) -> BoardType:
    chain = CHAINS_BY_LETTER.get(s.strip().upper())
    if chain is None:
        raise RuleViolationError("parameter is not a valid chain", code="INVALID_CHAIN", context={"chain": s})
    return chain


def chains_to_str(chains: Sequence[BoardType]) -> str:
    return ",".join(chain_to_str(c) for c in chains)


# --- moves ---

def move_params(move: Move) -> List[str]:
    if isinstance(move, PlayTile):
        return [tile_to_str(move.tile)]
    if isinstance(move, (SelectNewChain, SelectMergerSurvivor, SelectChainToDisposeOfNext)):
        return [chain_to_str(move.chain)]
    if isinstance(move, DisposeOfShares):
        return [str(move.trade_amount), str(move.sell_amount)]
    if isinstance(move, PurchaseShares):
        chains = chains_to_str(move.chains) if move.chains else NO_CHAINS
        return [chains, "1" if move.end_game else "0"]
    return []


def move_from_params(kind: ActionKind, params: Sequence[str]) -> Move:
    def need(n: int) -> None:
        if len(params) < n:
            raise RuleViolationError(f"{kind} needs {n} parameter(s)", code="MALFORMED_MOVE")

    if kind == "StartGame":
        return StartGame()
    if kind == "PlayTile":
        need(1)
        return PlayTile(tile_from_str(params[0]))
    if kind == "SelectNewChain":
        need(1)
        return SelectNewChain(chain_from_str(params[0]))
    if kind == "SelectMergerSurvivor":
        need(1)
        return SelectMergerSurvivor(chain_from_str(params[0]))
    if kind == "SelectChainToDisposeOfNext":
        need(1)
        return SelectChainToDisposeOfNext(chain_from_str(params[0]))
    if kind == "DisposeOfShares":
        need(2)
        try:
            return DisposeOfShares(int(params[0]), int(params[1]))
        except ValueError as e:
            raise RuleViolationError("amounts must be integers", code="INVALID_AMOUNT") from e
    if kind == "PurchaseShares":
        chains: List[BoardType] = []
        if params and params[0] != NO_CHAINS:
            chains = [chain_from_str(s) for s in params[0].split(",")]
        end_game = len(params) > 1 and params[1] == "1"
        return PurchaseShares(chains, end_game)
    raise RuleViolationError("no move answers this decision", code="WRONG_ACTION", context={"kind": kind})


def move_to_str(move: Move) -> str:
    return " ".join([move.kind] + move_params(move))


# --- history and decisions ---

def message_to_str(msg: HistoryMessage) -> str:
    parts: List[str] = []
    if msg.player_id is not None:
        parts.append(str(msg.player_id))
    parts.append(msg.kind)
    for name, value in msg.params:
        if name == "tile":
            parts.append(tile_to_str(value))
        elif name == "tiles":
            parts.append(",".join(tile_to_str(t) for t in value))
        elif name == "chain":
            parts.append(chain_to_str(BoardType(value)))
        elif name == "chains":
            parts.append(chains_to_str([BoardType(c) for c in value]))
        elif name == "shares":
            parts.append(",".join(f"{n}{chain_to_str(BoardType(c))}" for c, n in value) if value else NO_CHAINS)
        else:
            parts.append(str(value))
    return " ".join(parts)


def decision_to_str(d: Decision) -> str:
    parts = [str(d.player_id), d.kind]
    if isinstance(d, SelectNewChainDecision):
        parts.append(chains_to_str(d.available))
    elif isinstance(d, SelectMergerSurvivorDecision):
        parts.append(chains_to_str(d.chains_by_size[0]))
    elif isinstance(d, SelectChainToDisposeOfNextDecision):
        parts.append(chains_to_str(d.candidates))
    elif isinstance(d, DisposeOfSharesDecision):
        parts.append(chain_to_str(d.defunct))
    return " ".join(parts)


# --- board and score board rendering ---

def board_lines(cells: Sequence[Sequence[int]]) -> List[str]:
    return ["".join(BOARD_TYPE_CHARS[BoardType(cell)] for cell in row) for row in cells]


_SCORE_WIDTHS = [1, 2, 2, 2, 2, 2, 2, 2, 5, 5]


def _score_line(entries: Sequence[str]) -> str:
    return " ".join(e.rjust(w) for e, w in zip(entries, _SCORE_WIDTHS))


def score_board_lines(scores: ScoreBoard, turn_player_id: int = -1, move_player_id: int = -1) -> List[str]:
    lines = [_score_line(["P"] + [chain_to_str(c) for c in CHAINS] + ["Cash", "Net"])]
    for pid in range(scores.num_players):
        marker = "T" if pid == turn_player_id else ("M" if pid == move_player_id else "")
        shares = ["" if n == 0 else str(n) for n in scores.shares[pid]]
        lines.append(_score_line([marker] + shares + [str(scores.cash[pid]), str(scores.net_worth(pid))]))
    lines.append(_score_line(["A"] + [str(scores.available(c)) for c in CHAINS]))
    lines.append(_score_line(["C"] + [str(scores.chain_size[c]) if scores.chain_size[c] else "-" for c in CHAINS]))
    lines.append(_score_line(["P"] + [str(scores.price(c) // 100) if scores.price(c) else "-" for c in CHAINS]))
    return lines


def rack_to_str(rack: Sequence[Optional[Tile]], types: Sequence[Optional[BoardType]]) -> str:
    parts: List[str] = []
    for tile, t in zip(rack, types):
        if tile is None:
            parts.append("none")
        elif t is None:
            parts.append(tile_to_str(tile))
        else:
            parts.append(f"{tile_to_str(tile)}({BOARD_TYPE_CHARS[t]})")
    return " ".join(parts)
