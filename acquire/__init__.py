from .types import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    CHAINS,
    NUM_TILES,
    ArrangementMode,
    BoardType,
    GameMode,
    Tile,
    tile_at,
    tile_xy,
)
from .errors import AcquireError, InvariantViolationError, RuleViolationError, SnapshotError
from .board import Board, classify_tile
from .tilebag import TileBag
from .scoreboard import ScoreBoard, chain_price, compute_bonuses
from .decisions import Decision, decision_to_obj
from .moves import (
    DisposeOfShares,
    Move,
    PlayTile,
    PurchaseShares,
    SelectChainToDisposeOfNext,
    SelectMergerSurvivor,
    SelectNewChain,
    StartGame,
    move_from_obj,
    move_to_obj,
)
from .history import HistoryMessage, MoveRecord
from .core import (
    Player,
    GameConfig,
    GameState,
    new_game,
    apply_move,
    current_decision,
    is_game_over,
    seat_of_user,
    check_invariants,
    final_standings,
    to_snapshot,
    from_snapshot,
    to_json,
)
from .views import view_for, history_for

__all__ = [
    "BOARD_HEIGHT",
    "BOARD_WIDTH",
    "CHAINS",
    "NUM_TILES",
    "ArrangementMode",
    "BoardType",
    "GameMode",
    "Tile",
    "tile_at",
    "tile_xy",
    "AcquireError",
    "InvariantViolationError",
    "RuleViolationError",
    "SnapshotError",
    "Board",
    "classify_tile",
    "TileBag",
    "ScoreBoard",
    "chain_price",
    "compute_bonuses",
    "Decision",
    "decision_to_obj",
    "DisposeOfShares",
    "Move",
    "PlayTile",
    "PurchaseShares",
    "SelectChainToDisposeOfNext",
    "SelectMergerSurvivor",
    "SelectNewChain",
    "StartGame",
    "move_from_obj",
    "move_to_obj",
    "HistoryMessage",
    "MoveRecord",
    "Player",
    "GameConfig",
    "GameState",
    "new_game",
    "apply_move",
    "current_decision",
    "is_game_over",
    "seat_of_user",
    "check_invariants",
    "final_standings",
    "to_snapshot",
    "from_snapshot",
    "to_json",
    "view_for",
    "history_for",
]
