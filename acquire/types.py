from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Literal, Tuple, TypeAlias

BOARD_WIDTH = 12
BOARD_HEIGHT = 9
NUM_TILES = BOARD_WIDTH * BOARD_HEIGHT

RACK_SIZE = 6
SHARES_PER_CHAIN = 25
STARTING_CASH = 6000
MAX_SHARES_PER_TURN = 3
SAFE_CHAIN_SIZE = 11
END_GAME_CHAIN_SIZE = 41

Tile: TypeAlias = int


class BoardType(IntEnum):
    LUXOR = 0
    TOWER = 1
    AMERICAN = 2
    FESTIVAL = 3
    WORLDWIDE = 4
    CONTINENTAL = 5
    IMPERIAL = 6
    NOTHING = 7
    NOTHING_YET = 8
    CANT_PLAY_EVER = 9
    I_HAVE_THIS = 10
    WILL_PUT_LONELY_TILE_DOWN = 11
    HAVE_NEIGHBORING_TILE_TOO = 12
    WILL_FORM_NEW_CHAIN = 13
    WILL_MERGE_CHAINS = 14
    CANT_PLAY_NOW = 15


CHAINS: Tuple[BoardType, ...] = (
    BoardType.LUXOR,
    BoardType.TOWER,
    BoardType.AMERICAN,
    BoardType.FESTIVAL,
    BoardType.WORLDWIDE,
    BoardType.CONTINENTAL,
    BoardType.IMPERIAL,
)

CHAIN_NAMES: Dict[BoardType, str] = {
    BoardType.LUXOR: "Luxor",
    BoardType.TOWER: "Tower",
    BoardType.AMERICAN: "American",
    BoardType.FESTIVAL: "Festival",
    BoardType.WORLDWIDE: "Worldwide",
    BoardType.CONTINENTAL: "Continental",
    BoardType.IMPERIAL: "Imperial",
}

# Added to the base price table: cheap, medium, expensive
CHAIN_PRICE_CLASS: Dict[BoardType, int] = {
    BoardType.LUXOR: 0,
    BoardType.TOWER: 0,
    BoardType.AMERICAN: 1,
    BoardType.FESTIVAL: 1,
    BoardType.WORLDWIDE: 1,
    BoardType.CONTINENTAL: 2,
    BoardType.IMPERIAL: 2,
}

UNPLAYABLE_TYPES: Tuple[BoardType, ...] = (BoardType.CANT_PLAY_EVER, BoardType.CANT_PLAY_NOW)


class GameMode(IntEnum):
    SINGLES_1 = 1
    SINGLES_2 = 2
    SINGLES_3 = 3
    SINGLES_4 = 4
    SINGLES_5 = 5
    SINGLES_6 = 6
    TEAMS_2_VS_2 = 7
    TEAMS_2_VS_2_VS_2 = 8
    TEAMS_3_VS_3 = 9


# (number of players, team size)
GAME_MODE_SEATS: Dict[GameMode, Tuple[int, int]] = {
    GameMode.SINGLES_1: (1, 1),
    GameMode.SINGLES_2: (2, 1),
    GameMode.SINGLES_3: (3, 1),
    GameMode.SINGLES_4: (4, 1),
    GameMode.SINGLES_5: (5, 1),
    GameMode.SINGLES_6: (6, 1),
    GameMode.TEAMS_2_VS_2: (4, 2),
    GameMode.TEAMS_2_VS_2_VS_2: (6, 2),
    GameMode.TEAMS_3_VS_3: (6, 3),
}


class ArrangementMode(IntEnum):
    RANDOM_ORDER = 1
    EXACT_ORDER = 2
    SPECIFY_TEAMS = 3


ActionKind: TypeAlias = Literal[
    "StartGame",
    "PlayTile",
    "SelectNewChain",
    "SelectMergerSurvivor",
    "SelectChainToDisposeOfNext",
    "DisposeOfShares",
    "PurchaseShares",
    "GameOver",
]

HistoryKind: TypeAlias = Literal[
    "TurnBegan",
    "DrewPositionTile",
    "StartedGame",
    "DrewTile",
    "HasNoPlayableTile",
    "PlayedTile",
    "FormedChain",
    "MergedChains",
    "SelectedMergerSurvivor",
    "SelectedChainToDisposeOfNext",
    "ReceivedBonus",
    "DisposedOfShares",
    "CouldNotAffordAnyShares",
    "PurchasedShares",
    "DrewLastTile",
    "ReplacedDeadTile",
    "EndedGame",
    "NoTilesPlayedForEntireRound",
    "AllTilesPlayed",
]


def is_chain(t: int) -> bool:
    return BoardType.LUXOR <= t <= BoardType.IMPERIAL


def tile_xy(tile: Tile) -> Tuple[int, int]:
    return tile // BOARD_HEIGHT, tile % BOARD_HEIGHT


def tile_at(x: int, y: int) -> Tile:
    return x * BOARD_HEIGHT + y


def all_tiles() -> List[Tile]:
    return list(range(NUM_TILES))


def seats_for_mode(mode: GameMode) -> Tuple[int, int]:
    return GAME_MODE_SEATS[mode]


def team_of(mode: GameMode, player_id: int) -> int:
    num_players, team_size = GAME_MODE_SEATS[mode]
    num_teams = num_players // team_size
    return player_id % num_teams
