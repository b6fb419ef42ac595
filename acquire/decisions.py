from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Union

from .types import ActionKind, BoardType, Tile


# Entries of the decision stack: what the engine waits for next.

@dataclass
class StartGameDecision:
    player_id: int
    kind: ClassVar[ActionKind] = "StartGame"


@dataclass
class PlayTileDecision:
    player_id: int
    kind: ClassVar[ActionKind] = "PlayTile"


@dataclass
class SelectNewChainDecision:
    player_id: int
    available: List[BoardType]
    tile: Tile
    kind: ClassVar[ActionKind] = "SelectNewChain"


@dataclass
class SelectMergerSurvivorDecision:
    player_id: int
    chains_by_size: List[List[BoardType]]
    tile: Tile
    kind: ClassVar[ActionKind] = "SelectMergerSurvivor"


@dataclass
class SelectChainToDisposeOfNextDecision:
    player_id: int
    defunct: List[BoardType]
    survivor: BoardType
    tile: Tile
    candidates: List[BoardType] = field(default_factory=list)
    kind: ClassVar[ActionKind] = "SelectChainToDisposeOfNext"


@dataclass
class DisposeOfSharesDecision:
    player_id: int
    defunct: BoardType
    survivor: BoardType
    kind: ClassVar[ActionKind] = "DisposeOfShares"


@dataclass
class PurchaseSharesDecision:
    player_id: int
    kind: ClassVar[ActionKind] = "PurchaseShares"


@dataclass
class GameOverDecision:
    player_id: int
    kind: ClassVar[ActionKind] = "GameOver"


Decision = Union[
    StartGameDecision,
    PlayTileDecision,
    SelectNewChainDecision,
    SelectMergerSurvivorDecision,
    SelectChainToDisposeOfNextDecision,
    DisposeOfSharesDecision,
    PurchaseSharesDecision,
    GameOverDecision,
]


def decision_payload(d: Decision) -> Dict[str, Any]:
    if isinstance(d, SelectNewChainDecision):
        return {"chains": [int(c) for c in d.available], "tile": d.tile}
    if isinstance(d, SelectMergerSurvivorDecision):
        return {"chainsBySize": [[int(c) for c in g] for g in d.chains_by_size], "tile": d.tile}
    if isinstance(d, SelectChainToDisposeOfNextDecision):
        return {
            "chains": [int(c) for c in d.candidates],
            "defunct": [int(c) for c in d.defunct],
            "survivor": int(d.survivor),
        }
    if isinstance(d, DisposeOfSharesDecision):
        return {"defunct": int(d.defunct), "survivor": int(d.survivor)}
    return {}


def decision_to_obj(d: Decision) -> Dict[str, Any]:
    return {"kind": d.kind, "playerId": d.player_id, "payload": decision_payload(d)}
