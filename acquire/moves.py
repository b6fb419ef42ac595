from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Union

from .errors import RuleViolationError
from .types import ActionKind, BoardType, Tile, is_chain


# Player-submitted answers to the decision on top of the stack.

@dataclass(frozen=True)
class StartGame:
    kind: ClassVar[ActionKind] = "StartGame"


@dataclass(frozen=True)
class PlayTile:
    tile: Tile
    kind: ClassVar[ActionKind] = "PlayTile"


@dataclass(frozen=True)
class SelectNewChain:
    chain: BoardType
    kind: ClassVar[ActionKind] = "SelectNewChain"


@dataclass(frozen=True)
class SelectMergerSurvivor:
    chain: BoardType
    kind: ClassVar[ActionKind] = "SelectMergerSurvivor"


@dataclass(frozen=True)
class SelectChainToDisposeOfNext:
    chain: BoardType
    kind: ClassVar[ActionKind] = "SelectChainToDisposeOfNext"


@dataclass(frozen=True)
class DisposeOfShares:
    trade_amount: int
    sell_amount: int
    kind: ClassVar[ActionKind] = "DisposeOfShares"


@dataclass(frozen=True)
class PurchaseShares:
    chains: List[BoardType] = field(default_factory=list)
    end_game: bool = False
    kind: ClassVar[ActionKind] = "PurchaseShares"


Move = Union[
    StartGame,
    PlayTile,
    SelectNewChain,
    SelectMergerSurvivor,
    SelectChainToDisposeOfNext,
    DisposeOfShares,
    PurchaseShares,
]

# JSON key per move, e.g. {"playTile": {"tile": 12}}
_OBJ_KEYS: Dict[ActionKind, str] = {
    "StartGame": "startGame",
    "PlayTile": "playTile",
    "SelectNewChain": "selectNewChain",
    "SelectMergerSurvivor": "selectMergerSurvivor",
    "SelectChainToDisposeOfNext": "selectChainToDisposeOfNext",
    "DisposeOfShares": "disposeOfShares",
    "PurchaseShares": "purchaseShares",
}
_KINDS_BY_KEY: Dict[str, ActionKind] = {v: k for k, v in _OBJ_KEYS.items()}


def move_to_obj(move: Move) -> Dict[str, Any]:
    body: Dict[str, Any]
    if isinstance(move, PlayTile):
        body = {"tile": move.tile}
    elif isinstance(move, (SelectNewChain, SelectMergerSurvivor, SelectChainToDisposeOfNext)):
        body = {"chain": int(move.chain)}
    elif isinstance(move, DisposeOfShares):
        body = {"tradeAmount": move.trade_amount, "sellAmount": move.sell_amount}
    elif isinstance(move, PurchaseShares):
        body = {"chains": [int(c) for c in move.chains], "endGame": bool(move.end_game)}
    else:
        body = {}
    return {_OBJ_KEYS[move.kind]: body}


def _int_field(body: Mapping[str, Any], name: str, code: str) -> int:
    v = body.get(name)
    if not isinstance(v, int) or isinstance(v, bool):
        raise RuleViolationError(f"{name} must be an integer", code=code, context={name: v})
    return v


def _chain_field(value: Any) -> BoardType:
    if not isinstance(value, int) or isinstance(value, bool) or not is_chain(value):
        raise RuleViolationError("parameter is not a valid chain", code="INVALID_CHAIN", context={"chain": value})
    return BoardType(value)


def move_from_obj(obj: Any) -> Move:
    if not isinstance(obj, dict) or len(obj) != 1:
        raise RuleViolationError("move must be an object with exactly one key", code="MALFORMED_MOVE")
    key, body = next(iter(obj.items()))
    kind = _KINDS_BY_KEY.get(key)
    if kind is None:
        raise RuleViolationError("unknown move", code="MALFORMED_MOVE", context={"move": key})
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise RuleViolationError("move parameters must be an object", code="MALFORMED_MOVE")
    if kind == "StartGame":
        return StartGame()
    if kind == "PlayTile":
        return PlayTile(_int_field(body, "tile", "INVALID_TILE"))
    if kind == "SelectNewChain":
        return SelectNewChain(_chain_field(body.get("chain")))
    if kind == "SelectMergerSurvivor":
        return SelectMergerSurvivor(_chain_field(body.get("chain")))
    if kind == "SelectChainToDisposeOfNext":
        return SelectChainToDisposeOfNext(_chain_field(body.get("chain")))
    if kind == "DisposeOfShares":
        return DisposeOfShares(
            _int_field(body, "tradeAmount", "INVALID_AMOUNT"),
            _int_field(body, "sellAmount", "INVALID_AMOUNT"),
        )
    chains = body.get("chains", [])
    if not isinstance(chains, list):
        raise RuleViolationError("chains must be a list", code="MALFORMED_MOVE")
    end_game = body.get("endGame", False)
    if not isinstance(end_game, bool):
        raise RuleViolationError("endGame must be a boolean", code="MALFORMED_MOVE")
    return PurchaseShares([_chain_field(c) for c in chains], end_game)
