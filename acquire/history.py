from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .moves import Move, move_to_obj
from .types import HistoryKind

# Parameter names whose value is a tile identity that may need hiding
_TILE_PARAM = "tile"


@dataclass(frozen=True)
class HistoryMessage:
    kind: HistoryKind
    player_id: Optional[int]
    params: Tuple[Tuple[str, Any], ...] = ()
    # None: everybody may see the params; otherwise only these seats
    audience: Optional[FrozenSet[int]] = None

    def param(self, name: str, default: Any = None) -> Any:
        for k, v in self.params:
            if k == name:
                return v
        return default

    def visible_to(self, viewer: Optional[int]) -> bool:
        if self.audience is None:
            return True
        return viewer is not None and viewer in self.audience

    def redacted_for(self, viewer: Optional[int]) -> "HistoryMessage":
        if self.visible_to(viewer):
            return self
        params = tuple((k, None if k == _TILE_PARAM else v) for k, v in self.params)
        return HistoryMessage(self.kind, self.player_id, params, self.audience)


@dataclass
class MoveRecord:
    player_id: int
    move: Move
    timestamp: Optional[int] = None
    messages: List[HistoryMessage] = field(default_factory=list)


def message_to_obj(msg: HistoryMessage) -> Dict[str, Any]:
    out: Dict[str, Any] = {"kind": msg.kind, "playerId": msg.player_id}
    for k, v in msg.params:
        out[k] = _plain(v)
    return out


def record_to_obj(record: MoveRecord, viewer: Optional[int] = None, *, reveal_all: bool = False) -> Dict[str, Any]:
    msgs = record.messages if reveal_all else [m.redacted_for(viewer) for m in record.messages]
    return {
        "playerId": record.player_id,
        "move": move_to_obj(record.move),
        "timestamp": record.timestamp,
        "messages": [message_to_obj(m) for m in msgs],
    }


def _plain(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return [_plain(x) for x in v]
    if isinstance(v, bool) or v is None:
        return v
    if isinstance(v, int):
        return int(v)
    return v
