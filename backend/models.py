from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


ArrangementName = Literal["RANDOM_ORDER", "EXACT_ORDER", "SPECIFY_TEAMS"]


class Seat(BaseModel):
    userId: int
    name: str = Field(..., min_length=1)


class CreateGameReq(BaseModel):
    gameMode: int = Field(..., ge=1, le=9)
    arrangementMode: ArrangementName = "RANDOM_ORDER"
    players: List[Seat]
    hostUserId: int
    tileBag: Optional[List[int]] = None
    seed: Optional[int] = None
    timeControlStart: Optional[int] = None
    timeControlIncrement: Optional[int] = None


class MoveReq(BaseModel):
    userId: int
    # e.g. {"playTile": {"tile": 12}}
    move: Dict[str, Any]
    timestamp: Optional[int] = None


class ImportReq(BaseModel):
    snapshot: List[Any]


class GameEnvelope(BaseModel):
    gameId: str
    state: Dict[str, Any]


class MoveResp(BaseModel):
    messages: List[Dict[str, Any]]
    state: Dict[str, Any]


class SnapshotResp(BaseModel):
    gameId: str
    snapshot: List[Any]
