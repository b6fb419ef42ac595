from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional
import logging
import os
import threading
import uuid

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from backend.models import (
    CreateGameReq,
    GameEnvelope,
    ImportReq,
    MoveReq,
    MoveResp,
    SnapshotResp,
)

from acquire import (
    ArrangementMode,
    GameConfig,
    GameMode,
    GameState,
    InvariantViolationError,
    RuleViolationError,
    SnapshotError,
    apply_move,
    from_snapshot,
    move_from_obj,
    new_game,
    seat_of_user,
    to_snapshot,
    view_for,
)
from acquire.history import message_to_obj

logger = logging.getLogger(__name__)


@dataclass
class Session:
    state: GameState
    # Moves of one game are applied one at a time
    lock: threading.Lock = field(default_factory=threading.Lock)


# In-memory session store
SESSIONS: Dict[str, Session] = {}


def _new_session_id() -> str:
    return uuid.uuid4().hex


def get_session(game_id: str) -> Session:
    session = SESSIONS.get(game_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


def _viewer(state: GameState, user_id: Optional[int]) -> Optional[int]:
    # Unknown users watch as spectators
    if user_id is None:
        return None
    return seat_of_user(state, user_id)


def _rule_error(e: RuleViolationError) -> HTTPException:
    return HTTPException(status_code=400, detail=e.to_dict())


def _internal_error(what: str, e: Exception) -> HTTPException:
    logger.error("%s failed: %s", what, e, exc_info=True)
    return HTTPException(status_code=500, detail=f"{what} failed")


app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, bool]:
    return {"ok": True}


@app.post("/games", response_model=GameEnvelope)
def create_game(req: CreateGameReq) -> GameEnvelope:
    try:
        cfg = GameConfig(
            game_mode=GameMode(req.gameMode),
            arrangement_mode=ArrangementMode[req.arrangementMode],
            user_ids=[p.userId for p in req.players],
            usernames=[p.name for p in req.players],
            host_user_id=req.hostUserId,
            tile_bag=req.tileBag,
            seed=req.seed,
            time_control_start=req.timeControlStart,
            time_control_increment=req.timeControlIncrement,
        )
        state = new_game(cfg)
    except SnapshotError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    gid = _new_session_id()
    SESSIONS[gid] = Session(state)
    logger.info("created game %s (%s, %d players)", gid, cfg.game_mode.name, len(cfg.user_ids))
    host_seat = seat_of_user(state, req.hostUserId)
    return GameEnvelope(gameId=gid, state=view_for(state, host_seat))


@app.post("/games/import", response_model=GameEnvelope)
def import_game(req: ImportReq) -> GameEnvelope:
    try:
        state = from_snapshot(req.snapshot)
    except SnapshotError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except InvariantViolationError as e:
        raise _internal_error("import", e)
    gid = _new_session_id()
    SESSIONS[gid] = Session(state)
    logger.info("imported game %s with %d moves", gid, len(state.records))
    return GameEnvelope(gameId=gid, state=view_for(state, None))


@app.get("/games/{gameId}/view", response_model=GameEnvelope)
def get_view(gameId: str, userId: Optional[int] = None) -> GameEnvelope:
    session = get_session(gameId)
    with session.lock:
        state = session.state
        return GameEnvelope(gameId=gameId, state=view_for(state, _viewer(state, userId)))


@app.post("/games/{gameId}/moves", response_model=MoveResp)
def submit_move(gameId: str, req: MoveReq) -> MoveResp:
    session = get_session(gameId)
    with session.lock:
        state = session.state
        seat = seat_of_user(state, req.userId)
        if seat is None:
            raise HTTPException(status_code=403, detail="User is not seated in this game")
        try:
            move = move_from_obj(req.move)
            messages = apply_move(state, move, player_id=seat, timestamp=req.timestamp)
        except RuleViolationError as e:
            logger.info("rejected move in game %s from user %d: %s", gameId, req.userId, e)
            raise _rule_error(e)
        except InvariantViolationError as e:
            raise _internal_error("move", e)
        return MoveResp(
            messages=[message_to_obj(m.redacted_for(seat)) for m in messages],
            state=view_for(state, seat),
        )


@app.get("/games/{gameId}/snapshot", response_model=SnapshotResp)
def get_snapshot(gameId: str) -> SnapshotResp:
    session = get_session(gameId)
    with session.lock:
        return SnapshotResp(gameId=gameId, snapshot=to_snapshot(session.state))


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "backend.app:app",
        host=os.environ.get("ACQUIRE_HOST", "0.0.0.0"),
        port=int(os.environ.get("ACQUIRE_PORT", "8000")),
    )
