from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Optional

from .board import classify_tile, group_chains_by_size
from .decisions import (
    Decision,
    DisposeOfSharesDecision,
    GameOverDecision,
    PlayTileDecision,
    PurchaseSharesDecision,
    SelectChainToDisposeOfNextDecision,
    SelectMergerSurvivorDecision,
    SelectNewChainDecision,
    StartGameDecision,
)
from .errors import InvariantViolationError, RuleViolationError
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
from .types import (
    CHAINS,
    END_GAME_CHAIN_SIZE,
    MAX_SHARES_PER_TURN,
    NUM_TILES,
    RACK_SIZE,
    UNPLAYABLE_TYPES,
    BoardType,
    HistoryKind,
    Tile,
    is_chain,
)

if TYPE_CHECKING:
    from .core import GameState, Player


# --- helpers shared by the transitions ---

def team_audience(state: "GameState", player_id: int) -> FrozenSet[int]:
    team = state.players[player_id].team
    return frozenset(p.id for p in state.players if p.team == team)


def _emit(
    state: "GameState",
    kind: HistoryKind,
    player_id: Optional[int],
    *,
    private_to: Optional[int] = None,
    **params: Any,
) -> None:
    if not state.records:
        raise InvariantViolationError("history message emitted outside of a move", context={"kind": kind})
    audience = None if private_to is None else team_audience(state, private_to)
    frozen = tuple((k, tuple(v) if isinstance(v, list) else v) for k, v in params.items())
    state.records[-1].messages.append(HistoryMessage(kind, player_id, frozen, audience))


def tile_type(state: "GameState", tile: Tile, player_id: int) -> BoardType:
    return classify_tile(state.board, tile, state.players[player_id].rack, state.scores.chain_size)


def has_playable_tile(state: "GameState", player_id: int) -> bool:
    for tile in state.players[player_id].rack:
        if tile is not None and tile_type(state, tile, player_id) not in UNPLAYABLE_TYPES:
            return True
    return False


def can_end_game(state: "GameState") -> bool:
    sizes = [state.scores.chain_size[c] for c in state.scores.active_chains()]
    if not sizes:
        return False
    if any(s >= END_GAME_CHAIN_SIZE for s in sizes):
        return True
    return all(state.scores.is_safe(c) for c in state.scores.active_chains())


def _draw_into(state: "GameState", player: "Player", slot: int) -> bool:
    tile = state.bag.draw()
    if tile is None:
        return False
    player.rack[slot] = tile
    state.revealed_bag_tiles.append((tile, player.id))
    _emit(state, "DrewTile", player.id, private_to=player.id, tile=tile)
    if state.bag.is_empty():
        _emit(state, "DrewLastTile", player.id)
    return True


def _reject(message: str, code: str, **context: Any) -> RuleViolationError:
    return RuleViolationError(message, code=code, context=dict(context))


# --- prepare: runs when a decision reaches the top of the stack ---

def prepare(state: "GameState", d: Decision) -> Optional[List[Decision]]:
    """Auto-resolve ``d`` if no choice is left.

    Returns the follow-up decisions when ``d`` resolved itself, or None when
    it waits for a move.
    """
    if isinstance(d, StartGameDecision):
        return None
    if isinstance(d, PlayTileDecision):
        return _prepare_play_tile(state, d)
    if isinstance(d, SelectNewChainDecision):
        if len(d.available) == 1:
            _form_chain(state, d, d.available[0])
            return []
        return None
    if isinstance(d, SelectMergerSurvivorDecision):
        merged = sorted(c for group in d.chains_by_size for c in group)
        _emit(state, "MergedChains", d.player_id, chains=[int(c) for c in merged])
        if len(d.chains_by_size[0]) == 1:
            return _after_survivor(d, d.chains_by_size[0][0])
        return None
    if isinstance(d, SelectChainToDisposeOfNextDecision):
        return _prepare_dispose_next(state, d)
    if isinstance(d, DisposeOfSharesDecision):
        if state.scores.shares[d.player_id][d.defunct] == 0:
            return []
        return None
    if isinstance(d, PurchaseSharesDecision):
        return _prepare_purchase(state, d)
    if isinstance(d, GameOverDecision):
        _final_scoring(state)
        return None
    raise InvariantViolationError("unhandled decision", context={"decision": repr(d)})


# --- execute: validates a move against the top decision and applies it ---

def execute(state: "GameState", d: Decision, move: Move) -> List[Decision]:
    if isinstance(d, StartGameDecision) and isinstance(move, StartGame):
        return _execute_start_game(state, d)
    if isinstance(d, PlayTileDecision) and isinstance(move, PlayTile):
        return _execute_play_tile(state, d, move)
    if isinstance(d, SelectNewChainDecision) and isinstance(move, SelectNewChain):
        if move.chain not in d.available:
            raise _reject("cannot select chain as the new chain", "CHAIN_NOT_AVAILABLE", chain=int(move.chain))
        _form_chain(state, d, move.chain)
        return []
    if isinstance(d, SelectMergerSurvivorDecision) and isinstance(move, SelectMergerSurvivor):
        if move.chain not in d.chains_by_size[0]:
            raise _reject("chain is not one of the largest merging chains", "CHAIN_NOT_AVAILABLE", chain=int(move.chain))
        _emit(state, "SelectedMergerSurvivor", d.player_id, chain=int(move.chain))
        return _after_survivor(d, move.chain)
    if isinstance(d, SelectChainToDisposeOfNextDecision) and isinstance(move, SelectChainToDisposeOfNext):
        if move.chain not in d.candidates:
            raise _reject("chain cannot be disposed of next", "CHAIN_NOT_AVAILABLE", chain=int(move.chain))
        _emit(state, "SelectedChainToDisposeOfNext", d.player_id, chain=int(move.chain))
        return _dispose_next(state, d, move.chain)
    if isinstance(d, DisposeOfSharesDecision) and isinstance(move, DisposeOfShares):
        return _execute_dispose(state, d, move)
    if isinstance(d, PurchaseSharesDecision) and isinstance(move, PurchaseShares):
        return _execute_purchase(state, d, move)
    if isinstance(d, GameOverDecision):
        raise _reject("game is over", "GAME_OVER")
    raise _reject("move does not answer the pending decision", "WRONG_ACTION", expected=d.kind, got=move.kind)


# --- start of game ---

def _execute_start_game(state: "GameState", d: StartGameDecision) -> List[Decision]:
    for p in state.players:
        tile = state.bag.draw()
        if tile is None:
            raise InvariantViolationError("tile bag ran out during setup")
        state.board.set(tile, BoardType.NOTHING_YET)
        state.position_tiles.append(tile)
        state.revealed_bag_tiles.append((tile, None))
        _emit(state, "DrewPositionTile", p.id, tile=tile)
    _emit(state, "StartedGame", d.player_id)
    for p in state.players:
        for slot in range(RACK_SIZE):
            _draw_into(state, p, slot)
    state.turn_player_id = 0
    _emit(state, "TurnBegan", 0)
    return [PlayTileDecision(0)]


# --- tile placement ---

def _prepare_play_tile(state: "GameState", d: PlayTileDecision) -> Optional[List[Decision]]:
    if has_playable_tile(state, d.player_id):
        return None
    tiles = [t for t in state.players[d.player_id].rack if t is not None]
    state.revealed_rack_tiles.update(tiles)
    _emit(state, "HasNoPlayableTile", d.player_id, tiles=tiles)
    state.turns_without_tile += 1
    return [PurchaseSharesDecision(d.player_id)]


def _execute_play_tile(state: "GameState", d: PlayTileDecision, move: PlayTile) -> List[Decision]:
    tile = move.tile
    if not isinstance(tile, int) or isinstance(tile, bool) or tile < 0 or tile >= NUM_TILES:
        raise _reject("tile is not on the board", "INVALID_TILE", tile=tile)
    p = state.players[d.player_id]
    if tile not in p.rack:
        raise _reject("player does not have this tile", "TILE_NOT_IN_RACK", tile=tile)
    t = tile_type(state, tile, p.id)
    if t in UNPLAYABLE_TYPES:
        raise _reject("tile cannot be played", "UNPLAYABLE_TILE", tile=tile, type=t.name)

    p.rack[p.rack.index(tile)] = None
    state.revealed_rack_tiles.discard(tile)
    state.turns_without_tile = 0
    _emit(state, "PlayedTile", p.id, tile=tile)
    state.board.set(tile, BoardType.NOTHING_YET)

    if t == BoardType.WILL_FORM_NEW_CHAIN:
        return [SelectNewChainDecision(p.id, state.scores.free_chains(), tile), PurchaseSharesDecision(p.id)]
    if t == BoardType.WILL_MERGE_CHAINS:
        groups = group_chains_by_size(state.board.touched_chains(tile), state.scores.chain_size)
        return [SelectMergerSurvivorDecision(p.id, groups, tile), PurchaseSharesDecision(p.id)]
    if is_chain(t):
        state.scores.chain_size[t] = state.board.fill(tile, t)
    return [PurchaseSharesDecision(p.id)]


def _form_chain(state: "GameState", d: SelectNewChainDecision, chain: BoardType) -> None:
    state.scores.chain_size[chain] = state.board.fill(d.tile, chain)
    # Founder's share, if the bank still has one
    if state.scores.available(chain) > 0:
        state.scores.adjust_shares(d.player_id, chain, 1)
    _emit(state, "FormedChain", d.player_id, chain=int(chain))


# --- mergers ---

def _after_survivor(d: SelectMergerSurvivorDecision, survivor: BoardType) -> List[Decision]:
    defunct = [c for group in d.chains_by_size for c in group if c != survivor]
    return [SelectChainToDisposeOfNextDecision(d.player_id, defunct, survivor, d.tile)]


def _prepare_dispose_next(state: "GameState", d: SelectChainToDisposeOfNextDecision) -> Optional[List[Decision]]:
    if not d.defunct:
        _finish_merger(state, d)
        return []
    sizes = state.scores.chain_size
    largest = max(sizes[c] for c in d.defunct)
    d.candidates = [c for c in d.defunct if sizes[c] == largest]
    if len(d.candidates) == 1:
        return _dispose_next(state, d, d.candidates[0])
    return None


def _dispose_next(state: "GameState", d: SelectChainToDisposeOfNextDecision, chain: BoardType) -> List[Decision]:
    for pid, amount in state.scores.bonuses(chain):
        state.scores.adjust_cash(pid, amount)
        _emit(state, "ReceivedBonus", pid, chain=int(chain), amount=amount)
    n = len(state.players)
    follow: List[Decision] = [
        DisposeOfSharesDecision((d.player_id + i) % n, chain, d.survivor) for i in range(n)
    ]
    rest = [c for c in d.defunct if c != chain]
    follow.append(SelectChainToDisposeOfNextDecision(d.player_id, rest, d.survivor, d.tile))
    return follow


def _finish_merger(state: "GameState", d: SelectChainToDisposeOfNextDecision) -> None:
    state.board.fill(d.tile, d.survivor)
    for c in CHAINS:
        state.scores.chain_size[c] = state.board.count(c)


def _execute_dispose(state: "GameState", d: DisposeOfSharesDecision, move: DisposeOfShares) -> List[Decision]:
    trade, sell = move.trade_amount, move.sell_amount
    held = state.scores.shares[d.player_id][d.defunct]
    if trade < 0 or sell < 0:
        raise _reject("amounts must not be negative", "INVALID_AMOUNT", trade=trade, sell=sell)
    if trade % 2 != 0:
        raise _reject("trade amount must be even", "INVALID_AMOUNT", trade=trade)
    if trade + sell > held:
        raise _reject("cannot dispose of more shares than held", "NOT_ENOUGH_SHARES", held=held)
    if trade // 2 > state.scores.available(d.survivor):
        raise _reject(
            "bank does not have enough shares of the surviving chain",
            "NOT_ENOUGH_SHARES",
            available=state.scores.available(d.survivor),
        )
    # Sold at the defunct chain's price; sizes only change when the merger finishes
    price = state.scores.price(d.defunct)
    if trade > 0:
        state.scores.adjust_shares(d.player_id, d.defunct, -trade)
        state.scores.adjust_shares(d.player_id, d.survivor, trade // 2)
    if sell > 0:
        state.scores.adjust_shares(d.player_id, d.defunct, -sell)
        state.scores.adjust_cash(d.player_id, sell * price)
    _emit(state, "DisposedOfShares", d.player_id, chain=int(d.defunct), trade=trade, sell=sell)
    return []


# --- share purchase and end of turn ---

def _prepare_purchase(state: "GameState", d: PurchaseSharesDecision) -> Optional[List[Decision]]:
    cash = state.scores.cash[d.player_id]
    buyable = [c for c in state.scores.active_chains() if state.scores.available(c) > 0]
    if any(state.scores.price(c) <= cash for c in buyable) or can_end_game(state):
        return None
    if buyable:
        _emit(state, "CouldNotAffordAnyShares", d.player_id)
    return _complete_turn(state, d.player_id, False)


def _execute_purchase(state: "GameState", d: PurchaseSharesDecision, move: PurchaseShares) -> List[Decision]:
    if len(move.chains) > MAX_SHARES_PER_TURN:
        raise _reject("cannot buy more than 3 shares per turn", "TOO_MANY_SHARES", count=len(move.chains))
    counts: Dict[BoardType, int] = {}
    cost = 0
    for chain in move.chains:
        if not is_chain(chain):
            raise _reject("parameter is not a valid chain", "INVALID_CHAIN", chain=chain)
        if not state.scores.is_active(chain):
            raise _reject("chain is not on the board", "CHAIN_NOT_AVAILABLE", chain=int(chain))
        counts[chain] = counts.get(chain, 0) + 1
        if counts[chain] > state.scores.available(chain):
            raise _reject("bank does not have enough shares", "NOT_ENOUGH_SHARES", chain=int(chain))
        cost += state.scores.price(chain)
    if cost > state.scores.cash[d.player_id]:
        raise _reject("cannot afford these shares", "NOT_ENOUGH_CASH", cost=cost)
    if move.end_game and not can_end_game(state):
        raise _reject("game cannot be ended yet", "CANNOT_END_GAME")

    for chain, n in counts.items():
        state.scores.adjust_shares(d.player_id, chain, n)
    state.scores.adjust_cash(d.player_id, -cost)
    bought = [(int(c), counts[c]) for c in CHAINS if c in counts]
    _emit(state, "PurchasedShares", d.player_id, shares=bought)
    return _complete_turn(state, d.player_id, move.end_game)


def _replenish_rack(state: "GameState", player_id: int) -> None:
    p = state.players[player_id]
    for slot in range(RACK_SIZE):
        # Refill the slot, discarding dead tiles as soon as they are drawn
        while not state.bag.is_empty():
            tile = p.rack[slot]
            if tile is not None:
                if tile_type(state, tile, player_id) != BoardType.CANT_PLAY_EVER:
                    break
                _emit(state, "ReplacedDeadTile", player_id, tile=tile)
                state.dead_tiles.append(tile)
                state.revealed_rack_tiles.discard(tile)
                p.rack[slot] = None
            _draw_into(state, p, slot)


def _complete_turn(state: "GameState", player_id: int, end_game: bool) -> List[Decision]:
    if end_game:
        _emit(state, "EndedGame", player_id)
        return [GameOverDecision(player_id)]
    _replenish_rack(state, player_id)
    if state.bag.is_empty() and all(t is None for p in state.players for t in p.rack):
        _emit(state, "AllTilesPlayed", None)
        return [GameOverDecision(player_id)]
    if state.turns_without_tile >= len(state.players):
        _emit(state, "NoTilesPlayedForEntireRound", None)
        return [GameOverDecision(player_id)]
    nxt = (player_id + 1) % len(state.players)
    state.turn_player_id = nxt
    _emit(state, "TurnBegan", nxt)
    return [PlayTileDecision(nxt)]


def _final_scoring(state: "GameState") -> None:
    if state.final_scored:
        return
    active = state.scores.active_chains()
    for chain in active:
        for pid, amount in state.scores.bonuses(chain):
            state.scores.adjust_cash(pid, amount)
            _emit(state, "ReceivedBonus", pid, chain=int(chain), amount=amount)
    # Holdings are settled only after every bonus used them
    for chain in active:
        price = state.scores.price(chain)
        for p in state.players:
            n = state.scores.shares[p.id][chain]
            if n > 0:
                state.scores.adjust_shares(p.id, chain, -n)
                state.scores.adjust_cash(p.id, n * price)
    state.final_scored = True
