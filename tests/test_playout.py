import random

import pytest

from acquire import (
    CHAINS,
    DisposeOfShares,
    GameConfig,
    GameMode,
    PlayTile,
    PurchaseShares,
    SelectChainToDisposeOfNext,
    SelectMergerSurvivor,
    SelectNewChain,
    StartGame,
    apply_move,
    check_invariants,
    current_decision,
    from_snapshot,
    is_game_over,
    new_game,
    to_json,
    to_snapshot,
)
from acquire.rules import can_end_game
from acquire.types import UNPLAYABLE_TYPES, seats_for_mode


def random_move(state, rng: random.Random):
    d = current_decision(state)
    scores = state.scores
    if d.kind == "StartGame":
        return StartGame()
    if d.kind == "PlayTile":
        p = state.players[d.player_id]
        options = [t for t, k in zip(p.rack, p.rack_types) if t is not None and k not in UNPLAYABLE_TYPES]
        return PlayTile(rng.choice(options))
    if d.kind == "SelectNewChain":
        return SelectNewChain(rng.choice(d.available))
    if d.kind == "SelectMergerSurvivor":
        return SelectMergerSurvivor(rng.choice(d.chains_by_size[0]))
    if d.kind == "SelectChainToDisposeOfNext":
        return SelectChainToDisposeOfNext(rng.choice(d.candidates))
    if d.kind == "DisposeOfShares":
        held = scores.shares[d.player_id][d.defunct]
        max_trade = min(held, 2 * scores.available(d.survivor))
        trade = 2 * rng.randint(0, max_trade // 2)
        sell = rng.randint(0, held - trade)
        return DisposeOfShares(trade, sell)
    assert d.kind == "PurchaseShares"
    cash = scores.cash[d.player_id]
    bought = []
    for _ in range(rng.randint(0, 3)):
        options = [
            c for c in CHAINS
            if scores.is_active(c)
            and scores.available(c) > bought.count(c)
            and scores.price(c) <= cash
        ]
        if not options:
            break
        c = rng.choice(options)
        bought.append(c)
        cash -= scores.price(c)
    end_game = can_end_game(state) and rng.random() < 0.2
    return PurchaseShares(bought, end_game)


@pytest.mark.parametrize(
    "mode,seed",
    [
        (GameMode.SINGLES_2, 1),
        (GameMode.SINGLES_4, 2),
        (GameMode.TEAMS_2_VS_2, 3),
        (GameMode.SINGLES_6, 4),
    ],
)
def test_random_playout_keeps_invariants_and_replays(mode, seed):
    n, _team_size = seats_for_mode(mode)
    cfg = GameConfig(
        game_mode=mode,
        user_ids=list(range(1, n + 1)),
        usernames=[f"p{i}" for i in range(n)],
        host_user_id=1,
        seed=seed,
    )
    state = new_game(cfg)
    rng = random.Random(seed)
    for i in range(5000):
        if is_game_over(state):
            break
        d = current_decision(state)
        apply_move(state, random_move(state, rng), player_id=d.player_id, timestamp=i)
    assert is_game_over(state)
    check_invariants(state)
    # Every active share was sold in final scoring
    assert all(sum(row[c] for row in state.scores.shares) == 0 for c in state.scores.active_chains())

    again = from_snapshot(to_snapshot(state))
    assert to_json(again) == to_json(state)
