import pytest

from acquire import (
    BoardType,
    PlayTile,
    PurchaseShares,
    RuleViolationError,
    apply_move,
    current_decision,
    final_standings,
    history_for,
    is_game_over,
    to_json,
)

from helpers import T, build_state, row

SMALL_LUXOR = {"1A": BoardType.LUXOR, "2A": BoardType.LUXOR}
TWO_SAFE = {**row(BoardType.LUXOR, "A", 1, 11), **row(BoardType.TOWER, "C", 1, 11)}


def _at_purchase(board, racks=(["5G"], ["9I"]), bag_next=(), shares=None):
    state = build_state(board, racks, bag_next=bag_next, shares=shares)
    apply_move(state, PlayTile(T(racks[0][0])), player_id=0)
    assert current_decision(state).kind == "PurchaseShares"
    return state


@pytest.mark.parametrize(
    "chains,code",
    [
        ([BoardType.LUXOR] * 4, "TOO_MANY_SHARES"),
        ([BoardType.NOTHING], "INVALID_CHAIN"),
        ([BoardType.TOWER], "CHAIN_NOT_AVAILABLE"),
    ],
)
def test_invalid_purchases(chains, code):
    state = _at_purchase(SMALL_LUXOR)
    before = to_json(state)
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PurchaseShares(chains), player_id=0)
    assert ei.value.code == code
    assert to_json(state) == before


def test_purchase_limited_by_bank_and_cash():
    state = _at_purchase(SMALL_LUXOR, shares={1: {BoardType.LUXOR: 24}})
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PurchaseShares([BoardType.LUXOR, BoardType.LUXOR]), player_id=0)
    assert ei.value.code == "NOT_ENOUGH_SHARES"

    state = _at_purchase(SMALL_LUXOR)
    state.scores.cash[0] = 300
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PurchaseShares([BoardType.LUXOR, BoardType.LUXOR]), player_id=0)
    assert ei.value.code == "NOT_ENOUGH_CASH"
    apply_move(state, PurchaseShares([BoardType.LUXOR]), player_id=0)
    assert state.scores.cash[0] == 100


def test_cannot_end_game_with_small_chains():
    state = _at_purchase(SMALL_LUXOR)
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PurchaseShares([], end_game=True), player_id=0)
    assert ei.value.code == "CANNOT_END_GAME"


def test_purchase_skipped_when_nothing_is_affordable():
    state = build_state(SMALL_LUXOR, [["5G"], ["9I"]])
    state.scores.cash[0] = 100
    msgs = apply_move(state, PlayTile(T("5G")), player_id=0)
    kinds = [m.kind for m in msgs]
    assert kinds[:2] == ["PlayedTile", "CouldNotAffordAnyShares"]
    assert kinds[-1] == "TurnBegan"
    d = current_decision(state)
    assert d.kind == "PlayTile" and d.player_id == 1


def test_dead_tiles_are_replaced_at_end_of_turn():
    state = _at_purchase(TWO_SAFE, racks=(["5G", "1B"], ["9I"]), bag_next=["12G", "12H"])
    assert state.players[0].rack_types[1] == BoardType.CANT_PLAY_EVER
    msgs = apply_move(state, PurchaseShares(), player_id=0)
    kinds = [m.kind for m in msgs]
    assert kinds[:4] == ["PurchasedShares", "DrewTile", "ReplacedDeadTile", "DrewTile"]
    assert state.players[0].rack[0] == T("12G")
    assert state.players[0].rack[1] == T("12H")
    assert state.dead_tiles == [T("1B")]
    # Replacement is public, the drawn tiles are not
    last = history_for(state, 1)[-1]["messages"]
    replaced = [m for m in last if m["kind"] == "ReplacedDeadTile"]
    assert replaced == [{"kind": "ReplacedDeadTile", "playerId": 0, "tile": T("1B")}]
    assert all(m["tile"] is None for m in last if m["kind"] == "DrewTile")


def test_declaring_end_of_game_pays_bonuses_and_sells_shares():
    shares = {0: {BoardType.LUXOR: 2}, 1: {BoardType.LUXOR: 1}}
    state = _at_purchase(TWO_SAFE, shares=shares)
    msgs = apply_move(state, PurchaseShares([], end_game=True), player_id=0)
    kinds = [m.kind for m in msgs]
    assert kinds[:2] == ["PurchasedShares", "EndedGame"]
    bonuses = [(m.player_id, m.param("amount")) for m in msgs if m.kind == "ReceivedBonus"]
    # Luxor at size 11 is worth 700
    assert bonuses == [(0, 7000), (1, 3500)]
    assert is_game_over(state)
    assert state.scores.cash == [6000 + 7000 + 1400, 6000 + 3500 + 700]
    assert state.scores.shares[0][BoardType.LUXOR] == 0

    standings = final_standings(state)
    assert [r["playerId"] for r in standings] == [0, 1]
    assert standings[0]["netWorth"] == 14400

    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PurchaseShares())
    assert ei.value.code == "GAME_OVER"


def test_dead_tiles_drawn_at_end_of_turn_are_replaced_at_once():
    state = _at_purchase(TWO_SAFE, bag_next=["1B", "2B", "12H"])
    msgs = apply_move(state, PurchaseShares(), player_id=0)
    kinds = [m.kind for m in msgs]
    assert kinds[:6] == ["PurchasedShares", "DrewTile", "ReplacedDeadTile", "DrewTile", "ReplacedDeadTile", "DrewTile"]
    assert state.dead_tiles == [T("1B"), T("2B")]
    assert state.players[0].rack[0] == T("12H")
    assert all(t is not None for t in state.players[0].rack)
    assert BoardType.CANT_PLAY_EVER not in state.players[0].rack_types
