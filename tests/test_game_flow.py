import pytest

from acquire import (
    BoardType,
    GameConfig,
    GameMode,
    PlayTile,
    PurchaseShares,
    RuleViolationError,
    SelectNewChain,
    StartGame,
    apply_move,
    current_decision,
    is_game_over,
    new_game,
    to_json,
    view_for,
)
from acquire.history import message_to_obj
from acquire.notation import tiles_from_str

from helpers import T, build_state, empty_bag, row

POSITION = "1A, 12I"
P0_RACK = "3C, 5E, 7G, 9C, 11E, 3G"
P1_RACK = "2I, 4I, 6I, 8I, 10A, 6C"


def _game(p0_rack: str = P0_RACK):
    bag = tiles_from_str(f"{POSITION}, {p0_rack}, {P1_RACK}, 8E")
    cfg = GameConfig(
        game_mode=GameMode.SINGLES_2,
        user_ids=[10, 20],
        usernames=["Ann", "Bo"],
        host_user_id=10,
        tile_bag=bag,
    )
    return new_game(cfg)


def _started(p0_rack: str = P0_RACK):
    state = _game(p0_rack)
    apply_move(state, StartGame(), player_id=0)
    return state


def test_start_game_places_position_tiles_and_deals_racks():
    state = _game()
    d = current_decision(state)
    assert d.kind == "StartGame" and d.player_id == 0
    msgs = apply_move(state, StartGame(), player_id=0)
    kinds = [m.kind for m in msgs]
    assert kinds[:3] == ["DrewPositionTile", "DrewPositionTile", "StartedGame"]
    assert kinds.count("DrewTile") == 12
    assert kinds[-1] == "TurnBegan"
    assert state.board.get(T("1A")) == BoardType.NOTHING_YET
    assert state.board.get(T("12I")) == BoardType.NOTHING_YET
    assert state.players[0].rack == tiles_from_str(P0_RACK)
    assert state.players[1].rack == tiles_from_str(P1_RACK)
    assert state.bag.remaining() == 108 - 14
    assert all(t == BoardType.WILL_PUT_LONELY_TILE_DOWN for t in state.players[0].rack_types)
    d = current_decision(state)
    assert d.kind == "PlayTile" and d.player_id == 0


def test_lonely_tile_skips_purchase_and_passes_the_turn():
    state = _started()
    msgs = apply_move(state, PlayTile(T("5E")), player_id=0)
    assert [m.kind for m in msgs] == ["PlayedTile", "DrewTile", "TurnBegan"]
    assert state.board.get(T("5E")) == BoardType.NOTHING_YET
    # Drawn tile takes the played tile's slot
    assert state.players[0].rack[1] == T("8E")
    assert state.turn_player_id == 1
    d = current_decision(state)
    assert d.kind == "PlayTile" and d.player_id == 1


def test_wrong_player_and_wrong_action_are_rejected():
    state = _started()
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PlayTile(T("2I")), player_id=1)
    assert ei.value.code == "NOT_YOUR_TURN"
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PurchaseShares(), player_id=0)
    assert ei.value.code == "WRONG_ACTION"


@pytest.mark.parametrize(
    "move,code",
    [
        (PlayTile(T("2I")), "TILE_NOT_IN_RACK"),
        (PlayTile(200), "INVALID_TILE"),
        (PlayTile(-1), "INVALID_TILE"),
    ],
)
def test_rejected_move_leaves_state_untouched(move, code):
    state = _started()
    before = to_json(state)
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, move, player_id=0)
    assert ei.value.code == code
    assert to_json(state) == before


def test_forming_a_chain_gives_founder_share():
    state = _started("2A, 5E, 7G, 9C, 11E, 3G")
    assert state.players[0].rack_types[0] == BoardType.WILL_FORM_NEW_CHAIN
    apply_move(state, PlayTile(T("2A")), player_id=0)
    d = current_decision(state)
    assert d.kind == "SelectNewChain"
    assert len(d.available) == 7

    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, SelectNewChain(BoardType.NOTHING), player_id=0)
    assert ei.value.code == "CHAIN_NOT_AVAILABLE"

    msgs = apply_move(state, SelectNewChain(BoardType.TOWER), player_id=0)
    assert [m.kind for m in msgs] == ["FormedChain"]
    assert state.scores.chain_size[BoardType.TOWER] == 2
    assert state.board.get(T("1A")) == BoardType.TOWER
    assert state.scores.shares[0][BoardType.TOWER] == 1
    assert current_decision(state).kind == "PurchaseShares"

    msgs = apply_move(state, PurchaseShares([BoardType.TOWER, BoardType.TOWER]), player_id=0)
    assert message_to_obj(msgs[0]) == {"kind": "PurchasedShares", "playerId": 0, "shares": [[1, 2]]}
    assert state.scores.cash[0] == 6000 - 400
    assert state.scores.shares[0][BoardType.TOWER] == 3
    assert state.scores.available(BoardType.TOWER) == 22
    assert current_decision(state).player_id == 1


def test_chain_extension_absorbs_orphan_tiles():
    board = {"1A": BoardType.LUXOR, "2A": BoardType.LUXOR, "4A": BoardType.NOTHING_YET}
    state = build_state(board, [["3A"], ["9I"]])
    assert state.players[0].rack_types[0] == BoardType.LUXOR
    apply_move(state, PlayTile(T("3A")), player_id=0)
    assert state.scores.chain_size[BoardType.LUXOR] == 4
    assert state.board.get(T("4A")) == BoardType.LUXOR
    assert current_decision(state).kind == "PurchaseShares"


SIX_CHAINS = {
    "1A": BoardType.LUXOR, "2A": BoardType.LUXOR,
    "1C": BoardType.TOWER, "2C": BoardType.TOWER,
    "1E": BoardType.AMERICAN, "2E": BoardType.AMERICAN,
    "1G": BoardType.FESTIVAL, "2G": BoardType.FESTIVAL,
    "1I": BoardType.WORLDWIDE, "2I": BoardType.WORLDWIDE,
    "5A": BoardType.CONTINENTAL, "6A": BoardType.CONTINENTAL,
    "9E": BoardType.NOTHING_YET,
}


def test_last_free_chain_is_formed_automatically():
    state = build_state(SIX_CHAINS, [["10E"], ["12A"]])
    msgs = apply_move(state, PlayTile(T("10E")), player_id=0)
    assert [m.kind for m in msgs] == ["PlayedTile", "FormedChain"]
    assert msgs[1].param("chain") == BoardType.IMPERIAL
    assert state.scores.chain_size[BoardType.IMPERIAL] == 2
    assert state.scores.shares[0][BoardType.IMPERIAL] == 1
    assert current_decision(state).kind == "PurchaseShares"


def test_player_without_playable_tile_reveals_rack_and_skips_placement():
    board = dict(SIX_CHAINS)
    board.update({"9A": BoardType.IMPERIAL, "10A": BoardType.IMPERIAL})
    state = build_state(board, [["12I"], ["10E"]])
    assert state.players[1].rack_types[0] == BoardType.CANT_PLAY_NOW

    apply_move(state, PlayTile(T("12I")), player_id=0)
    msgs = apply_move(state, PurchaseShares(), player_id=0)
    kinds = [m.kind for m in msgs]
    assert kinds[-2:] == ["TurnBegan", "HasNoPlayableTile"]
    assert msgs[-1].param("tiles") == (T("10E"),)
    assert state.turns_without_tile == 1
    d = current_decision(state)
    assert d.kind == "PurchaseShares" and d.player_id == 1
    # Revealed tiles are visible to opponents
    assert view_for(state, 0)["players"][1]["rack"]["tiles"][0] == T("10E")


def test_boolean_is_not_a_tile():
    state = build_state({}, [["1B"], ["9I"]])
    assert T("1B") == 1
    before = to_json(state)
    with pytest.raises(RuleViolationError) as ei:
        apply_move(state, PlayTile(True), player_id=0)
    assert ei.value.code == "INVALID_TILE"
    assert to_json(state) == before


def test_game_ends_when_every_tile_is_played():
    board = {"1A": BoardType.LUXOR, "2A": BoardType.LUXOR}
    state = build_state(board, [["5G"], []])
    empty_bag(state)
    apply_move(state, PlayTile(T("5G")), player_id=0)
    assert current_decision(state).kind == "PurchaseShares"
    msgs = apply_move(state, PurchaseShares(), player_id=0)
    assert [m.kind for m in msgs] == ["PurchasedShares", "AllTilesPlayed"]
    assert is_game_over(state)
    assert current_decision(state).player_id == 0


def test_game_ends_after_a_round_without_a_placed_tile():
    two_safe = {**row(BoardType.LUXOR, "A", 1, 11), **row(BoardType.TOWER, "C", 1, 11)}
    state = build_state(two_safe, [["5G"], ["2B"]])
    empty_bag(state)
    assert state.players[1].rack_types[0] == BoardType.CANT_PLAY_EVER

    apply_move(state, PlayTile(T("5G")), player_id=0)
    msgs = apply_move(state, PurchaseShares(), player_id=0)
    assert msgs[-1].kind == "HasNoPlayableTile"
    assert state.turns_without_tile == 1

    # Player 0 has an empty rack and cannot play either
    msgs = apply_move(state, PurchaseShares(), player_id=1)
    assert msgs[-1].kind == "HasNoPlayableTile"
    assert msgs[-1].param("tiles") == ()
    assert not is_game_over(state)

    msgs = apply_move(state, PurchaseShares(), player_id=0)
    assert [m.kind for m in msgs] == ["PurchasedShares", "NoTilesPlayedForEntireRound"]
    assert is_game_over(state)
    # Dead tiles stay in the rack once the bag is empty
    assert state.players[1].rack[0] == T("2B")
