from __future__ import annotations

from typing import List, Optional
import argparse

from acquire import (
    CHAINS,
    GameConfig,
    GameMode,
    GameState,
    RuleViolationError,
    apply_move,
    current_decision,
    final_standings,
    is_game_over,
    new_game,
)
from acquire.types import CHAIN_NAMES
from acquire.notation import (
    BOARD_TYPE_CHARS,
    decision_to_str,
    message_to_str,
    move_from_params,
)
from acquire.script import run_script, state_lines


# Hot-seat table used when no script is given
PLAYERS: List[str] = ["You", "Alice", "Bob"]
GAME_MODE: GameMode = GameMode.SINGLES_3


PROMPTS = {
    "StartGame": "Press enter to start the game: ",
    "PlayTile": "Tile to play (e.g. 5C): ",
    "SelectNewChain": "Chain to form (L T A F W C I): ",
    "SelectMergerSurvivor": "Surviving chain: ",
    "SelectChainToDisposeOfNext": "Chain to dispose of next: ",
    "DisposeOfShares": "Shares to trade and to sell (e.g. 2 1): ",
    "PurchaseShares": "Shares to buy (e.g. L,L,T or x) and end game 1/0: ",
}


def print_legend() -> None:
    chains = ", ".join(f"{BOARD_TYPE_CHARS[c]}={CHAIN_NAMES[c]}" for c in CHAINS)
    print(f"Chains: {chains}")
    print("Board: ·=empty, O=unchained tile, i=your tile")
    print("Rack: l=lonely, h=next to another rack tile, n=new chain, m=merger, c=not now, █=dead")


def ask_move_params(kind: str) -> List[str]:
    s = input(PROMPTS.get(kind, "> ")).strip()
    return s.split() if s else []


def play_turn(state: GameState) -> None:
    d = current_decision(state)
    p = state.players[d.player_id]
    print()
    print(f"Decision: {p.name} ({decision_to_str(d)})")
    for line in state_lines(state, d.player_id, reveal_all=False):
        print(line)
    while True:
        params = ask_move_params(d.kind)
        try:
            move = move_from_params(d.kind, params)
            messages = apply_move(state, move, player_id=d.player_id)
        except RuleViolationError as e:
            print(f"Rejected: {e.message}")
            continue
        break
    for msg in messages:
        print(f"  {message_to_str(msg.redacted_for(d.player_id))}")


def run_file(path: str) -> None:
    with open(path, "r", encoding="utf-8") as f:
        lines = [line.rstrip("\n") for line in f]
    out, _state = run_script(lines)
    for line in out:
        print(line)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Acquire console arbiter")
    parser.add_argument("--script", help="replay a game script and print its trace")
    parser.add_argument("--seed", type=int, default=None, help="tile bag shuffle seed")
    args = parser.parse_args(argv)
    if args.script:
        run_file(args.script)
        return

    print("ACQUIRE — Console Arbiter (hot seat)")
    print_legend()
    cfg = GameConfig(
        game_mode=GAME_MODE,
        user_ids=list(range(1, len(PLAYERS) + 1)),
        usernames=list(PLAYERS),
        host_user_id=1,
        seed=args.seed,
    )
    state = new_game(cfg)
    while not is_game_over(state):
        play_turn(state)

    print("\n=== Game Over ===")
    for line in state_lines(state):
        print(line)
    for row in final_standings(state):
        name = state.players[row["playerId"]].name
        print(f"{name}: ${row['netWorth']}")
    winner = final_standings(state)[0]
    print(f"Winner: {state.players[winner['playerId']].name}")


if __name__ == "__main__":
    main()
