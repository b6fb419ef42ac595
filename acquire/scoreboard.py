from __future__ import annotations

from typing import List, Tuple

from .errors import InvariantViolationError
from .types import (
    CHAIN_PRICE_CLASS,
    CHAINS,
    SAFE_CHAIN_SIZE,
    SHARES_PER_CHAIN,
    STARTING_CASH,
    BoardType,
)

# (minimum size, base price); class offset is added on top
_PRICE_TIERS: List[Tuple[int, int]] = [
    (41, 1000),
    (31, 900),
    (21, 800),
    (11, 700),
    (6, 600),
    (5, 500),
    (4, 400),
    (3, 300),
    (2, 200),
]


def chain_price(chain: BoardType, size: int) -> int:
    for min_size, base in _PRICE_TIERS:
        if size >= min_size:
            return base + 100 * CHAIN_PRICE_CLASS[chain]
    return 0


def round_up_hundred(amount: int) -> int:
    return -(-amount // 100) * 100


def compute_bonuses(price: int, holdings: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """Majority/minority payout for one chain.

    ``holdings`` is ``(player_id, shares)``; returns ``(player_id, amount)`` in
    player order. Split amounts are rounded up to the next 100.
    """
    holders = [(pid, n) for pid, n in holdings if n > 0]
    if not holders or price <= 0:
        return []
    majority = 10 * price
    minority = 5 * price
    counts = sorted({n for _, n in holders}, reverse=True)
    first = [pid for pid, n in holders if n == counts[0]]
    out: List[Tuple[int, int]] = []
    if len(holders) == 1:
        out.append((first[0], majority + minority))
    elif len(first) > 1:
        each = round_up_hundred(-(-(majority + minority) // len(first)))
        out.extend((pid, each) for pid in first)
    else:
        out.append((first[0], majority))
        second = [pid for pid, n in holders if n == counts[1]]
        each = round_up_hundred(-(-minority // len(second)))
        out.extend((pid, each) for pid in second)
    return sorted(out)


class ScoreBoard:
    def __init__(self, num_players: int) -> None:
        self.shares: List[List[int]] = [[0 for _ in CHAINS] for _ in range(num_players)]
        self.cash: List[int] = [STARTING_CASH for _ in range(num_players)]
        self.chain_size: List[int] = [0 for _ in CHAINS]

    @property
    def num_players(self) -> int:
        return len(self.cash)

    def available(self, chain: BoardType) -> int:
        return SHARES_PER_CHAIN - sum(row[chain] for row in self.shares)

    def price(self, chain: BoardType) -> int:
        return chain_price(chain, self.chain_size[chain])

    def is_active(self, chain: BoardType) -> bool:
        return self.chain_size[chain] > 0

    def is_safe(self, chain: BoardType) -> bool:
        return self.chain_size[chain] >= SAFE_CHAIN_SIZE

    def active_chains(self) -> List[BoardType]:
        return [c for c in CHAINS if self.is_active(c)]

    def free_chains(self) -> List[BoardType]:
        return [c for c in CHAINS if not self.is_active(c)]

    def adjust_shares(self, player_id: int, chain: BoardType, delta: int) -> None:
        n = self.shares[player_id][chain] + delta
        if n < 0:
            raise InvariantViolationError(
                "negative share count", context={"player": player_id, "chain": int(chain), "shares": n}
            )
        self.shares[player_id][chain] = n
        if self.available(chain) < 0:
            raise InvariantViolationError("bank share supply exhausted", context={"chain": int(chain)})

    def adjust_cash(self, player_id: int, delta: int) -> None:
        n = self.cash[player_id] + delta
        if n < 0:
            raise InvariantViolationError("negative cash", context={"player": player_id, "cash": n})
        self.cash[player_id] = n

    def bonuses(self, chain: BoardType) -> List[Tuple[int, int]]:
        holdings = [(pid, row[chain]) for pid, row in enumerate(self.shares)]
        return compute_bonuses(self.price(chain), holdings)

    def net_worth(self, player_id: int) -> int:
        # Cash plus active holdings at market price plus what bonuses would pay now
        total = self.cash[player_id]
        for c in self.active_chains():
            total += self.shares[player_id][c] * self.price(c)
            for pid, amount in self.bonuses(c):
                if pid == player_id:
                    total += amount
        return total
