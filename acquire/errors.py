"""
Error hierarchy for the Acquire engine.

Two families matter to callers:

- ``RuleViolationError``: the submitted move is malformed or breaks a rule.
  Expected and recoverable; the game state is left untouched and ``code``
  tells the caller why.
- ``InvariantViolationError``: the engine detected an impossible state
  (negative shares, a tile in two places, ...). This is a bug, never the
  player's fault.

Usage:
    from acquire.errors import RuleViolationError

    try:
        apply_move(state, move, player_id=seat)
    except RuleViolationError as e:
        send_error(seat, e.to_dict())
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "AcquireError",
    "RuleViolationError",
    "InvariantViolationError",
    "SnapshotError",
]


class AcquireError(Exception):
    """Base exception for all engine errors.

    Attributes:
        code: Machine-readable reason code
        message: Human-readable description
        context: Extra values useful when debugging
    """
    code: str = "ACQUIRE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class RuleViolationError(AcquireError):
    """A move that the current decision cannot accept."""
    code: str = "RULE_VIOLATION"


class InvariantViolationError(AcquireError):
    """Engine state broke one of its invariants."""
    code: str = "INVARIANT_VIOLATION"


class SnapshotError(AcquireError):
    """Malformed game setup or serialized snapshot."""
    code: str = "INVALID_SNAPSHOT"
