from __future__ import annotations

from typing import Collection, Dict, Optional

from .models import Seat


class BetLedger:
    """Per-street contributions and the bet level.

    ``level`` is a single figure that is both the amount a player must have
    put in this street to be even and the yardstick for a legal raise. Each
    bet moves it to ``max(level, amount - prior contribution)``. In a
    single-raise street that is the bet to match.
    """

    def __init__(self, big_blind: int) -> None:
        self.big_blind = big_blind
        self.bets: Dict[str, int] = {}
        self.level = big_blind

    def contribution(self, player_id: str) -> int:
        return self.bets.get(player_id, 0)

    def street_total(self) -> int:
        return sum(self.bets.values())

    def highest(self) -> int:
        return max(self.bets.values(), default=0)

    def call_amount(self, player_id: str) -> int:
        return self.level - self.contribution(player_id)

    def reset_street(self) -> None:
        for player_id in self.bets:
            self.bets[player_id] = 0
        self.level = self.big_blind

    def apply(self, seat: Seat, amount: int) -> bool:
        """Move ``amount`` from the seat into the street. Returns True on all-in."""
        prior = self.contribution(seat.player_id)
        seat.stack -= amount
        self.bets[seat.player_id] = prior + amount
        self.level = max(self.level, amount - prior)
        return seat.stack == 0

    def is_valid(self, seat: Optional[Seat], amount: int, all_in: Collection[str]) -> bool:
        if seat is None or seat.stack <= 0:
            return False
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            return False
        if amount == seat.stack:
            return True
        if amount > seat.stack:
            return False

        if all_in and not self._is_capped(all_in):
            # An all-in sets the cap; nothing below the stack can over-raise it.
            return True

        call = self.call_amount(seat.player_id)
        if amount == call or amount >= 2 * call:
            return True
        return amount == 0 and self.street_total() == 0

    def _is_capped(self, all_in: Collection[str]) -> bool:
        # True once somebody has raised past every all-in this street.
        top = self.highest()
        if top <= self.big_blind:
            return False
        return all(self.contribution(player_id) < top for player_id in all_in)
