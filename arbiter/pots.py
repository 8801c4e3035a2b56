from __future__ import annotations

from typing import Collection, Dict, FrozenSet, List, Tuple

from .models import Pot

MAIN_POT_ID = "main"


class PotAccountant:
    """Tracks every chip put in during the hand.

    While betting runs there is one running pot. At showdown the contributions
    are cut into tiers, one pot per distinct all-in level.
    """

    def __init__(self) -> None:
        self.contributed: Dict[str, int] = {}

    @property
    def total(self) -> int:
        return sum(self.contributed.values())

    def add(self, player_id: str, amount: int) -> None:
        self.contributed[player_id] = self.contributed.get(player_id, 0) + amount

    def running_pots(self, live: Collection[str]) -> List[Pot]:
        return [Pot(pot_id=MAIN_POT_ID, amount=self.total, eligible=frozenset(live))]

    def split(self, live: Collection[str]) -> List[Pot]:
        remaining = {player_id: amount for player_id, amount in self.contributed.items() if amount > 0}
        tiers: List[Tuple[int, FrozenSet[str]]] = []
        carry = 0
        while remaining:
            floor = min(remaining.values())
            amount = floor * len(remaining)
            eligible = frozenset(player_id for player_id in remaining if player_id in live)
            remaining = {player_id: left - floor for player_id, left in remaining.items() if left > floor}
            if not eligible:
                # Chips only folded players reached; fold them into a live pot.
                carry += amount
                continue
            if tiers and tiers[-1][1] == eligible:
                tiers[-1] = (tiers[-1][0] + amount + carry, eligible)
            else:
                tiers.append((amount + carry, eligible))
            carry = 0
        if carry and tiers:
            tiers[-1] = (tiers[-1][0] + carry, tiers[-1][1])

        return [
            Pot(pot_id=MAIN_POT_ID if idx == 0 else f"side-{idx}", amount=amount, eligible=eligible)
            for idx, (amount, eligible) in enumerate(tiers)
        ]
