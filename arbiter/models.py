from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple


class Street(str, Enum):
    PRE_FLOP = "PRE_FLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"
    CLOSED = "CLOSED"


BETTING_STREETS = (Street.PRE_FLOP, Street.FLOP, Street.TURN, Street.RIVER)

# Cards revealed when entering each street.
REVEAL_COUNTS = {Street.FLOP: 3, Street.TURN: 1, Street.RIVER: 1}


class PlayerStatus(str, Enum):
    ACTIVE = "ACTIVE"
    FOLDED = "FOLDED"
    ALL_IN = "ALL_IN"


class ActionType(str, Enum):
    FOLD = "FOLD"
    BET = "BET"


@dataclass(frozen=True)
class Action:
    type: ActionType
    # Chips added by this action, not the new street total.
    amount: int = 0

    @classmethod
    def fold(cls) -> "Action":
        return cls(ActionType.FOLD)

    @classmethod
    def bet(cls, amount: int) -> "Action":
        return cls(ActionType.BET, amount)

    @classmethod
    def check(cls) -> "Action":
        return cls(ActionType.BET, 0)


@dataclass
class GameConfig:
    small_blind: int = 10
    big_blind: int = 20
    antes: int = 0
    time_limit_ms: int = 15_000
    strict_bets: bool = False

    def __post_init__(self) -> None:
        if self.small_blind <= 0 or self.big_blind <= 0:
            raise ValueError("Blinds must be positive")
        if self.small_blind > self.big_blind:
            raise ValueError("Small blind cannot exceed big blind")
        if self.antes < 0:
            raise ValueError("Antes cannot be negative")
        if self.time_limit_ms < 0:
            raise ValueError("Time limit cannot be negative")


@dataclass
class Seat:
    player_id: str
    stack: int


@dataclass
class Pot:
    pot_id: str
    amount: int = 0
    eligible: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class PotAward:
    pot_id: str
    player_ids: Tuple[str, ...]
    winning_cards: Tuple[str, ...]
    amount: int

    def as_event(self) -> Dict[str, object]:
        return {
            "ev": "POT_AWARD",
            "pot_id": self.pot_id,
            "player_ids": list(self.player_ids),
            "winning_cards": list(self.winning_cards),
            "amount": self.amount,
        }


@dataclass
class HandState:
    street: Optional[Street]
    community_cards: List[str] = field(default_factory=list)
    hole_cards: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    pots: List[Pot] = field(default_factory=list)
    bets: Dict[str, int] = field(default_factory=dict)
    min_raise: int = 0
    next_actor: Optional[str] = None
