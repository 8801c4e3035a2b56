"""Single-hand Texas Hold'em arbiter: turn order, bet legality, streets and pots."""

from .cards import Card, RANKS, SUITS, build_deck, new_deck, parse_cards
from .collaborators import Collaborators, no_delay, queue_sink
from .errors import CursorExhaustedError, HandClosedError, HandError, IllegalBetError, OutOfTurnError
from .evaluator import RankedHand, evaluate_best, rank_hands
from .hand import Hand
from .models import Action, ActionType, GameConfig, HandState, PlayerStatus, Pot, PotAward, Seat, Street

__all__ = [
    "Card",
    "RANKS",
    "SUITS",
    "build_deck",
    "new_deck",
    "parse_cards",
    "Collaborators",
    "no_delay",
    "queue_sink",
    "CursorExhaustedError",
    "HandClosedError",
    "HandError",
    "IllegalBetError",
    "OutOfTurnError",
    "RankedHand",
    "evaluate_best",
    "rank_hands",
    "Hand",
    "Action",
    "ActionType",
    "GameConfig",
    "HandState",
    "PlayerStatus",
    "Pot",
    "PotAward",
    "Seat",
    "Street",
]
