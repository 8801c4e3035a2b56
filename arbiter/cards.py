from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

RANKS = "A23456789TJQK"
SUITS = "hdcs"


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    def __post_init__(self) -> None:
        if self.rank not in RANKS:
            raise ValueError(f"Invalid rank: {self.rank}")
        if self.suit not in SUITS:
            raise ValueError(f"Invalid suit: {self.suit}")

    @property
    def label(self) -> str:
        return f"{self.rank}{self.suit}"


def build_deck(seed: Optional[int] = None) -> List[Card]:
    rng = random.Random(seed)
    deck = [Card(rank, suit) for suit in SUITS for rank in RANKS]
    rng.shuffle(deck)
    return deck


def new_deck(seed: Optional[int] = None) -> List[str]:
    """Default card sequence source: all 52 labels, uniformly shuffled."""
    return cards_to_labels(build_deck(seed))


def seeded_deck_source(seed: int):
    # Replayable source for drivers that record the seed with the hand.
    return lambda: new_deck(seed)


def cards_to_labels(cards: Sequence[Card]) -> List[str]:
    return [card.label for card in cards]


def parse_label(label: str) -> Card:
    if not isinstance(label, str) or len(label) != 2:
        raise ValueError(f"Invalid card label: {label!r}")
    return Card(label[0], label[1])


def parse_cards(labels: Sequence[str]) -> List[Card]:
    return [parse_label(label) for label in labels]


def validate_deck(labels: Sequence[str], seat_count: int) -> List[str]:
    """Check a card sequence can serve a hand of ``seat_count`` players."""
    deck = list(labels)
    needed = seat_count * 2 + 5
    if len(deck) < needed:
        raise ValueError(f"Not enough cards in deck: need {needed}, got {len(deck)}")
    parse_cards(deck)
    if len(set(deck)) != len(deck):
        raise ValueError("Deck contains duplicate cards")
    return deck
