from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .cards import Card, parse_cards

RANK_ORDER = "23456789TJQKA"
RANK_VALUE = {rank: idx for idx, rank in enumerate(RANK_ORDER, start=2)}

CATEGORY_NAMES = {
    8: "straight_flush",
    7: "four_of_a_kind",
    6: "full_house",
    5: "flush",
    4: "straight",
    3: "three_of_a_kind",
    2: "two_pair",
    1: "pair",
    0: "high_card",
}

Score = Tuple[int, List[int]]


@dataclass(frozen=True)
class RankedHand:
    """One player's best five-card hand, as reported to the showdown."""

    player_id: str
    score: Score
    description: str
    cards: Tuple[str, ...]


def evaluate_best(cards: Sequence[Card]) -> Tuple[Score, Tuple[Card, ...]]:
    """Return the strength tuple and the five cards behind it. Higher is better."""
    best: Optional[Score] = None
    best_combo: Tuple[Card, ...] = ()
    for combo in itertools.combinations(cards, 5):
        rank = _evaluate_five(combo)
        if best is None or rank > best:
            best = rank
            best_combo = combo
    assert best is not None
    return best, best_combo


def describe_rank(score: Score) -> str:
    return CATEGORY_NAMES[score[0]]


def rank_hands(hands: Mapping[str, Sequence[str]], board: Sequence[str]) -> List[List[RankedHand]]:
    """Default hand-evaluation service.

    Scores every player's hole cards together with the board and returns
    groups of equally strong hands, best group first.
    """
    board_cards = parse_cards(board)
    ranked: List[RankedHand] = []
    for player_id, hole in hands.items():
        score, combo = evaluate_best(parse_cards(hole) + board_cards)
        ranked.append(
            RankedHand(
                player_id=player_id,
                score=score,
                description=describe_rank(score),
                cards=tuple(card.label for card in combo),
            )
        )

    groups: Dict[Tuple[int, Tuple[int, ...]], List[RankedHand]] = {}
    for hand in ranked:
        key = (hand.score[0], tuple(hand.score[1]))
        groups.setdefault(key, []).append(hand)
    return [groups[key] for key in sorted(groups, reverse=True)]


def _evaluate_five(cards: Iterable[Card]) -> Score:
    cards = list(cards)
    ranks = sorted((RANK_VALUE[card.rank] for card in cards), reverse=True)
    suits = [card.suit for card in cards]

    is_flush = len(set(suits)) == 1
    straight_high = _straight_high(cards)

    counts: Dict[str, int] = {}
    for card in cards:
        counts.setdefault(card.rank, 0)
        counts[card.rank] += 1

    ordered_counts = sorted(counts.items(), key=lambda x: (x[1], RANK_VALUE[x[0]]), reverse=True)
    count_values = sorted(counts.values(), reverse=True)

    if straight_high and is_flush:
        return (8, [straight_high])
    if count_values[0] == 4:
        four_rank = RANK_VALUE[ordered_counts[0][0]]
        kicker = max(RANK_VALUE[r] for r, c in ordered_counts if r != ordered_counts[0][0])
        return (7, [four_rank, kicker])
    if count_values[0] == 3 and count_values[1] == 2:
        trips = RANK_VALUE[ordered_counts[0][0]]
        pair = RANK_VALUE[ordered_counts[1][0]]
        return (6, [trips, pair])
    if is_flush:
        return (5, ranks)
    if straight_high:
        return (4, [straight_high])
    if count_values[0] == 3:
        trips_rank = RANK_VALUE[ordered_counts[0][0]]
        kickers = [RANK_VALUE[r] for r, c in ordered_counts[1:]]
        return (3, [trips_rank] + kickers)
    if count_values[0] == 2 and count_values[1] == 2:
        pair_high = RANK_VALUE[ordered_counts[0][0]]
        pair_low = RANK_VALUE[ordered_counts[1][0]]
        kicker = max(RANK_VALUE[r] for r, c in ordered_counts if c == 1)
        return (2, [pair_high, pair_low, kicker])
    if count_values[0] == 2:
        pair_rank = RANK_VALUE[ordered_counts[0][0]]
        kickers = [RANK_VALUE[r] for r, c in ordered_counts[1:]]
        return (1, [pair_rank] + kickers)
    return (0, ranks)


def _straight_high(cards: Iterable[Card]) -> Optional[int]:
    ranks = {RANK_VALUE[card.rank] for card in cards}
    if 14 in ranks:  # Ace low
        ranks.add(1)
    ordered = sorted(ranks)
    best = None
    for idx in range(len(ordered) - 4):
        window = ordered[idx : idx + 5]
        if window == list(range(window[0], window[0] + 5)):
            best = window[-1]
    return best
