from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Mapping, Sequence

from .cards import new_deck
from .evaluator import RankedHand, rank_hands
from .models import PotAward

LOGGER = logging.getLogger("hand_arbiter")

DEFAULT_PACE_DELAY = 1.0

DeckSource = Callable[[], Sequence[str]]
Pacer = Callable[[float], Awaitable[Any]]
PayoutSink = Callable[[PotAward], Any]
Evaluator = Callable[[Mapping[str, Sequence[str]], Sequence[str]], List[List[RankedHand]]]


def log_pot_award(award: PotAward) -> None:
    LOGGER.info(
        "Pot %s (%s chips) to %s with %s",
        award.pot_id,
        award.amount,
        ", ".join(award.player_ids),
        " ".join(award.winning_cards) or "no showdown",
    )


def queue_sink(queue: Any) -> PayoutSink:
    """Adapt an ``asyncio.Queue`` or ``queue.Queue`` into a payout sink."""
    return queue.put_nowait


async def no_delay(_seconds: float) -> None:
    return None


@dataclass
class Collaborators:
    # Everything the hand needs from outside: cards, ranking, pacing and payout.
    make_deck: DeckSource = new_deck
    evaluate: Evaluator = rank_hands
    pace: Pacer = asyncio.sleep
    give_pot: PayoutSink = log_pot_award
