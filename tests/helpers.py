from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Tuple

from arbiter.cards import RANKS, SUITS
from arbiter.collaborators import Collaborators, no_delay
from arbiter.hand import Hand
from arbiter.models import Action, GameConfig, PotAward, Seat


def player(name: str, stack: int = 1_000) -> Seat:
    return Seat(player_id=name, stack=stack)


def stacked_deck(*labels: str) -> List[str]:
    """Put ``labels`` on top of the deck; the rest follow in a fixed order."""
    rest = [f"{rank}{suit}" for suit in SUITS for rank in RANKS if f"{rank}{suit}" not in labels]
    return list(labels) + rest


def make_hand(
    seats: Sequence[Seat],
    deck: Optional[Sequence[str]] = None,
    *,
    sb: int = 10,
    bb: int = 20,
    strict_bets: bool = False,
    evaluate: Optional[Callable] = None,
    start: bool = True,
) -> Tuple[Hand, List[PotAward]]:
    """Build (and by default start) a hand whose pot awards land in a list."""
    awards: List[PotAward] = []
    collaborators = Collaborators(give_pot=awards.append, pace=no_delay)
    if deck is not None:
        collaborators.make_deck = lambda: list(deck)
    if evaluate is not None:
        collaborators.evaluate = evaluate
    hand = Hand(seats, GameConfig(small_blind=sb, big_blind=bb, strict_bets=strict_bets), collaborators)
    if start:
        hand.start()
    return hand, awards


def bet(hand: Hand, player_id: str, amount: int):
    return hand.act(player_id, Action.bet(amount))


def fold(hand: Hand, player_id: str):
    return hand.act(player_id, Action.fold())


def all_in(hand: Hand, player_id: str):
    seat = hand.get_seat(player_id)
    assert seat is not None
    return bet(hand, player_id, seat.stack)


def play_out(hand: Hand, limit: int = 200) -> None:
    """Put in the call figure (or check, or fold) every turn until the hand closes."""
    for _ in range(limit):
        actor = hand.next_actor()
        if actor is None:
            return
        call = hand.call_amount(actor)
        if hand.is_valid_bet(actor, call):
            bet(hand, actor, call)
        elif hand.is_valid_bet(actor, 0):
            bet(hand, actor, 0)
        else:
            fold(hand, actor)
    raise AssertionError("hand did not finish")
