from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .cards import validate_deck
from .collaborators import Collaborators
from .errors import HandClosedError, IllegalBetError, OutOfTurnError
from .evaluator import RankedHand
from .ledger import BetLedger
from .models import (
    BETTING_STREETS,
    REVEAL_COUNTS,
    Action,
    ActionType,
    GameConfig,
    HandState,
    PlayerStatus,
    Pot,
    PotAward,
    Seat,
    Street,
)
from .pots import MAIN_POT_ID, PotAccountant
from .turns import hand_opening_pointer, next_eligible, street_opening_pointer

LOGGER = logging.getLogger("hand_arbiter")

NEXT_STREET = {
    Street.PRE_FLOP: Street.FLOP,
    Street.FLOP: Street.TURN,
    Street.TURN: Street.RIVER,
    Street.RIVER: Street.SHOWDOWN,
}

Event = Dict[str, object]


class Hand:
    """One hand of Texas Hold'em, from the blinds to the pot awards.

    Seats are given in button order (seat 0 is the dealer). The hand owns all
    of its state; drivers call ``start()`` once and then ``act()`` for every
    turn. Each call returns the events it produced.
    """

    def __init__(
        self,
        seats: Sequence[Seat],
        config: GameConfig,
        collaborators: Optional[Collaborators] = None,
    ) -> None:
        if len(seats) < 2:
            raise ValueError("A hand needs at least two seats")
        player_ids = [seat.player_id for seat in seats]
        if len(set(player_ids)) != len(player_ids):
            raise ValueError("Player ids must be unique")
        for seat in seats:
            if isinstance(seat.stack, bool) or not isinstance(seat.stack, int) or seat.stack <= 0:
                raise ValueError(f"Seat {seat.player_id} needs a positive integer stack")

        self.config = config
        self.collaborators = collaborators or Collaborators()
        self.seats: List[Seat] = [replace(seat) for seat in seats]
        self._by_id: Dict[str, Seat] = {seat.player_id: seat for seat in self.seats}
        self._index: Dict[str, int] = {seat.player_id: idx for idx, seat in enumerate(self.seats)}
        self.street: Optional[Street] = None
        self.statuses: Dict[str, PlayerStatus] = {pid: PlayerStatus.ACTIVE for pid in player_ids}
        self.acted: Set[str] = set()
        self.ledger = BetLedger(config.big_blind)
        self.accountant = PotAccountant()
        self.community: List[str] = []
        self.hole_cards: Dict[str, Tuple[str, str]] = {}
        self.awards: List[PotAward] = []
        self._board: List[str] = []
        self._pointer = 0

    # Lifecycle -------------------------------------------------------

    def start(self) -> List[Event]:
        if self.street is not None:
            raise HandClosedError("Hand already started")

        deck = validate_deck(self.collaborators.make_deck(), len(self.seats))
        count = len(self.seats)
        for idx, seat in enumerate(self.seats):
            first, second = deck[idx * 2 : idx * 2 + 2]
            self.hole_cards[seat.player_id] = (first, second)
        self._board = deck[count * 2 : count * 2 + 5]
        self.street = Street.PRE_FLOP

        if self.config.antes:
            LOGGER.debug("Antes of %s configured; not collected", self.config.antes)

        events: List[Event] = [{"ev": "DEAL", "players": [seat.player_id for seat in self.seats]}]

        self._pointer = hand_opening_pointer(count)
        sb_idx = next_eligible(self.seats, self.statuses, self._pointer)
        sb_seat = self.seats[sb_idx]
        self._post(sb_seat, self.config.small_blind)
        self._pointer = sb_idx
        bb_idx = next_eligible(self.seats, self.statuses, self._pointer)
        bb_seat = self.seats[bb_idx]
        self._post(bb_seat, self.config.big_blind)
        self._pointer = bb_idx
        self.ledger.level = self.config.big_blind

        events.append(
            {
                "ev": "POST_BLINDS",
                "sb": sb_seat.player_id,
                "bb": bb_seat.player_id,
                "bets": dict(self.ledger.bets),
            }
        )
        # Short blinds can leave nobody to act.
        events.extend(self._advance())
        return events

    def _post(self, seat: Seat, blind: int) -> None:
        self._commit(seat, min(seat.stack, blind))

    def is_complete(self) -> bool:
        return self.street is Street.CLOSED

    # Queries ---------------------------------------------------------

    def get_seat(self, player_id: str) -> Optional[Seat]:
        return self._by_id.get(player_id)

    def next_actor(self) -> Optional[str]:
        if self.street not in BETTING_STREETS:
            return None
        idx = next_eligible(self.seats, self.statuses, self._pointer)
        return self.seats[idx].player_id

    def is_valid_bet(self, player_id: str, amount: int) -> bool:
        if self.street not in BETTING_STREETS:
            return False
        return self.ledger.is_valid(self.get_seat(player_id), amount, self._players_with(PlayerStatus.ALL_IN))

    def call_amount(self, player_id: str) -> int:
        return max(self.ledger.call_amount(player_id), 0)

    def get_state(self) -> HandState:
        live = self._live_players()
        pots: List[Pot] = []
        if self.street is not None:
            pots = self.accountant.running_pots(live)
        return HandState(
            street=self.street,
            community_cards=list(self.community),
            hole_cards=dict(self.hole_cards),
            pots=pots,
            bets=dict(self.ledger.bets),
            min_raise=self.ledger.level,
            next_actor=self.next_actor(),
        )

    # Action handling -------------------------------------------------

    def act(self, player_id: str, action: Action) -> List[Event]:
        if self.street not in BETTING_STREETS:
            raise HandClosedError()
        expected = self.next_actor()
        if player_id != expected:
            raise OutOfTurnError(player_id, expected)
        seat = self._by_id[player_id]

        events: List[Event] = []
        if action.type is ActionType.FOLD:
            self.statuses[player_id] = PlayerStatus.FOLDED
            events.append({"ev": "FOLD", "player_id": player_id})
        elif action.type is ActionType.BET:
            if not self.is_valid_bet(player_id, action.amount):
                if self.config.strict_bets:
                    raise IllegalBetError(player_id, action.amount)
                LOGGER.warning(
                    "Ignored illegal bet player=%s amount=%s stack=%s level=%s",
                    player_id,
                    action.amount,
                    seat.stack,
                    self.ledger.level,
                )
                return []
            all_in = self._commit(seat, action.amount)
            events.append(
                {
                    "ev": "ALL_IN" if all_in else "BET",
                    "player_id": player_id,
                    "amount": action.amount,
                    "total": self.ledger.contribution(player_id),
                }
            )
        else:
            raise ValueError(f"Unsupported action {action.type}")

        self._pointer = self._index[player_id]
        self.acted.add(player_id)
        events.extend(self._advance())
        return events

    def _commit(self, seat: Seat, amount: int) -> bool:
        all_in = self.ledger.apply(seat, amount)
        self.accountant.add(seat.player_id, amount)
        if all_in:
            self.statuses[seat.player_id] = PlayerStatus.ALL_IN
        return all_in

    # Street progression ----------------------------------------------

    def _advance(self) -> List[Event]:
        live = self._live_players()
        if len(live) == 1:
            return self._award_uncontested(live[0])
        if self._betting_over():
            return self._run_out()
        if self._street_closed():
            return self._next_street()
        return []

    def _betting_over(self) -> bool:
        # Nobody left who could bet against anyone: deal the rest face up.
        able = self._players_with(PlayerStatus.ACTIVE)
        if len(able) > 1:
            return False
        top = self.ledger.highest()
        return all(self.ledger.contribution(player_id) >= top for player_id in able)

    def _street_closed(self) -> bool:
        if any(
            status is PlayerStatus.ACTIVE and player_id not in self.acted
            for player_id, status in self.statuses.items()
        ):
            return False
        # Short all-ins sit below the top and are excused; an all-in raise is not.
        top = self.ledger.highest()
        return all(self.ledger.contribution(player_id) == top for player_id in self._players_with(PlayerStatus.ACTIVE))

    def _run_out(self) -> List[Event]:
        events: List[Event] = []
        while self.street in BETTING_STREETS:
            events.extend(self._next_street())
        return events

    def _next_street(self) -> List[Event]:
        assert self.street is not None
        self.street = NEXT_STREET[self.street]
        LOGGER.debug("Advancing to %s", self.street.value)
        if self.street is Street.SHOWDOWN:
            return self._showdown()

        count = REVEAL_COUNTS[self.street]
        cards = self._board[len(self.community) : len(self.community) + count]
        self.community.extend(cards)
        self.ledger.reset_street()
        self.acted.clear()
        self._pointer = street_opening_pointer()
        return [{"ev": self.street.value, "cards": list(cards), "board": list(self.community)}]

    # Showdown --------------------------------------------------------

    def _showdown(self) -> List[Event]:
        live = self._live_players()
        hands = {player_id: self.hole_cards[player_id] for player_id in live}
        board = list(self.community)
        groups = self.collaborators.evaluate(hands, board)

        events: List[Event] = []
        for group in groups:
            for ranked in group:
                events.append(
                    {
                        "ev": "SHOWDOWN",
                        "player_id": ranked.player_id,
                        "hand": list(self.hole_cards[ranked.player_id]),
                        "board": board,
                        "rank": ranked.description,
                    }
                )

        for pot in self.accountant.split(live):
            winners = self._pot_winners(groups, pot)
            cards = sorted({card for ranked in winners for card in ranked.cards})
            award = PotAward(
                pot_id=pot.pot_id,
                player_ids=tuple(sorted(ranked.player_id for ranked in winners)),
                winning_cards=tuple(cards),
                amount=pot.amount,
            )
            events.append(self._pay(award))

        self.street = Street.CLOSED
        LOGGER.info("Hand closed after showdown; pot=%s awards=%s", self.accountant.total, len(self.awards))
        return events

    def _pot_winners(self, groups: List[List[RankedHand]], pot: Pot) -> List[RankedHand]:
        for group in groups:
            winners = [ranked for ranked in group if ranked.player_id in pot.eligible]
            if winners:
                return winners
        raise RuntimeError(f"Evaluator ranked no eligible player for pot {pot.pot_id}")

    def _award_uncontested(self, player_id: str) -> List[Event]:
        self.street = Street.SHOWDOWN
        award = PotAward(pot_id=MAIN_POT_ID, player_ids=(player_id,), winning_cards=(), amount=self.accountant.total)
        events = [self._pay(award)]
        self.street = Street.CLOSED
        LOGGER.info("Hand closed; %s wins uncontested pot of %s", player_id, award.amount)
        return events

    def _pay(self, award: PotAward) -> Event:
        self.awards.append(award)
        self.collaborators.give_pot(award)
        return award.as_event()

    # Helpers ---------------------------------------------------------

    def _players_with(self, status: PlayerStatus) -> List[str]:
        return [seat.player_id for seat in self.seats if self.statuses[seat.player_id] is status]

    def _live_players(self) -> List[str]:
        return [seat.player_id for seat in self.seats if self.statuses[seat.player_id] is not PlayerStatus.FOLDED]
