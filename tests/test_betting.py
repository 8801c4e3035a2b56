import pytest

from arbiter.errors import IllegalBetError
from arbiter.ledger import BetLedger
from arbiter.models import Seat, Street

from .helpers import all_in, bet, fold, make_hand, player


def test_call_and_raises_from_first_to_act():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    assert all(hand.is_valid_bet("a", amount) for amount in (20, 40, 41))
    assert not any(hand.is_valid_bet("a", amount) for amount in (0, 10, 21, 39))


def test_big_blind_may_check_or_raise():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    bet(hand, "a", 20)
    bet(hand, "b", 10)
    assert hand.is_valid_bet("c", 0)
    assert hand.is_valid_bet("c", 20)


def test_minimum_raise_doubles_the_call_gap():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    bet(hand, "a", 60)
    assert hand.get_state().min_raise == 60

    # Small blind has 10 in: the call is 50, the smallest raise 100.
    assert hand.call_amount("b") == 50
    assert hand.is_valid_bet("b", 50)
    assert hand.is_valid_bet("b", 100)
    assert hand.is_valid_bet("b", 150)
    for amount in (0, 51, 75, 99):
        assert not hand.is_valid_bet("b", amount)

    bet(hand, "b", 50)
    assert hand.call_amount("c") == 40
    assert not hand.is_valid_bet("c", 79)
    assert hand.is_valid_bet("c", 80)


def test_opening_check_only_before_chips_go_in():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    bet(hand, "a", 20)
    bet(hand, "b", 10)
    bet(hand, "c", 0)
    assert hand.street is Street.FLOP

    assert hand.is_valid_bet("b", 0)
    bet(hand, "b", 20)
    assert not hand.is_valid_bet("c", 0)
    assert hand.is_valid_bet("c", 20)


@pytest.mark.parametrize("over", [1, 50, 10_000])
def test_amount_above_stack_is_invalid(over):
    hand, _ = make_hand([player("a", 300), player("b"), player("c")])
    assert not hand.is_valid_bet("a", 300 + over)


@pytest.mark.parametrize("stack", [1, 15, 333, 1_000])
def test_whole_stack_is_always_valid(stack):
    hand, _ = make_hand([player("a", stack), player("b"), player("c")])
    assert hand.is_valid_bet("a", stack)


def test_negative_and_non_integer_amounts_are_invalid():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    assert not hand.is_valid_bet("a", -20)
    assert not hand.is_valid_bet("a", 20.0)
    assert not hand.is_valid_bet("a", True)


def test_missing_or_busted_seat_cannot_bet():
    hand, _ = make_hand([player("a", 100), player("b"), player("c")])
    assert not hand.is_valid_bet("zed", 20)
    all_in(hand, "a")
    assert hand.get_seat("a").stack == 0
    assert not hand.is_valid_bet("a", 0)


def test_validity_check_is_pure():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    before = hand.get_state()
    first = [hand.is_valid_bet("a", amount) for amount in range(0, 100, 5)]
    second = [hand.is_valid_bet("a", amount) for amount in range(0, 100, 5)]
    assert first == second
    assert hand.get_state() == before


def test_uncapped_all_in_accepts_any_amount_below_stack():
    hand, _ = make_hand([player("a", 15), player("b"), player("c")])
    all_in(hand, "a")
    assert all(hand.is_valid_bet("b", amount) for amount in (0, 1, 5, 33, 989))
    assert hand.is_valid_bet("b", 990)
    assert not hand.is_valid_bet("b", 991)


def test_raise_past_all_in_restores_sizing_rule():
    hand, _ = make_hand([player("a", 15), player("b"), player("c")])
    all_in(hand, "a")
    bet(hand, "b", 90)
    # b raised to 100, above the all-in and the big blind: normal sizing again.
    assert hand.get_state().min_raise == 80
    assert hand.call_amount("c") == 60
    assert hand.is_valid_bet("c", 60)
    assert not hand.is_valid_bet("c", 61)
    assert hand.is_valid_bet("c", 120)


def test_illegal_bet_is_ignored_and_turn_stays():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    before = hand.get_state()
    events = bet(hand, "a", 30)
    assert events == []
    assert hand.get_state() == before
    assert hand.get_seat("a").stack == 1_000
    assert hand.next_actor() == "a"
    assert "a" not in hand.acted


def test_strict_mode_raises_on_illegal_bet():
    hand, _ = make_hand([player("a"), player("b"), player("c")], strict_bets=True)
    with pytest.raises(IllegalBetError) as excinfo:
        bet(hand, "a", 30)
    assert excinfo.value.code == "ILLEGAL_BET"
    assert hand.next_actor() == "a"


def test_fold_is_always_accepted():
    hand, _ = make_hand([player("a"), player("b"), player("c")])
    events = fold(hand, "a")
    assert events == [{"ev": "FOLD", "player_id": "a"}]
    assert hand.next_actor() == "b"


def test_ledger_level_tracks_increment_over_prior_contribution():
    ledger = BetLedger(big_blind=20)
    seat = Seat("a", 100)
    ledger.apply(seat, 10)
    assert ledger.level == 20
    ledger.apply(seat, 50)
    assert ledger.level == 40
    assert seat.stack == 40
    assert ledger.contribution("a") == 60

    ledger.reset_street()
    assert ledger.bets == {"a": 0}
    assert ledger.level == 20


def test_ledger_apply_reports_all_in():
    ledger = BetLedger(big_blind=20)
    seat = Seat("a", 35)
    assert not ledger.apply(seat, 20)
    assert ledger.apply(seat, 15)
    assert seat.stack == 0
