from __future__ import annotations

from typing import Mapping, Sequence

from .errors import CursorExhaustedError
from .models import PlayerStatus, Seat

# Seat pointers are indexes into the seat list, seat 0 holding the button.
# The pointer names the last seat that posted or acted; the next actor is the
# first eligible seat after it.


def hand_opening_pointer(seat_count: int) -> int:
    # Heads-up the button posts the small blind, so start one seat earlier.
    return -1 if seat_count == 2 else 0


def street_opening_pointer() -> int:
    # First eligible seat after the button opens every post-flop street. Heads-up
    # that is the non-dealer, leaving the button to act last.
    return 0


def next_eligible(seats: Sequence[Seat], statuses: Mapping[str, PlayerStatus], pointer: int) -> int:
    count = len(seats)
    for step in range(1, count + 1):
        idx = (pointer + step) % count
        if statuses[seats[idx].player_id] is PlayerStatus.ACTIVE:
            return idx
    raise CursorExhaustedError()
