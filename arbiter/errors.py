from __future__ import annotations

from typing import Optional


class HandError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


class OutOfTurnError(HandError):
    def __init__(self, player_id: str, expected: Optional[str]) -> None:
        super().__init__("OUT_OF_TURN", f"Player {player_id} acted out of turn; waiting on {expected}")
        self.player_id = player_id
        self.expected = expected


class IllegalBetError(HandError):
    def __init__(self, player_id: str, amount: int) -> None:
        super().__init__("ILLEGAL_BET", f"Bet of {amount} is not legal for {player_id}")
        self.player_id = player_id
        self.amount = amount


class HandClosedError(HandError):
    def __init__(self, msg: str = "Hand is not accepting actions") -> None:
        super().__init__("HAND_CLOSED", msg)


class CursorExhaustedError(HandError):
    def __init__(self) -> None:
        super().__init__("NO_ELIGIBLE_SEAT", "No seat is eligible to act")
