from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

import websockets
from websockets.asyncio.server import ServerConnection, serve

from arbiter.collaborators import DEFAULT_PACE_DELAY, Collaborators
from arbiter.errors import HandError
from arbiter.hand import Hand
from arbiter.models import Action, ActionType, GameConfig, PlayerStatus, PotAward, Seat

LOGGER = logging.getLogger("table_host")

# TableHost seats a fixed list of players, runs one hand over WebSocket and
# paces the presentation. Betting rules stay in arbiter.Hand.

PACED_EVENTS = {"DEAL", "FLOP", "TURN", "RIVER", "POT_AWARD"}


@dataclass
class ClientSession:
    player_id: str
    websocket: ServerConnection


@dataclass
class PendingAction:
    player_id: str
    deadline: float
    timer_task: Optional[asyncio.Task] = None


class TableHost:
    def __init__(
        self,
        seats: Sequence[Seat],
        config: GameConfig,
        collaborators: Optional[Collaborators] = None,
        pace_delay: float = DEFAULT_PACE_DELAY,
    ) -> None:
        collaborators = collaborators or Collaborators()
        self._payout_sink = collaborators.give_pot
        self.hand = Hand(seats, config, replace(collaborators, give_pot=self._credit))
        self.config = config
        self.pace_delay = pace_delay
        self.sessions: Dict[str, ClientSession] = {}
        self.pending_action: Optional[PendingAction] = None
        self.winnings: Dict[str, int] = {seat.player_id: 0 for seat in self.hand.seats}
        self.lock = asyncio.Lock()
        self.finished = asyncio.Event()
        self.failure: Optional[Exception] = None

    async def start(self, host: str = "0.0.0.0", port: int = 8765) -> None:
        # Serve until the hand has been paid out.
        async with serve(self._handle_connection, host, port):
            LOGGER.info("Table host listening on %s:%s", host, port)
            await self.finished.wait()
        if self.failure is not None:
            raise self.failure

    async def _handle_connection(self, websocket: ServerConnection) -> None:
        hello = await self._read_message(websocket)
        if hello is None or hello.get("type") != "hello":
            await self._send_error(websocket, code="BAD_HELLO", msg="Expected hello")
            await websocket.close()
            return
        player_id = hello.get("player_id")
        if not isinstance(player_id, str) or self.hand.get_seat(player_id) is None:
            await self._send_error(websocket, code="UNKNOWN_PLAYER", msg="Player is not seated at this table")
            await websocket.close()
            return

        previous = self.sessions.get(player_id)
        if previous:
            await previous.websocket.close(code=4000, reason="Replaced by new connection")
        session = ClientSession(player_id=player_id, websocket=websocket)
        self.sessions[player_id] = session
        LOGGER.info("Player %s connected (%s/%s seated)", player_id, len(self.sessions), len(self.hand.seats))

        await self._send_json(websocket, "welcome", self._welcome_payload(player_id))
        await self._resume_session(session)
        await self._maybe_start_hand()

        try:
            async for raw in websocket:
                message = self._decode(raw)
                if message.get("type") == "action":
                    await self._handle_action(session, message)
                else:
                    await self._send_error(websocket, code="UNKNOWN_TYPE", msg="Unsupported message type")
        except websockets.ConnectionClosed:
            pass
        finally:
            if self.sessions.get(player_id) is session:
                self.sessions.pop(player_id, None)
            LOGGER.info("Player %s disconnected", player_id)

    async def _resume_session(self, session: ClientSession) -> None:
        async with self.lock:
            if self.hand.street is None:
                return
            start_payload = self._start_payload(session.player_id)
            pending = self.pending_action
            act_payload = None
            if pending and pending.player_id == session.player_id:
                act_payload = self._act_payload(session.player_id)
        await self._send_json(session.websocket, "start_hand", start_payload)
        if act_payload:
            await self._send_json(session.websocket, "act", act_payload)

    async def _maybe_start_hand(self) -> None:
        async with self.lock:
            if self.hand.street is not None or len(self.sessions) < len(self.hand.seats):
                return
            try:
                events = self.hand.start()
            except Exception as exc:
                await self._fail_hand(exc)
                return
            targets = [(session, self._start_payload(session.player_id)) for session in self.sessions.values()]
        LOGGER.info("Hand started with %s", ", ".join(seat.player_id for seat in self.hand.seats))

        for session, payload in targets:
            await self._send_json(session.websocket, "start_hand", payload)
        await self._broadcast_events(events)
        await self._prompt_next_actor()

    async def _prompt_next_actor(self) -> None:
        async with self.lock:
            actor = self.hand.next_actor()
            payload = self._act_payload(actor) if actor else None

        if actor is None:
            await self._maybe_finish_hand()
            return

        self._set_pending_action(actor)
        session = self.sessions.get(actor)
        if not session:
            LOGGER.info("Player %s is disconnected; waiting for reconnection or timeout", actor)
            return
        await self._send_json(session.websocket, "act", payload)

    async def _handle_action(self, session: ClientSession, message: Dict[str, object]) -> None:
        action_name = message.get("action")
        amount = message.get("amount", 0)

        try:
            action_type = ActionType(action_name)
        except ValueError:
            await self._send_error(session.websocket, code="INVALID_ACTION", msg="Unknown action")
            return
        if action_type is ActionType.BET and (isinstance(amount, bool) or not isinstance(amount, int)):
            await self._send_error(session.websocket, code="BAD_SCHEMA", msg="amount required for bet")
            return

        action = Action(action_type, amount) if action_type is ActionType.BET else Action.fold()
        async with self.lock:
            try:
                events = self.hand.act(session.player_id, action)
            except HandError as exc:
                LOGGER.warning(
                    "Rejected action player=%s action=%s amount=%s reason=%s",
                    session.player_id,
                    action_type.value,
                    amount,
                    exc,
                )
                await self._send_error(session.websocket, code=exc.code, msg=exc.msg)
                return
            except Exception as exc:
                await self._fail_hand(exc)
                return
            if not events:
                # The hand ignores illegal bets; tell the player and keep the clock running.
                await self._send_error(
                    session.websocket,
                    code="ILLEGAL_BET",
                    msg=f"Bet of {amount} is not legal (to call {self.hand.call_amount(session.player_id)})",
                )
                return
            self._clear_pending_action()

        LOGGER.debug("Applied action player=%s action=%s amount=%s", session.player_id, action_type.value, amount)
        await self._broadcast_events(events)
        await self._prompt_next_actor()

    async def _maybe_finish_hand(self) -> None:
        if not self.hand.is_complete():
            return
        async with self.lock:
            payload = self._end_payload()
        await self._broadcast("end_hand", payload)
        LOGGER.info("Hand finished; stacks=%s", payload["stacks"])
        self.finished.set()

    async def _fail_hand(self, exc: Exception) -> None:
        # Lock held. The hand cannot go on, so stop the table and let start() re-raise.
        LOGGER.exception("Hand failed: %s", exc)
        self._clear_pending_action()
        self.failure = exc
        await self._broadcast("error", {"code": "HAND_FAILED", "msg": str(exc)})
        self.finished.set()

    # Payouts ---------------------------------------------------------

    def _credit(self, award: PotAward) -> None:
        share, remainder = divmod(award.amount, len(award.player_ids))
        for idx, player_id in enumerate(award.player_ids):
            self.winnings[player_id] += share + (1 if idx < remainder else 0)
        self._payout_sink(award)

    # Time limit ------------------------------------------------------

    def _set_pending_action(self, player_id: str) -> None:
        self._clear_pending_action()
        limit_ms = self.config.time_limit_ms
        deadline = time.monotonic() + limit_ms / 1000
        task = None
        if limit_ms > 0:
            task = asyncio.create_task(self._expire_after(player_id, limit_ms / 1000))
        self.pending_action = PendingAction(player_id=player_id, deadline=deadline, timer_task=task)

    def _clear_pending_action(self) -> None:
        if self.pending_action and self.pending_action.timer_task:
            self.pending_action.timer_task.cancel()
        self.pending_action = None

    async def _expire_after(self, player_id: str, seconds: float) -> None:
        await asyncio.sleep(seconds)
        await self._timer_expired(player_id)

    async def _timer_expired(self, player_id: str) -> None:
        async with self.lock:
            if not self.pending_action or self.pending_action.player_id != player_id:
                return
            self.pending_action = None
            try:
                events = self.hand.act(player_id, self._fallback_action_locked(player_id))
            except Exception as exc:
                await self._fail_hand(exc)
                return
        LOGGER.info("Time limit reached for %s; applied fallback", player_id)
        await self._broadcast_events(events)
        await self._prompt_next_actor()

    def _fallback_action_locked(self, player_id: str) -> Action:
        # Check when a zero bet is legal, otherwise fold.
        if self.hand.is_valid_bet(player_id, 0):
            return Action.check()
        return Action.fold()

    # Payloads --------------------------------------------------------

    def _welcome_payload(self, player_id: str) -> Dict[str, object]:
        return {
            "player_id": player_id,
            "config": {
                "small_blind": self.config.small_blind,
                "big_blind": self.config.big_blind,
                "antes": self.config.antes,
                "time_limit_ms": self.config.time_limit_ms,
            },
            "seats": self._seats_payload(),
        }

    def _start_payload(self, player_id: str) -> Dict[str, object]:
        return {
            "button": self.hand.seats[0].player_id,
            "hole": list(self.hand.hole_cards.get(player_id, ())),
            "seats": self._seats_payload(),
        }

    def _act_payload(self, player_id: str) -> Dict[str, object]:
        state = self.hand.get_state()
        seat = self.hand.get_seat(player_id)
        assert seat is not None
        return {
            "player_id": player_id,
            "street": state.street.value if state.street else None,
            "hole": list(state.hole_cards.get(player_id, ())),
            "stack": seat.stack,
            "to_call": self.hand.call_amount(player_id),
            "min_raise": state.min_raise,
            "bets": state.bets,
            "community": state.community_cards,
            "pot": sum(pot.amount for pot in state.pots),
            "time_ms": self.config.time_limit_ms,
        }

    def _end_payload(self) -> Dict[str, object]:
        state = self.hand.get_state()
        live = [pid for pid, status in self.hand.statuses.items() if status is not PlayerStatus.FOLDED]
        return {
            "awards": [award.as_event() for award in self.hand.awards],
            "community": state.community_cards,
            "shown": {pid: list(state.hole_cards[pid]) for pid in live} if len(live) > 1 else {},
            "stacks": [
                {"player_id": seat.player_id, "stack": seat.stack + self.winnings[seat.player_id]}
                for seat in self.hand.seats
            ],
        }

    def _seats_payload(self) -> List[Dict[str, object]]:
        return [
            {"player_id": seat.player_id, "stack": seat.stack, "connected": seat.player_id in self.sessions}
            for seat in self.hand.seats
        ]

    # Transport -------------------------------------------------------

    async def _broadcast_events(self, events: List[Dict[str, object]]) -> None:
        for event in events:
            await self._broadcast("event", event)
            if event.get("ev") in PACED_EVENTS:
                await self.hand.collaborators.pace(self.pace_delay)

    async def _broadcast(self, msg_type: str, payload: Dict[str, object]) -> None:
        targets = [session.websocket for session in self.sessions.values()]
        if not targets:
            return
        message = self._envelope(msg_type, payload)
        await asyncio.gather(*(socket.send(message) for socket in targets), return_exceptions=True)

    async def _send_json(self, websocket: ServerConnection, msg_type: str, payload: Dict[str, object]) -> None:
        try:
            await websocket.send(self._envelope(msg_type, payload))
        except websockets.ConnectionClosed:
            pass

    async def _send_error(self, websocket: ServerConnection, code: str, msg: str) -> None:
        await self._send_json(websocket, "error", {"code": code, "msg": msg})

    def _envelope(self, msg_type: str, payload: Dict[str, object]) -> str:
        body = {"type": msg_type, "v": 1, "ts": datetime.now(timezone.utc).isoformat()}
        body.update(payload)
        return json.dumps(body)

    async def _read_message(self, websocket: ServerConnection) -> Optional[Dict[str, object]]:
        try:
            raw = await asyncio.wait_for(websocket.recv(), timeout=5)
        except (asyncio.TimeoutError, websockets.ConnectionClosed):
            return None
        return self._decode(raw)

    def _decode(self, raw: str) -> Dict[str, object]:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            return {}
        return message if isinstance(message, dict) else {}
