import random
import threading
from typing import Callable, Optional

from cardduel.errors import (
    AlreadyInMatch,
    GameAlreadyOver,
    InvalidCardIndex,
    NotInMatch,
    NotYourTurn,
    RoundInProgress,
    SetupError,
)
from cardduel.messages import (
    AssignPlayerNumber,
    ErrorMessage,
    GameOver,
    GameStateUpdate,
    MatchStart,
    NextTurn,
    Outbound,
    RoundResult,
    WaitingForOpponent,
)
from cardduel.models import MatchState, Phase, default_player_names
from .deck import build_deck, deal, format_card, shuffle_deck
from .matchmaking import MatchmakingQueue, WaitingEntry
from .registry import RoomRepository, Seat, SessionRegistry
from .scheduler import StageScheduler
from .scoring import compare_cards, decide_game_end

STAGE_REVEAL = 'reveal'
STAGE_ADVANCE = 'advance'
STAGE_LINGER = 'linger'


class MatchEngine:
    """Owns every live room and drives each one through its rounds.

    Entry points (``find_match``, ``play_card``, ``disconnect``) and timer
    callbacks all run under one re-entrant lock, so a room is only ever
    mutated by one caller at a time. Validation failures raise
    :class:`~cardduel.errors.ProtocolViolation` and leave state untouched.
    """

    def __init__(self, emit: Callable[[str, dict, str], None], scheduler: StageScheduler, logger,
                 initial_hp: int = 5, hand_size: int = 10, reveal_delay_ms: int = 1000,
                 next_turn_delay_ms: int = 2000, linger_ms: int = 0, rng=random):
        self._emit = emit
        self._scheduler = scheduler
        self._log = logger
        self._rng = rng
        self._lock = threading.RLock()
        self.initial_hp = initial_hp
        self.hand_size = hand_size
        self.reveal_delay_ms = reveal_delay_ms
        self.next_turn_delay_ms = next_turn_delay_ms
        self.linger_ms = linger_ms
        self.rooms = RoomRepository()
        self.sessions = SessionRegistry()
        self.queue = MatchmakingQueue()

    @classmethod
    def from_config(cls, config, emit, scheduler, logger, rng=random):
        return cls(
            emit,
            scheduler,
            logger,
            initial_hp=int(config.get('INITIAL_HP', 5)),
            hand_size=int(config.get('HAND_SIZE', 10)),
            reveal_delay_ms=int(config.get('ROUND_REVEAL_DELAY_MS', 1000)),
            next_turn_delay_ms=int(config.get('NEXT_TURN_DELAY_MS', 2000)),
            linger_ms=int(config.get('ROOM_LINGER_MS', 0)),
            rng=rng,
        )

    # ---- Matchmaking ----

    def find_match(self, sid: str, name: Optional[str] = None) -> Optional[MatchState]:
        """Queue ``sid`` for a match; returns the new room when a pair forms."""
        with self._lock:
            seat = self.sessions.get(sid)
            if seat:
                state = self.rooms.get(seat.room_id)
                if state and not state.game_over:
                    raise AlreadyInMatch()
                # Asking for a new match acknowledges the finished one
                self._release_seat(sid, seat)

            waiting = self.queue.waiting_sid
            player_number = 1 if waiting and waiting != sid else 0
            self._send(sid, AssignPlayerNumber(player_number, self.initial_hp))

            opponent = self.queue.enqueue(sid, name)
            if opponent is None:
                self._log.info(f"[queue-wait] sid={sid}")
                self._send(sid, WaitingForOpponent())
                return None

            try:
                return self._create_match(opponent, WaitingEntry(sid, name))
            except SetupError as exc:
                self._log.error(f"[pairing-failed] p0={opponent.sid} p1={sid} error={exc.message}")
                for target in (opponent.sid, sid):
                    self._send(target, ErrorMessage(exc.message))
                return None

    def _create_match(self, first: WaitingEntry, second: WaitingEntry) -> MatchState:
        deck = build_deck()
        shuffle_deck(deck, self._rng)
        hands = deal(deck, self.hand_size)

        names = default_player_names()
        for idx, entry in enumerate((first, second)):
            if entry.name:
                names[idx] = entry.name

        state = MatchState(
            room_id=self.rooms.new_id(),
            players=[first.sid, second.sid],
            hands=[hands[0], hands[1]],
            initial_hp=self.initial_hp,
            player_names=names,
        )
        self.rooms.add(state)
        self.sessions.bind(first.sid, state.room_id, 0)
        self.sessions.bind(second.sid, state.room_id, 1)
        self._log.info(f"[match-start] room={state.room_id} p0={first.sid} p1={second.sid}")
        self._broadcast_snapshots(state, MatchStart)
        return state

    # ---- Moves ----

    def play_card(self, sid: str, card_index) -> MatchState:
        with self._lock:
            seat = self.sessions.get(sid)
            state = self.rooms.get(seat.room_id) if seat else None
            if state is None:
                raise NotInMatch()
            player = seat.player_index

            if state.game_over:
                raise GameAlreadyOver()
            if not state.phase.is_turn:
                raise RoundInProgress()
            if player != state.current_turn:
                raise NotYourTurn()
            hand = state.hands[player]
            if isinstance(card_index, bool) or not isinstance(card_index, int) \
                    or not 0 <= card_index < len(hand):
                raise InvalidCardIndex()

            card = hand.pop(card_index)
            state.played_cards[player] = card
            self._log.info(f"[play] room={state.room_id} player={player} card={format_card(card)} round={state.round_number}")

            if state.both_played:
                state.phase = Phase.COMPARING
                self._broadcast_snapshots(state, GameStateUpdate)
                self._scheduler.schedule(
                    state.room_id, STAGE_REVEAL, state.round_number,
                    self.reveal_delay_ms, self._on_reveal,
                )
            else:
                state.current_turn = 1 - player
                state.phase = Phase.turn(state.current_turn)
                self._broadcast_snapshots(state, GameStateUpdate)
            return state

    # ---- Timer continuations ----

    def _live_room(self, room_id: str, round_number: int, phase: Phase, stage: str) -> Optional[MatchState]:
        state = self.rooms.get(room_id)
        if state is None or state.phase is not phase or state.round_number != round_number:
            self._log.info(f"[timer-abort] room={room_id} stage={stage} round={round_number} room gone or moved on")
            return None
        return state

    def _on_reveal(self, room_id: str, round_number: int) -> None:
        with self._lock:
            state = self._live_room(room_id, round_number, Phase.COMPARING, STAGE_REVEAL)
            if state is not None:
                self._resolve_round(state)

    def _on_advance(self, room_id: str, round_number: int) -> None:
        with self._lock:
            state = self._live_room(room_id, round_number, Phase.COMPARING, STAGE_ADVANCE)
            if state is None:
                return
            state.played_cards = [None, None]
            state.round_starter = 1 - state.round_starter
            state.current_turn = state.round_starter
            state.phase = Phase.turn(state.current_turn)
            state.round_winner = None
            state.round_number += 1
            self._log.info(f"[next-turn] room={room_id} round={state.round_number} turn={state.current_turn}")
            self._broadcast_snapshots(state, NextTurn)

    def _on_linger(self, room_id: str, round_number: int) -> None:
        with self._lock:
            if self._live_room(room_id, round_number, Phase.GAME_OVER, STAGE_LINGER) is not None:
                self._teardown(room_id, reason='linger-expired')

    # ---- Round resolution ----

    def _resolve_round(self, state: MatchState) -> None:
        names = state.player_names
        cards = state.played_cards
        winner = compare_cards(cards[0], cards[1])
        if winner is None:
            loser = None
            state.round_winner = None
            self._log.warning(
                f"[round-anomaly] room={state.room_id} round={state.round_number} "
                f"cards={format_card(cards[0])}/{format_card(cards[1])} no decision"
            )
            message = 'Round tied! (unexpected)'
        else:
            loser = 1 - winner
            state.hp[loser] = max(0, state.hp[loser] - 1)
            state.round_winner = winner
            message = (
                f"Round result: {names[winner]} ({format_card(cards[winner])}) wins!\n"
                f"{names[loser]} ({format_card(cards[loser])}) loses 1 HP."
            )
        message += f"\nHP: {names[0]}={state.hp[0]}, {names[1]}={state.hp[1]}"
        self._log.info(f"[round-result] room={state.room_id} round={state.round_number} winner={winner} hp={state.hp}")

        self._broadcast(state, RoundResult(
            winner=winner,
            loser=loser,
            played_cards=[c.to_dict() if c else None for c in cards],
            hp=list(state.hp),
            message=message,
        ))

        is_over, game_winner = decide_game_end(state.hp, state.hands)
        if is_over:
            self._finish(state, game_winner)
        else:
            self._scheduler.schedule(
                state.room_id, STAGE_ADVANCE, state.round_number,
                self.next_turn_delay_ms, self._on_advance,
            )

    def _finish(self, state: MatchState, winner: Optional[int]) -> None:
        state.game_over = True
        state.phase = Phase.GAME_OVER
        state.winner = winner
        names, hp = state.player_names, state.hp

        message = 'Game over!'
        if winner is None:
            message += "\nIt's a draw!"
        elif hp[1 - winner] <= 0:
            message += f"\n{names[winner]} wins! (HP: {hp[winner]})"
        else:
            message += f"\n{names[winner]} wins with more HP! (HP: {hp[winner]} vs {hp[1 - winner]})"
        self._log.info(f"[game-over] room={state.room_id} winner={winner} hp={hp}")
        self._broadcast(state, GameOver(winner=winner, message=message))

        if self.linger_ms > 0:
            self._scheduler.schedule(
                state.room_id, STAGE_LINGER, state.round_number,
                self.linger_ms, self._on_linger,
            )

    # ---- Disconnect / teardown ----

    def disconnect(self, sid: str) -> Optional[MatchState]:
        """Handle a dropped connection; a live match is forfeited."""
        with self._lock:
            if self.queue.remove_if_waiting(sid):
                self._log.info(f"[queue-leave] sid={sid}")
            seat = self.sessions.release(sid)
            state = self.rooms.get(seat.room_id) if seat else None
            if state is None:
                return None

            if state.game_over:
                self._teardown(state.room_id, reason='left-after-game')
                return state

            remaining = 1 - seat.player_index
            remaining_sid = state.players[remaining]
            state.game_over = True
            state.phase = Phase.GAME_OVER
            state.winner = remaining
            self._log.info(f"[forfeit] room={state.room_id} left={seat.player_index} winner={remaining}")
            if self._is_seated(remaining_sid, state, remaining):
                self._send(remaining_sid, GameOver(
                    winner=remaining,
                    message='Your opponent disconnected.\nYou win!',
                ))
                self._send(remaining_sid, ErrorMessage(
                    f"Your opponent ({state.player_names[seat.player_index]}) has left the game."
                ))
            self._teardown(state.room_id, reason='disconnect')
            return state

    def _release_seat(self, sid: str, seat: Seat) -> None:
        self.sessions.release(sid)
        state = self.rooms.get(seat.room_id)
        if state is None:
            return
        other = 1 - seat.player_index
        if not self._is_seated(state.players[other], state, other):
            self._teardown(state.room_id, reason='released')

    def _teardown(self, room_id: str, reason: str) -> None:
        state = self.rooms.delete(room_id)
        cancelled = self._scheduler.cancel_room(room_id)
        if state is not None:
            for idx, sid in enumerate(state.players):
                if self._is_seated(sid, state, idx):
                    self.sessions.release(sid)
        self._log.info(f"[room-teardown] room={room_id} reason={reason} cancelled_timers={cancelled}")

    # ---- Projection / emit helpers ----

    def project_state(self, room_id: str, player_index: int):
        with self._lock:
            state = self.rooms.get(room_id)
            return state.to_dict(player_index) if state else None

    def status(self):
        with self._lock:
            return {
                'activeRooms': len(self.rooms),
                'waiting': self.queue.waiting_sid is not None,
                'rooms': [state.summary() for state in self.rooms],
            }

    def _is_seated(self, sid: str, state: MatchState, player_index: int) -> bool:
        return self.sessions.get(sid) == Seat(state.room_id, player_index)

    def _send(self, sid: str, message: Outbound) -> None:
        self._emit(message.event, message.to_dict(), sid)

    def _broadcast(self, state: MatchState, message: Outbound) -> None:
        for idx, sid in enumerate(state.players):
            if self._is_seated(sid, state, idx):
                self._send(sid, message)

    def _broadcast_snapshots(self, state: MatchState, message_cls) -> None:
        for idx, sid in enumerate(state.players):
            if self._is_seated(sid, state, idx):
                self._send(sid, message_cls(state.to_dict(idx)))
