from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from cardduel.services.duel.deck import Card


class Phase(Enum):
    P0_TURN = 'p0_turn'
    P1_TURN = 'p1_turn'
    COMPARING = 'comparing'
    GAME_OVER = 'game_over'

    @classmethod
    def turn(cls, player_index: int) -> 'Phase':
        return cls.P0_TURN if player_index == 0 else cls.P1_TURN

    @property
    def is_turn(self) -> bool:
        return self in (Phase.P0_TURN, Phase.P1_TURN)


def default_player_names():
    return ['Player 1', 'Player 2']


@dataclass
class MatchState:
    """Authoritative record for one room.

    Only the match engine mutates it; clients only ever see the
    projection returned by :meth:`to_dict`.
    """
    room_id: str
    players: List[str]
    hands: List[List[Card]]
    initial_hp: int = 5
    player_names: List[str] = field(default_factory=default_player_names)
    hp: List[int] = field(default_factory=list)
    played_cards: List[Optional[Card]] = field(default_factory=lambda: [None, None])
    current_turn: int = 0
    round_starter: int = 0
    phase: Phase = Phase.P0_TURN
    round_number: int = 1
    round_winner: Optional[int] = None
    game_over: bool = False
    winner: Optional[int] = None

    def __post_init__(self):
        if not self.hp:
            self.hp = [self.initial_hp, self.initial_hp]

    @property
    def both_played(self) -> bool:
        return all(card is not None for card in self.played_cards)

    def cards_in_play(self) -> int:
        return sum(len(h) for h in self.hands) + sum(1 for c in self.played_cards if c is not None)

    def to_dict(self, player_index: int):
        """Snapshot for one player: own hand in full, opponent's as a count.

        The opponent's committed card stays hidden until both cards are down.
        """
        opponent = 1 - player_index
        if self.both_played:
            played = [c.to_dict() for c in self.played_cards]
        else:
            played = [None, None]
            own = self.played_cards[player_index]
            played[player_index] = own.to_dict() if own else None
        return {
            'roomId': self.room_id,
            'playerNumber': player_index,
            'playerNames': list(self.player_names),
            'hp': list(self.hp),
            'playedCards': played,
            'currentTurn': self.current_turn,
            'phase': self.phase.value,
            'initialHP': self.initial_hp,
            'hand': [c.to_dict() for c in self.hands[player_index]],
            'opponentCardCount': len(self.hands[opponent]),
        }

    def summary(self):
        """Public, hand-free view used by the status endpoint."""
        return {
            'roomId': self.room_id,
            'phase': self.phase.value,
            'round': self.round_number,
            'hp': list(self.hp),
            'gameOver': self.game_over,
        }
