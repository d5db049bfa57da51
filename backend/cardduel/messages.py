"""Socket.IO event payloads.

Inbound payloads are validated into :class:`FindMatch` / :class:`PlayCard`
before they reach the engine. Outbound events are one dataclass per event
name; ``to_dict()`` gives the JSON payload.
"""
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional

from cardduel.errors import InvalidPayload

MAX_NAME_LENGTH = 24


# ---- Inbound ----

@dataclass(frozen=True)
class FindMatch:
    event: ClassVar[str] = 'find_match'
    name: Optional[str] = None


@dataclass(frozen=True)
class PlayCard:
    event: ClassVar[str] = 'play_card'
    card_index: int


def parse_find_match(data) -> FindMatch:
    if data is None or data == '':
        return FindMatch()
    if not isinstance(data, dict):
        raise InvalidPayload('find_match expects an object payload.')
    name = data.get('name')
    if name is None:
        return FindMatch()
    if not isinstance(name, str):
        raise InvalidPayload('name must be a string.')
    name = name.strip()[:MAX_NAME_LENGTH]
    return FindMatch(name=name or None)


def parse_play_card(data) -> PlayCard:
    if not isinstance(data, dict) or 'cardIndex' not in data:
        raise InvalidPayload('play_card requires a cardIndex.')
    index = data['cardIndex']
    # bool is an int subclass; reject it explicitly
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidPayload('cardIndex must be an integer.')
    return PlayCard(card_index=index)


# ---- Outbound ----

class Outbound:
    event: ClassVar[str]

    def to_dict(self) -> Dict[str, Any]:
        raise NotImplementedError


@dataclass
class AssignPlayerNumber(Outbound):
    event: ClassVar[str] = 'assign_player_number'
    player_number: int
    initial_hp: int

    def to_dict(self):
        return {'playerNumber': self.player_number, 'initialHP': self.initial_hp}


@dataclass
class WaitingForOpponent(Outbound):
    event: ClassVar[str] = 'waiting_for_opponent'

    def to_dict(self):
        return {}


@dataclass
class MatchStart(Outbound):
    event: ClassVar[str] = 'match_start'
    snapshot: Dict[str, Any]

    def to_dict(self):
        return self.snapshot


@dataclass
class GameStateUpdate(MatchStart):
    event: ClassVar[str] = 'game_state_update'


@dataclass
class NextTurn(MatchStart):
    event: ClassVar[str] = 'next_turn'


@dataclass
class RoundResult(Outbound):
    event: ClassVar[str] = 'round_result'
    winner: Optional[int]
    loser: Optional[int]
    played_cards: List[Optional[Dict[str, Any]]]
    hp: List[int]
    message: str

    def to_dict(self):
        return {
            'winner': self.winner,
            'loser': self.loser,
            'playedCards': self.played_cards,
            'hp': self.hp,
            'message': self.message,
        }


@dataclass
class GameOver(Outbound):
    event: ClassVar[str] = 'game_over'
    winner: Optional[int]
    message: str

    def to_dict(self):
        return {'winner': self.winner, 'message': self.message}


@dataclass
class ErrorMessage(Outbound):
    event: ClassVar[str] = 'error_message'
    message: str

    def to_dict(self):
        return {'message': self.message}
