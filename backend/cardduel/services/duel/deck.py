import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from cardduel.errors import InsufficientCards


class Suit(Enum):
    CLUB = 'Club'
    DIAMOND = 'Diamond'
    HEART = 'Heart'
    SPADE = 'Spade'

    @property
    def strength(self) -> int:
        """Tie-break order: Club < Diamond < Heart < Spade."""
        return SUIT_RANKING[self]

    @property
    def symbol(self) -> str:
        return SUIT_SYMBOLS[self]


SUIT_RANKING = {Suit.CLUB: 1, Suit.DIAMOND: 2, Suit.HEART: 3, Suit.SPADE: 4}
SUIT_SYMBOLS = {Suit.CLUB: '♣', Suit.DIAMOND: '♦', Suit.HEART: '♥', Suit.SPADE: '♠'}
RANKS = list(range(1, 11))  # 1..10, 1 is shown as an ace


@dataclass(frozen=True)
class Card:
    suit: Suit
    rank: int

    def to_dict(self):
        return {'suit': self.suit.value, 'rank': self.rank}

    def __str__(self):
        return format_card(self)


def build_deck() -> List[Card]:
    """Return a fresh 40-card deck, every (suit, rank) pair exactly once."""
    return [Card(suit, rank) for suit in Suit for rank in RANKS]


def shuffle_deck(deck: List[Card], rng=random) -> None:
    # Fisher-Yates, in place
    for i in range(len(deck) - 1, 0, -1):
        j = rng.randint(0, i)
        deck[i], deck[j] = deck[j], deck[i]


def deal(deck: List[Card], hand_size: int) -> Tuple[List[Card], List[Card]]:
    """Deal two hands alternately from the tail of ``deck``.

    Raises InsufficientCards when the deck cannot cover both hands; the
    caller must abandon the match rather than hand out short hands.
    """
    if hand_size < 1:
        raise InsufficientCards(f'Hand size must be at least 1, got {hand_size}.')
    if len(deck) < hand_size * 2:
        raise InsufficientCards(
            f'Need {hand_size * 2} cards to deal, deck has {len(deck)}.'
        )
    hands: Tuple[List[Card], List[Card]] = ([], [])
    for _ in range(hand_size):
        hands[0].append(deck.pop())
        hands[1].append(deck.pop())
    return hands


def format_card(card) -> str:
    if not card:
        return ''
    rank = 'A' if card.rank == 1 else str(card.rank)
    return f'{card.suit.symbol} {rank}'
