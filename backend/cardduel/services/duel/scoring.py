from typing import Optional, Sequence, Tuple

from .deck import Card


def compare_cards(card0: Optional[Card], card1: Optional[Card]) -> Optional[int]:
    """Return the index (0 or 1) of the winning card, or None if undecided.

    Higher rank wins; equal ranks fall back to suit strength. None is only
    possible for missing or identical cards, which valid play never produces.
    """
    if not card0 or not card1:
        return None
    if card0.rank != card1.rank:
        return 0 if card0.rank > card1.rank else 1
    if card0.suit.strength != card1.suit.strength:
        return 0 if card0.suit.strength > card1.suit.strength else 1
    return None


def decide_game_end(hp: Sequence[int], hands: Sequence[Sequence[Card]]) -> Tuple[bool, Optional[int]]:
    """Evaluate the end condition after a round resolves.

    Returns ``(is_over, winner)``; ``winner`` is None for a draw or when
    the match continues.
    """
    knocked_out = [h <= 0 for h in hp]
    hands_empty = any(len(h) == 0 for h in hands)
    if not any(knocked_out) and not hands_empty:
        return False, None

    if all(knocked_out):
        return True, None
    if knocked_out[0]:
        return True, 1
    if knocked_out[1]:
        return True, 0
    if hp[0] != hp[1]:
        return True, 0 if hp[0] > hp[1] else 1
    return True, None
