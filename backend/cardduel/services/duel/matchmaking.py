from typing import NamedTuple, Optional


class WaitingEntry(NamedTuple):
    sid: str
    name: Optional[str] = None


class MatchmakingQueue:
    """First-come pairing with a single waiting slot."""

    def __init__(self):
        self._waiting: Optional[WaitingEntry] = None

    @property
    def waiting_sid(self) -> Optional[str]:
        return self._waiting.sid if self._waiting else None

    def is_waiting(self, sid: str) -> bool:
        return self._waiting is not None and self._waiting.sid == sid

    def enqueue(self, sid: str, name: Optional[str] = None) -> Optional[WaitingEntry]:
        """Wait for an opponent, or pop the one already waiting.

        Returns the opponent's entry when a pair is formed, otherwise None.
        A connection that is already waiting keeps its slot.
        """
        if self._waiting is None or self._waiting.sid == sid:
            self._waiting = WaitingEntry(sid, name)
            return None
        opponent, self._waiting = self._waiting, None
        return opponent

    def remove_if_waiting(self, sid: str) -> bool:
        if self.is_waiting(sid):
            self._waiting = None
            return True
        return False
