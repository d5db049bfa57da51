from typing import Callable, Set, Tuple


TimerKey = Tuple[str, str, int]


def run_inline(fn, *args):
    """Spawn replacement that runs the task immediately (tests)."""
    return fn(*args)


def no_sleep(_seconds):
    return None


class StageScheduler:
    """Delayed continuations keyed by (room_id, stage, round).

    - Ensures a single timer per key
    - Workers sleep through the injected ``sleep`` so they cooperate with
      the Socket.IO async mode
    - ``cancel_room`` invalidates every outstanding key of a room; a worker
      whose key is gone when it wakes does nothing

    The callback still has to re-check the room itself, since the room may
    change between the key check and the callback taking the engine lock.
    """

    def __init__(self, spawn: Callable, sleep: Callable, logger):
        self._spawn = spawn
        self._sleep = sleep
        self._log = logger
        self._scheduled: Set[TimerKey] = set()

    def schedule(self, room_id: str, stage: str, round_number: int, delay_ms: int,
                 callback: Callable[[str, int], None]) -> bool:
        key = (room_id, stage, round_number)
        if key in self._scheduled:
            self._log.info(f"[timer-skip] room={room_id} stage={stage} round={round_number} already scheduled")
            return False
        self._scheduled.add(key)
        self._log.info(f"[timer-set] room={room_id} stage={stage} round={round_number} delay={delay_ms}ms")
        self._spawn(self._worker, key, max(0, delay_ms) / 1000.0, callback)
        return True

    def _worker(self, key: TimerKey, delay: float, callback):
        if delay:
            self._sleep(delay)
        room_id, stage, round_number = key
        if key not in self._scheduled:
            self._log.info(f"[timer-abort] room={room_id} stage={stage} round={round_number} invalidated")
            return
        self._scheduled.discard(key)
        self._log.info(f"[timer-fire] room={room_id} stage={stage} round={round_number}")
        callback(room_id, round_number)

    def cancel_room(self, room_id: str) -> int:
        stale = {k for k in list(self._scheduled) if k[0] == room_id}
        self._scheduled.difference_update(stale)
        return len(stale)

    def is_scheduled(self, room_id: str, stage: str, round_number: int) -> bool:
        return (room_id, stage, round_number) in self._scheduled

    def pending(self) -> int:
        return len(self._scheduled)
