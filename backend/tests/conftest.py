import os
import sys
import pytest

# Ensure the backend root (containing the `cardduel` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from cardduel import create_app, socketio
from cardduel.models import MatchState
from cardduel.services.duel.deck import Card, Suit
from cardduel.services.duel.engine import MatchEngine
from cardduel.services.duel.scheduler import StageScheduler

NAMESPACE = '/ws'


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    INITIAL_HP = 5
    HAND_SIZE = 10
    ROUND_REVEAL_DELAY_MS = 0
    NEXT_TURN_DELAY_MS = 0
    ROOM_LINGER_MS = 0
    SOCKETIO_NAMESPACE = NAMESPACE
    CORS_ALLOWED_ORIGINS = ['http://localhost:5173']
    LOG_LEVEL = 'DEBUG'


class RecordingEmitter:
    """Collects (event, payload, sid) triples emitted by the engine."""

    def __init__(self):
        self.sent = []

    def __call__(self, event, payload, sid):
        self.sent.append((event, payload, sid))

    def events_for(self, sid, name=None):
        return [p for (e, p, s) in self.sent if s == sid and (name is None or e == name)]

    def names_for(self, sid):
        return [e for (e, p, s) in self.sent if s == sid]

    def clear(self):
        self.sent.clear()


class ManualSpawner:
    """Holds scheduled workers until the test runs them."""

    def __init__(self):
        self.tasks = []

    def __call__(self, fn, *args):
        self.tasks.append((fn, args))

    def run_next(self):
        fn, args = self.tasks.pop(0)
        fn(*args)

    def run_all(self):
        while self.tasks:
            self.run_next()


def card(suit, rank):
    return Card(Suit[suit.upper()], rank)


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def duel(flask_app):
    return flask_app.extensions['duel']


@pytest.fixture()
def sio_factory(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(flask_app, namespace=NAMESPACE)
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected(NAMESPACE):
                test_client.disconnect(namespace=NAMESPACE)
        except Exception:
            pass


@pytest.fixture()
def emitter():
    return RecordingEmitter()


@pytest.fixture()
def spawner():
    return ManualSpawner()


@pytest.fixture()
def engine(emitter, spawner, flask_app):
    scheduler = StageScheduler(spawner, lambda _s: None, flask_app.logger)
    return MatchEngine(emitter, scheduler, flask_app.logger, reveal_delay_ms=1000, next_turn_delay_ms=2000)


@pytest.fixture()
def paired(engine):
    """An engine with alice (player 0) and bob (player 1) in one room."""
    engine.find_match('alice')
    state = engine.find_match('bob')
    assert isinstance(state, MatchState)
    return state
