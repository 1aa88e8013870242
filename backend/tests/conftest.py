import os
import sys
import pytest

# Ensure the backend root (containing the `probable_panic` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from probable_panic.config import Config
from probable_panic import create_app, db, socketio


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    QUESTIONS_PATH = os.path.join(CURRENT_DIR, 'fixtures', 'questions.json')
    QUESTION_TAG = None
    DEFAULT_ROUNDS = 100
    DEFAULT_SECONDS_PER_QUESTION = 10
    INTER_ROUND_DELAY_MS = 300
    JOIN_CODE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    JOIN_CODE_MAX_ATTEMPTS = 1000
    TICK_MAX_ATTEMPTS = 3
    ENABLE_TICK_DISPATCHER = False
    SOCKETIO_MESSAGE_QUEUE = None


def _app_for(config_class):
    application = create_app(config_class)
    with application.app_context():
        import probable_panic.models  # noqa: F401
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def flask_app():
    yield from _app_for(TestConfig)


@pytest.fixture()
def make_app():
    """Build an app from TestConfig with some settings overridden."""
    contexts = []

    def _make(**overrides):
        config_class = type('OverriddenConfig', (TestConfig,), overrides)
        gen = _app_for(config_class)
        contexts.append(gen)
        return next(gen)

    yield _make
    for gen in reversed(contexts):
        for _ in gen:
            pass


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')


@pytest.fixture()
def player_ids():
    from probable_panic.services.games.identifiers import new_player_id
    return [new_player_id() for _ in range(3)]


def fire_next_tick(game_id):
    """Deliver the next pending tick for ``game_id`` at exactly its due time."""
    from probable_panic.services.games.scheduler import next_tick_at, run_due_ticks
    due = next_tick_at(game_id)
    assert due is not None, 'no tick pending'
    run_due_ticks(now=due)
    return due
