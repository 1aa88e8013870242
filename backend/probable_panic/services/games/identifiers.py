import random
import string
import threading

from flask import current_app
from sqlalchemy.exc import IntegrityError

from probable_panic import db
from probable_panic.errors import JoinCodeExhaustedError
from probable_panic.models import Game

PLAYER_ID_ALPHABET = string.ascii_lowercase + string.digits
PLAYER_ID_LENGTH = 10

_join_code_lock = threading.Lock()


def _draw_join_code() -> str:
    alphabet = current_app.config.get('JOIN_CODE_ALPHABET', string.ascii_uppercase)
    length = int(current_app.config.get('JOIN_CODE_LENGTH', 4))
    return ''.join(random.choice(alphabet) for _ in range(length))


def _code_taken(code: str) -> bool:
    return Game.query.filter_by(join_code=code).first() is not None


def new_join_code(game: Game) -> str:
    """Assign a fresh join code to ``game`` and insert it.

    The existence check and the insert run under a process-wide lock, and
    the unique index on ``game.join_code`` rejects a code that another
    process reserved in between; on that conflict the insert is rolled back
    and a new code is drawn. The new game must be the only pending change
    in the session.
    """
    max_attempts = int(current_app.config.get('JOIN_CODE_MAX_ATTEMPTS', 1000))
    with _join_code_lock:
        for _ in range(max_attempts):
            code = _draw_join_code()
            if _code_taken(code):
                continue
            game.join_code = code
            db.session.add(game)
            try:
                db.session.flush()
            except IntegrityError:
                db.session.rollback()
                current_app.logger.info(f"[join-code-race] code={code} taken concurrently, redrawing")
                continue
            return code
    raise JoinCodeExhaustedError(f'No free join code after {max_attempts} attempts')


def new_player_id() -> str:
    """Opaque per-browser player token; not a credential."""
    return ''.join(random.choices(PLAYER_ID_ALPHABET, k=PLAYER_ID_LENGTH))
