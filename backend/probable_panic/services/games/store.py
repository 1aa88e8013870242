"""Row locking and change notification shared by the game handlers.

Every handler locks the ``game`` row before anything else, then the
``current_round`` row, so concurrent handlers on one game serialize.
"""
from typing import Optional

from probable_panic import db, socketio
from probable_panic.errors import GameNotFoundError
from probable_panic.models import CurrentRound, Game


def lock_game(game_id) -> Optional[Game]:
    return Game.query.filter_by(id=game_id).with_for_update().populate_existing().first()


def require_game(game_id) -> Game:
    game = lock_game(game_id)
    if game is None:
        raise GameNotFoundError()
    return game


def lock_current_round(game_id) -> Optional[CurrentRound]:
    return CurrentRound.query.filter_by(game_id=game_id).with_for_update().populate_existing().first()


def commit_and_notify(game: Game) -> None:
    game_id, join_code = game.id, game.join_code
    db.session.commit()
    emit_state_update(game_id, join_code)


def emit_state_update(game_id, join_code) -> None:
    socketio.emit(
        'state_update',
        {'game_id': game_id, 'join_code': join_code},
        to=f"game:{game_id}",
        namespace='/ws',
    )
