"""Game aggregate operations: create, join, leave, settings, start, reset.

Each operation locks the game row, validates, applies its change and
commits once. Validation and precondition errors are raised before any
write, so a failed call never leaves a partial change behind.
"""
import time
from typing import Optional, Tuple

from flask import current_app

from probable_panic import db
from probable_panic.errors import GameAlreadyStartedError, GameNotFoundError, NoRoundsRemainingError
from probable_panic.models import CurrentRound, Game, ScheduledTick
from probable_panic.validation import (
    validate_join_code,
    validate_player_id,
    validate_player_name,
    validate_rounds,
    validate_seconds_per_question,
)
from .identifiers import new_join_code
from .questions import get_question_pool
from .scheduler import schedule_tick
from .store import commit_and_notify, require_game


def default_rounds() -> int:
    return min(int(current_app.config['DEFAULT_ROUNDS']), get_question_pool().pool_size())


def create_game(player_id: str) -> Tuple[Game, str]:
    player_id = validate_player_id(player_id)
    game = Game(
        started=False,
        rounds_remaining=default_rounds(),
        seconds_per_question=int(current_app.config['DEFAULT_SECONDS_PER_QUESTION']),
    )
    game.players = {player_id: {'name': ''}}
    game.finished_rounds = []
    join_code = new_join_code(game)
    db.session.commit()
    current_app.logger.info(f"[game-create] game={game.id} code={join_code} player={player_id}")
    return game, join_code


def join_game(join_code: str, player_id: str) -> int:
    length = int(current_app.config.get('JOIN_CODE_LENGTH', 4))
    join_code = validate_join_code(join_code, length=length)
    player_id = validate_player_id(player_id)
    game = Game.query.filter_by(join_code=join_code).with_for_update().first()
    if game is None:
        raise GameNotFoundError()
    players = game.players
    if player_id in players:
        db.session.commit()
        return game.id
    players[player_id] = {'name': ''}
    game.players = players
    commit_and_notify(game)
    current_app.logger.info(f"[game-join] game={game.id} player={player_id} players={len(players)}")
    return game.id


def leave_game(game_id: int, player_id: str) -> int:
    """Remove a player from the roster. Guesses already recorded stay."""
    player_id = validate_player_id(player_id)
    game = require_game(game_id)
    players = game.players
    if players.pop(player_id, None) is None:
        db.session.commit()
        return game.id
    game.players = players
    commit_and_notify(game)
    return game.id


def update_game_settings(game_id: int, rounds_remaining=None, seconds_per_question=None,
                         player_name: Optional[dict] = None) -> bool:
    game = require_game(game_id)
    if game.started:
        raise GameAlreadyStartedError('Game started, cannot update settings after start')

    # Validate everything before writing anything
    updates = {}
    if rounds_remaining is not None:
        updates['rounds_remaining'] = validate_rounds(rounds_remaining, get_question_pool().pool_size())
    if seconds_per_question is not None:
        updates['seconds_per_question'] = validate_seconds_per_question(
            seconds_per_question, maximum=int(current_app.config.get('MAX_SECONDS_PER_QUESTION', 60))
        )
    if player_name is not None:
        updates['player_name'] = validate_player_name(player_name)

    if not updates:
        db.session.commit()
        return True
    if 'rounds_remaining' in updates:
        game.rounds_remaining = updates['rounds_remaining']
    if 'seconds_per_question' in updates:
        game.seconds_per_question = updates['seconds_per_question']
    if 'player_name' in updates:
        players = game.players
        players[updates['player_name']['player_id']] = {'name': updates['player_name']['name']}
        game.players = players
    commit_and_notify(game)
    return True


def start_game(game_id: int, now: Optional[float] = None) -> bool:
    game = require_game(game_id)
    if game.started:
        raise GameAlreadyStartedError('Game already started')
    if game.rounds_remaining <= 0:
        raise NoRoundsRemainingError()
    game.started = True
    schedule_tick(game.id, 0, now if now is not None else time.time())
    commit_and_notify(game)
    current_app.logger.info(f"[game-start] game={game.id} rounds={game.rounds_remaining} seconds={game.seconds_per_question}")
    return True


def reset_game(game_id: int) -> bool:
    """Return a game to its lobby state.

    Any open round and any pending ticks are removed along with the
    history, so a reset mid-game leaves no round behind and the old tick
    chain cannot drive a restarted game.
    """
    game = require_game(game_id)
    CurrentRound.query.filter_by(game_id=game.id).delete()
    ScheduledTick.query.filter_by(game_id=game.id).delete()
    game.started = False
    game.rounds_remaining = default_rounds()
    game.finished_rounds = []
    commit_and_notify(game)
    current_app.logger.info(f"[game-reset] game={game.id}")
    return True


def get_game(game_id: int) -> Optional[Game]:
    return db.session.get(Game, game_id)


def get_current_round(game_id: int) -> Optional[CurrentRound]:
    return CurrentRound.query.filter_by(game_id=game_id).first()
