from flask import Blueprint, jsonify, request, current_app
from probable_panic import db
from probable_panic.errors import GameError, GameNotFoundError, ValidationError
from probable_panic.services.games import lifecycle
from probable_panic.services.games.guesses import set_player_guess
from probable_panic.services.games.scoring import calibration_points, total_scores


games = Blueprint('games', __name__)


@games.errorhandler(GameError)
def handle_game_error(exc: GameError):
    db.session.rollback()
    if exc.status_code >= 500:
        current_app.logger.error(f"[game-error] {request.method} {request.path} {type(exc).__name__}: {exc.message}")
    else:
        current_app.logger.info(f"[game-reject] {request.method} {request.path} {exc.kind}: {exc.message}")
    return jsonify(exc.to_dict()), exc.status_code


def _json_object() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


@games.route('', methods=['POST'])
def create_game():
    data = _json_object()
    game, join_code = lifecycle.create_game(data.get('player_id'))
    return jsonify({'game_id': game.id, 'join_code': join_code}), 201


@games.route('/join', methods=['POST'])
def join_game():
    data = _json_object()
    game_id = lifecycle.join_game(data.get('join_code'), data.get('player_id'))
    return jsonify({'game_id': game_id})


@games.route('/<int:game_id>', methods=['GET'])
def get_game(game_id):
    game = lifecycle.get_game(game_id)
    return jsonify(game.to_dict() if game else None)


@games.route('/<int:game_id>/round', methods=['GET'])
def get_current_round(game_id):
    current = lifecycle.get_current_round(game_id)
    return jsonify(current.to_dict() if current else None)


@games.route('/<int:game_id>/leave', methods=['POST'])
def leave_game(game_id):
    data = _json_object()
    return jsonify({'game_id': lifecycle.leave_game(game_id, data.get('player_id'))})


@games.route('/<int:game_id>/settings', methods=['PATCH'])
def update_game_settings(game_id):
    data = _json_object()
    lifecycle.update_game_settings(
        game_id,
        rounds_remaining=data.get('rounds_remaining'),
        seconds_per_question=data.get('seconds_per_question'),
        player_name=data.get('player_name'),
    )
    return jsonify({'ok': True})


@games.route('/<int:game_id>/start', methods=['POST'])
def start_game(game_id):
    lifecycle.start_game(game_id)
    return jsonify({'ok': True})


@games.route('/<int:game_id>/guess', methods=['POST'])
def submit_guess(game_id):
    data = _json_object()
    set_player_guess(game_id, data.get('player_id'), data.get('question_text'), data.get('guess'))
    return jsonify({'ok': True})


@games.route('/<int:game_id>/reset', methods=['POST'])
def reset_game(game_id):
    lifecycle.reset_game(game_id)
    return jsonify({'ok': True})


@games.route('/<int:game_id>/scores', methods=['GET'])
def get_scores(game_id):
    game = lifecycle.get_game(game_id)
    if game is None:
        raise GameNotFoundError()
    totals = total_scores(game)
    return jsonify({
        'game_id': game.id,
        'phase': game.phase.value,
        'totals': totals,
        'calibration': {player_id: calibration_points(game, player_id) for player_id in totals},
    })
