from flask import Blueprint, jsonify
from probable_panic.services.games.identifiers import new_player_id
from probable_panic.services.games.questions import get_question_pool

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({
        'message': 'Welcome to the Probable Panic game server!',
        'questions': get_question_pool().pool_size(),
    })


@main.route('/api/players', methods=['POST'])
def create_player_id():
    """Mint an opaque player id for a browser that has none stored."""
    return jsonify({'player_id': new_player_id()}), 201
