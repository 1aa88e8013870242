from flask_socketio import join_room, leave_room, emit
from probable_panic import socketio


def _room_for(data):
    if not isinstance(data, dict):
        return None
    game_id = data.get('game_id')
    try:
        return f"game:{int(game_id)}"
    except (TypeError, ValueError):
        return None


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_join_game(data):
    """Subscribe this socket to ``state_update`` events for one game."""
    room = _room_for(data)
    if not room:
        emit('error', {'message': 'game_id is required'})
        return
    join_room(room)
    emit('joined', {'room': room})


def handle_leave_game(data):
    room = _room_for(data)
    if not room:
        emit('error', {'message': 'game_id is required'})
        return
    leave_room(room)
    emit('left', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('join_game', handle_join_game, namespace=namespace)
        socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
