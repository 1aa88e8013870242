from probable_panic import create_app, socketio
from probable_panic.services.games.scheduler import start_tick_dispatcher

app = create_app()

if __name__ == '__main__':
    # Deliver round ticks from this process unless a `flask run-ticks` worker does
    if app.config.get('ENABLE_TICK_DISPATCHER'):
        start_tick_dispatcher(app)
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True, use_reloader=False)
