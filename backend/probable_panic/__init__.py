from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from probable_panic.config import Config

db = SQLAlchemy()
migrate = Migrate()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = flask_app.config.get('CORS_ORIGINS') or []

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)
    socketio.init_app(
        flask_app,
        cors_allowed_origins=allowed_origins,
        message_queue=flask_app.config.get('SOCKETIO_MESSAGE_QUEUE'),
    )

    # The question corpus is immutable for the life of the app
    from probable_panic.services.games.questions import QuestionPool
    flask_app.extensions['question_pool'] = QuestionPool.from_file(
        flask_app.config['QUESTIONS_PATH'], tag=flask_app.config.get('QUESTION_TAG')
    )

    from probable_panic.main import main
    flask_app.register_blueprint(main)

    from probable_panic.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from probable_panic.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from probable_panic.services.games.scheduler import dispatch_forever

    @click.command('db-reset')
    def db_reset_command():
        """Drops and recreates the database."""
        import probable_panic.models  # noqa: F401
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            print('Database has been reset!')

    @click.command('run-ticks')
    def run_ticks_command():
        """Deliver scheduled round ticks in the foreground."""
        dispatch_forever(flask_app)

    flask_app.cli.add_command(db_reset_command)
    flask_app.cli.add_command(run_ticks_command)

    return flask_app
