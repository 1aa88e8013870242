from probable_panic import db
import enum
import json
import time


class RoundPhase(enum.Enum):
    """Logical round state of a game.

    Only ``started``, ``rounds_remaining`` and the existence of a
    ``CurrentRound`` row are stored; the phase is always derived from them.
    """
    LOBBY = 'lobby'
    ROUND_OPEN = 'round_open'
    BETWEEN_ROUNDS = 'between_rounds'
    GAME_OVER = 'game_over'


def round_phase(game, current_round) -> RoundPhase:
    if not game.started:
        return RoundPhase.LOBBY
    if current_round is not None:
        return RoundPhase.ROUND_OPEN
    if game.rounds_remaining > 0:
        return RoundPhase.BETWEEN_ROUNDS
    return RoundPhase.GAME_OVER


def _loads(raw, default):
    if not raw:
        return default
    return json.loads(raw)


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    join_code = db.Column(db.String(8), unique=True, nullable=False, index=True)
    started = db.Column(db.Boolean, default=False, nullable=False)
    rounds_remaining = db.Column(db.Integer, nullable=False)
    seconds_per_question = db.Column(db.Integer, nullable=False)
    players_json = db.Column('players', db.Text, nullable=False, default='{}')  # {player_id: {"name": str}}
    finished_rounds_json = db.Column('finished_rounds', db.Text, nullable=False, default='[]')
    created_at = db.Column(db.Float, nullable=False, default=time.time)
    current_round = db.relationship('CurrentRound', back_populates='game', uselist=False)

    # JSON columns are only written through these setters so every change
    # is a fresh assignment that the session notices.
    @property
    def players(self) -> dict:
        return _loads(self.players_json, {})

    @players.setter
    def players(self, value: dict) -> None:
        self.players_json = json.dumps(value)

    @property
    def finished_rounds(self) -> list:
        return _loads(self.finished_rounds_json, [])

    @finished_rounds.setter
    def finished_rounds(self, value: list) -> None:
        self.finished_rounds_json = json.dumps(value)

    @property
    def phase(self) -> RoundPhase:
        return round_phase(self, self.current_round)

    def to_dict(self):
        return {
            'id': self.id,
            'join_code': self.join_code,
            'started': self.started,
            'rounds_remaining': self.rounds_remaining,
            'seconds_per_question': self.seconds_per_question,
            'players': self.players,
            'finished_rounds': self.finished_rounds,
            'phase': self.phase.value,
        }


class CurrentRound(db.Model):
    __tablename__ = 'current_round'
    id = db.Column(db.Integer, primary_key=True)
    # Unique: at most one open round per game
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, unique=True, index=True)
    question_json = db.Column('question', db.Text, nullable=False)  # includes the answer
    guesses_json = db.Column('guesses', db.Text, nullable=False, default='{}')
    deadline = db.Column(db.Float, nullable=False)
    game = db.relationship('Game', back_populates='current_round')

    @property
    def question(self) -> dict:
        return _loads(self.question_json, {})

    @question.setter
    def question(self, value: dict) -> None:
        self.question_json = json.dumps(value)

    @property
    def guesses(self) -> dict:
        return _loads(self.guesses_json, {})

    @guesses.setter
    def guesses(self, value: dict) -> None:
        self.guesses_json = json.dumps(value)

    def to_dict(self):
        """Client view of the round: the answer stays on the server."""
        question = self.question
        return {
            'id': self.id,
            'game_id': self.game_id,
            'question': {
                'text': question.get('text'),
                'left': question.get('left'),
                'right': question.get('right'),
            },
            'guesses': self.guesses,
            'deadline': self.deadline,
        }


class ScheduledTick(db.Model):
    """A pending ``tick(game_id)`` delivery, due at or after ``fire_at``."""
    __tablename__ = 'scheduled_tick'
    id = db.Column(db.Integer, primary_key=True)
    # No foreign key: ticks for deleted games are still delivered and absorbed
    game_id = db.Column(db.Integer, nullable=False, index=True)
    fire_at = db.Column(db.Float, nullable=False, index=True)
    attempts = db.Column(db.Integer, nullable=False, default=0)
