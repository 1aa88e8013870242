"""Game error taxonomy.

Every error raised by the game services derives from ``GameError`` and
carries a ``kind`` and an HTTP ``status_code`` so the API layer can render
it without knowing the concrete class.
"""


class GameError(Exception):
    """Base exception for all game service errors."""

    kind = 'error'
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {'error': self.message, 'kind': self.kind}


class NotFoundError(GameError):
    kind = 'not_found'
    status_code = 404


class GameNotFoundError(NotFoundError):
    def __init__(self, message: str = 'Game not found'):
        super().__init__(message)


class RoundNotFoundError(NotFoundError):
    def __init__(self, message: str = 'No active round found'):
        super().__init__(message)


class PreconditionError(GameError):
    kind = 'precondition'
    status_code = 409


class GameAlreadyStartedError(PreconditionError):
    pass


class NoRoundsRemainingError(PreconditionError):
    def __init__(self, message: str = 'No rounds remaining'):
        super().__init__(message)


class TickPreconditionError(PreconditionError):
    """A tick fired for a game that is not started."""


class ValidationError(GameError):
    kind = 'validation'
    status_code = 400


class RaceConditionError(GameError):
    kind = 'race'
    status_code = 409


class QuestionMismatchError(RaceConditionError):
    def __init__(self, expected: str, submitted: str):
        self.expected = expected
        self.submitted = submitted
        super().__init__(f"Guess is for '{submitted}' but the round is '{expected}'; refresh and try again")


class JoinCodeExhaustedError(GameError):
    kind = 'internal'


class QuestionPoolExhaustedError(GameError):
    kind = 'internal'
