from flask import current_app

from probable_panic.errors import QuestionMismatchError, RoundNotFoundError
from probable_panic.validation import validate_guess, validate_player_id, validate_question_text
from .store import commit_and_notify, lock_current_round, require_game


def set_player_guess(game_id: int, player_id: str, question_text: str, guess) -> bool:
    """Record ``guess`` for ``player_id`` on the round showing ``question_text``.

    If the round closed between the client reading it and this call, the
    guess is applied to the last finished round instead, as long as that
    round asked the same question.
    """
    guess = validate_guess(guess)
    player_id = validate_player_id(player_id)
    question_text = validate_question_text(question_text)

    game = require_game(game_id)
    current = lock_current_round(game.id)
    if current is not None:
        shown = current.question['text']
        if shown != question_text:
            raise QuestionMismatchError(shown, question_text)
        guesses = current.guesses
        guesses[player_id] = guess
        current.guesses = guesses
        commit_and_notify(game)
        return True

    history = game.finished_rounds
    if not history:
        raise RoundNotFoundError()
    last = history[-1]
    if last['question']['text'] != question_text:
        raise QuestionMismatchError(last['question']['text'], question_text)
    last['guesses'][player_id] = guess
    game.finished_rounds = history
    commit_and_notify(game)
    current_app.logger.info(f"[guess-late] game={game.id} player={player_id} round={len(history)}")
    return True
