"""Round scheduler: the tick state machine and its delayed-delivery queue.

A started game is driven only by ticks. Each tick looks at what is stored
and takes exactly one of these branches, in this order:

1. game missing      -> log and stop (abandoned game)
2. game not started  -> ``TickPreconditionError`` (a scheduling bug)
3. round open        -> fold it into history, re-arm after the inter-round delay
4. no rounds left    -> game over, nothing re-armed
5. otherwise         -> open a round, re-arm after ``seconds_per_question``

Ticks are rows in ``scheduled_tick``. ``run_due_ticks`` delivers due rows
in ``(fire_at, id)`` order; a tick's writes, its successor row and the
removal of its own row commit together, so a redelivered tick only ever
sees a consistent game.
"""
import time
from typing import Optional

from flask import current_app

from probable_panic import db, socketio
from probable_panic.errors import GameError, QuestionPoolExhaustedError, TickPreconditionError
from probable_panic.models import CurrentRound, RoundPhase, ScheduledTick, round_phase
from .questions import get_question_pool
from .store import emit_state_update, lock_current_round, lock_game

_dispatcher_started = False


def schedule_tick(game_id: int, delay_ms: float, now: Optional[float] = None) -> ScheduledTick:
    """Queue ``tick(game_id)`` to run ``delay_ms`` after ``now``.

    Joins the caller's transaction; nothing is queued unless it commits.
    """
    now = time.time() if now is None else now
    tick = ScheduledTick(game_id=game_id, fire_at=now + delay_ms / 1000.0, attempts=0)
    db.session.add(tick)
    current_app.logger.info(f"[tick-schedule] game={game_id} delay={delay_ms}ms fire_at={tick.fire_at}")
    return tick


def next_tick_at(game_id: int) -> Optional[float]:
    tick = (
        ScheduledTick.query.filter_by(game_id=game_id)
        .order_by(ScheduledTick.fire_at, ScheduledTick.id)
        .first()
    )
    return tick.fire_at if tick else None


def tick_game(game_id: int, now: float) -> Optional[RoundPhase]:
    """Advance one game by one step. Does not commit.

    Returns the phase the game is left in, or None if the game is gone.
    """
    log = current_app.logger
    game = lock_game(game_id)
    if game is None:
        log.warning(f"[tick-missing] game={game_id} no longer exists; dropping tick")
        return None
    if not game.started:
        raise TickPreconditionError(f'Game {game_id} not started')

    current = lock_current_round(game_id)
    if current is not None:
        history = game.finished_rounds
        history.append({'question': current.question, 'guesses': current.guesses})
        game.finished_rounds = history
        db.session.delete(current)
        schedule_tick(game.id, current_app.config['INTER_ROUND_DELAY_MS'], now)
        log.info(f"[tick-close] game={game.id} round={len(history)} rounds_remaining={game.rounds_remaining}")
        return round_phase(game, None)

    if game.rounds_remaining <= 0:
        log.info(f"[tick-over] game={game.id} finished after {len(game.finished_rounds)} rounds")
        return RoundPhase.GAME_OVER

    asked = {r['question']['text'] for r in game.finished_rounds}
    question = get_question_pool().sample_unused(asked)
    if question is None:
        raise QuestionPoolExhaustedError(
            f'Game {game.id} has {game.rounds_remaining} rounds left but every question was asked'
        )

    current = CurrentRound(game_id=game.id, deadline=now + game.seconds_per_question)
    current.question = question.snapshot()
    current.guesses = {player_id: 0.5 for player_id in game.players}
    db.session.add(current)
    game.rounds_remaining -= 1
    schedule_tick(game.id, game.seconds_per_question * 1000, now)
    log.info(
        f"[tick-open] game={game.id} rounds_remaining={game.rounds_remaining} deadline={current.deadline}"
    )
    return RoundPhase.ROUND_OPEN


def run_due_ticks(now: Optional[float] = None) -> int:
    """Deliver every tick due at ``now``. Returns how many were delivered.

    Successors scheduled by these ticks are timed from the same ``now`` and
    so are left for a later call.
    """
    now = time.time() if now is None else now
    delivered = 0
    while True:
        candidate = (
            ScheduledTick.query.filter(ScheduledTick.fire_at <= now)
            .order_by(ScheduledTick.fire_at, ScheduledTick.id)
            .first()
        )
        if candidate is None:
            db.session.commit()
            return delivered
        tick_id, game_id = candidate.id, candidate.game_id
        if _deliver(tick_id, game_id, now):
            delivered += 1


def _deliver(tick_id: int, game_id: int, now: float) -> bool:
    log = current_app.logger
    try:
        # Game row first, then the tick row: the same lock order as reset
        game = lock_game(game_id)
        join_code = game.join_code if game is not None else None
        row = ScheduledTick.query.filter_by(id=tick_id).with_for_update().first()
        if row is None:
            # Another dispatcher delivered it
            db.session.commit()
            return False
        phase = tick_game(game_id, now)
        db.session.delete(row)
        db.session.commit()
    except GameError as exc:
        db.session.rollback()
        log.error(f"[tick-drop] game={game_id} tick={tick_id} {type(exc).__name__}: {exc.message}")
        _discard(tick_id)
        return True
    except Exception:
        db.session.rollback()
        log.exception(f"[tick-error] game={game_id} tick={tick_id} failed")
        _retry_or_discard(tick_id, now)
        return False
    if phase is not None:
        emit_state_update(game_id, join_code)
    return True


def _discard(tick_id: int) -> None:
    ScheduledTick.query.filter_by(id=tick_id).delete()
    db.session.commit()


def _retry_or_discard(tick_id: int, now: float) -> None:
    row = db.session.get(ScheduledTick, tick_id)
    if row is None:
        db.session.commit()
        return
    row.attempts = (row.attempts or 0) + 1
    if row.attempts >= current_app.config['TICK_MAX_ATTEMPTS']:
        current_app.logger.error(f"[tick-drop] game={row.game_id} tick={tick_id} gave up after {row.attempts} attempts")
        db.session.delete(row)
    else:
        row.fire_at = now + current_app.config['TICK_RETRY_DELAY_MS'] / 1000.0
    db.session.commit()


def dispatch_forever(app) -> None:
    """Poll the tick queue until the process exits."""
    interval = app.config['TICK_POLL_INTERVAL_MS'] / 1000.0
    app.logger.info(f"[tick-dispatcher] started interval={interval}s")
    while True:
        with app.app_context():
            try:
                run_due_ticks()
            except Exception:
                db.session.rollback()
                app.logger.exception("[tick-dispatcher] poll failed")
            finally:
                db.session.remove()
        socketio.sleep(interval)


def start_tick_dispatcher(app) -> None:
    global _dispatcher_started
    if _dispatcher_started:
        return
    _dispatcher_started = True
    socketio.start_background_task(dispatch_forever, app)
