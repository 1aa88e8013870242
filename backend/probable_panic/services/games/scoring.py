import math
from typing import Dict, List

from probable_panic.models import Game

# Floor on the probability assigned to the true outcome. A guess of exactly
# 0 or 1 on the wrong side would otherwise score negative infinity.
MIN_SCORED_PROBABILITY = 1e-4


def score_guess(guess: float, answer: bool) -> float:
    """Logarithmic score: 0 at 0.5, 100 for certainty on the right side."""
    guess = min(1.0, max(0.0, float(guess)))
    p = guess if answer else 1.0 - guess
    return 100 * (1 + math.log2(max(p, MIN_SCORED_PROBABILITY)))


def total_scores(game: Game) -> Dict[str, float]:
    """Sum each player's scores over the finished rounds."""
    totals: Dict[str, float] = {}
    for rnd in game.finished_rounds:
        answer = rnd['question']['answer']
        for player_id, guess in rnd['guesses'].items():
            totals[player_id] = totals.get(player_id, 0.0) + score_guess(guess, answer)
    return totals


def calibration_points(game: Game, player_id: str) -> List[dict]:
    """Running score for one player, ordered from least to most confident.

    Each point carries the confidence placed on the more likely side
    (50..100) and the cumulative score up to and including that guess;
    guesses at equal confidence share one point.
    """
    entries = []
    for rnd in game.finished_rounds:
        if player_id not in rnd['guesses']:
            continue
        prob = rnd['guesses'][player_id]
        entries.append((abs(prob - 0.5), prob, rnd['question']))
    entries.sort(key=lambda e: e[0])

    points = [{'confidence': 50.0, 'cumulative_score': 0.0, 'questions': []}]
    for _, prob, question in entries:
        confidence = 100 * (1 - prob if prob < 0.5 else prob)
        score = score_guess(prob, question['answer'])
        last = points[-1]
        summary = {'text': question['text'], 'guess': prob, 'score': score}
        if confidence == last['confidence']:
            last['cumulative_score'] += score
            last['questions'].append(summary)
        else:
            points.append({
                'confidence': confidence,
                'cumulative_score': last['cumulative_score'] + score,
                'questions': [summary],
            })
    return points
