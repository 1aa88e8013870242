"""Input validation for game operations.

Each helper returns the normalized value or raises ``ValidationError``;
services call them before touching the database.
"""
import math
import numbers
import re

from probable_panic.errors import ValidationError

MAX_PLAYER_ID_LENGTH = 64
MAX_PLAYER_NAME_LENGTH = 64

_JOIN_CODE_RE = re.compile(r'^[A-Z]+$')


def validate_join_code(value, length: int = 4) -> str:
    if not isinstance(value, str):
        raise ValidationError('Join code is required')
    code = value.strip().upper()
    if len(code) != length or not _JOIN_CODE_RE.match(code):
        raise ValidationError(f'Join code must be {length} letters')
    return code


def validate_player_id(value) -> str:
    if not isinstance(value, str):
        raise ValidationError('player_id is required')
    player_id = value.strip()
    if not player_id:
        raise ValidationError('player_id is required')
    if len(player_id) > MAX_PLAYER_ID_LENGTH:
        raise ValidationError(f'player_id is limited to {MAX_PLAYER_ID_LENGTH} characters')
    return player_id


def _real_number(value, field: str) -> float:
    # bool is an int subclass; true/false are not numbers here
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValidationError(f'{field} must be a number')
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(f'{field} must be finite')
    return value


def validate_rounds(value, pool_size: int) -> int:
    value = _real_number(value, 'rounds_remaining')
    if int(value) != value:
        raise ValidationError('rounds_remaining must be an integer')
    if not 1 <= value <= pool_size:
        raise ValidationError(f'rounds_remaining must be between 1 and {pool_size}; there are only {pool_size} questions')
    return int(value)


def validate_seconds_per_question(value, maximum: int = 60) -> int:
    value = _real_number(value, 'seconds_per_question')
    if int(value) != value:
        raise ValidationError('seconds_per_question must be a whole number of seconds')
    if not 1 <= value <= maximum:
        raise ValidationError(f'seconds_per_question must be between 1 and {maximum}')
    return int(value)


def validate_guess(value) -> float:
    value = _real_number(value, 'guess')
    if not 0 <= value <= 1:
        raise ValidationError('guess must be between 0 and 1')
    return float(value)


def validate_player_name(value) -> dict:
    if not isinstance(value, dict):
        raise ValidationError('player_name must be an object with player_id and name')
    name = value.get('name')
    if not isinstance(name, str):
        raise ValidationError('player_name.name must be a string')
    name = name.strip()
    if len(name) > MAX_PLAYER_NAME_LENGTH:
        raise ValidationError(f'Names are limited to {MAX_PLAYER_NAME_LENGTH} characters')
    return {'player_id': validate_player_id(value.get('player_id')), 'name': name}


def validate_question_text(value) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError('question_text is required')
    return value
