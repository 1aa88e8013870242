import json
import random
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from flask import current_app


@dataclass(frozen=True)
class Question:
    text: str
    left: str
    right: str
    answer: bool
    tags: Tuple[str, ...] = field(default=())

    def snapshot(self) -> dict:
        """The question as stored on a round (tags dropped)."""
        return {'text': self.text, 'left': self.left, 'right': self.right, 'answer': self.answer}


class QuestionPool:
    """Immutable catalog of binary statements keyed by their text."""

    def __init__(self, questions: Iterable[Question]):
        by_text = {}
        for q in questions:
            by_text[q.text] = q
        self._questions: Tuple[Question, ...] = tuple(by_text.values())

    @classmethod
    def from_file(cls, path: str, tag: Optional[str] = None) -> 'QuestionPool':
        """Load ``{text: {left, right, answer, tags?}}`` from a JSON file."""
        with open(path, encoding='utf-8') as fh:
            raw = json.load(fh)
        questions = []
        for text, entry in raw.items():
            tags = tuple(entry.get('tags') or ())
            if tag and tag not in tags:
                continue
            questions.append(Question(
                text=text,
                left=entry['left'],
                right=entry['right'],
                answer=bool(entry['answer']),
                tags=tags,
            ))
        return cls(questions)

    def pool_size(self) -> int:
        return len(self._questions)

    def __iter__(self):
        return iter(self._questions)

    def sample_unused(self, asked_texts) -> Optional[Question]:
        unused = [q for q in self._questions if q.text not in asked_texts]
        if not unused:
            return None
        return random.choice(unused)


def get_question_pool() -> QuestionPool:
    return current_app.extensions['question_pool']
