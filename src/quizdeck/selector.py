"""Turn a quiz into the single ordered question list a session walks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .bank import EnrichedQuestion, QuestionBank, Quiz

__all__ = [
    "DEFAULT_QUIZ_ORDER",
    "QuizMenuEntry",
    "first_available",
    "flatten",
    "flatten_quiz",
    "format_quiz_label",
    "quiz_menu",
]


def flatten(quiz: Quiz | None) -> list[EnrichedQuestion]:
    """Return every question of ``quiz`` sorted ascending by ``number``.

    Each question carries its category name. The sort is stable, so equal
    numbers keep their source order. An absent or empty quiz yields ``[]``.
    """
    if quiz is None:
        return []
    enriched = [
        EnrichedQuestion.from_question(question, category.name)
        for category in quiz.categories
        for question in category.questions
    ]
    return sorted(enriched, key=lambda q: q.number)


def flatten_quiz(
    bank: QuestionBank, quiz_id: str | None
) -> list[EnrichedQuestion]:
    return flatten(bank.get(quiz_id))


DEFAULT_QUIZ_ORDER: tuple[str, ...] = ("quiz1", "quiz2", "quiz3")

_AVAILABLE_BLURB = "Curated questions with instant explanations."
_PENDING_BLURB = "Content will land here next."


@dataclass(frozen=True)
class QuizMenuEntry:
    """One slot of the quiz picker."""

    quiz_id: str
    label: str
    available: bool

    @property
    def blurb(self) -> str:
        return _AVAILABLE_BLURB if self.available else _PENDING_BLURB


def format_quiz_label(quiz_id: str) -> str:
    """``"quiz1"`` -> ``"Quiz 1"``; other ids pass through unchanged."""
    return quiz_id.replace("quiz", "Quiz ")


def quiz_menu(
    bank: QuestionBank, order: Sequence[str] = DEFAULT_QUIZ_ORDER
) -> list[QuizMenuEntry]:
    return [
        QuizMenuEntry(
            quiz_id=quiz_id,
            label=format_quiz_label(quiz_id),
            available=quiz_id in bank,
        )
        for quiz_id in order
    ]


def first_available(
    bank: QuestionBank, order: Sequence[str] = DEFAULT_QUIZ_ORDER
) -> str | None:
    for quiz_id in order:
        if quiz_id in bank:
            return quiz_id
    return None
