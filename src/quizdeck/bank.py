"""Read-only question bank and the model types it is made of.

The bank is supplied to the progression core already parsed. ``parse_bank``
and ``load_bank`` turn the JSON source layout into model objects; they only
reject input whose structure makes parsing impossible and otherwise leave
content problems (for example a ``correct_answer`` that is not one of the
choices) for the feedback helpers to degrade around.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterator, Mapping

__all__ = [
    "BankLoadError",
    "Category",
    "EnrichedQuestion",
    "Question",
    "QuestionBank",
    "Quiz",
    "load_bank",
    "load_default_bank",
    "parse_bank",
]

_DEFAULT_BANK = "bank.json"


class BankLoadError(RuntimeError):
    """Raised when a bank source cannot be read or parsed."""


def _frozen_mapping(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


@dataclass(frozen=True)
class Question:
    """A prompt with keyed choices and a rationale for each choice."""

    number: int
    prompt: str
    choices: Mapping[str, str]
    correct_answer: str
    why_correct: str = ""
    why_incorrect: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "choices", _frozen_mapping(self.choices))
        object.__setattr__(
            self, "why_incorrect", _frozen_mapping(self.why_incorrect)
        )

    def choice_keys(self) -> tuple[str, ...]:
        return tuple(self.choices)

    def has_choice(self, key: str | None) -> bool:
        return key is not None and key in self.choices


@dataclass(frozen=True)
class EnrichedQuestion(Question):
    """A question tagged with the name of the category it came from."""

    category: str = ""

    @classmethod
    def from_question(
        cls, question: Question, category: str
    ) -> "EnrichedQuestion":
        return cls(
            number=question.number,
            prompt=question.prompt,
            choices=question.choices,
            correct_answer=question.correct_answer,
            why_correct=question.why_correct,
            why_incorrect=question.why_incorrect,
            category=category,
        )


@dataclass(frozen=True)
class Category:
    name: str
    questions: tuple[Question, ...] = ()


@dataclass(frozen=True)
class Quiz:
    quiz_id: str
    categories: tuple[Category, ...] = ()


class QuestionBank:
    """Immutable lookup of quizzes by identifier."""

    def __init__(self, quizzes: Mapping[str, Quiz] | None = None) -> None:
        self._quizzes: Mapping[str, Quiz] = MappingProxyType(
            dict(quizzes or {})
        )

    def get(self, quiz_id: str | None) -> Quiz | None:
        if quiz_id is None:
            return None
        return self._quizzes.get(quiz_id)

    def quiz_ids(self) -> tuple[str, ...]:
        return tuple(self._quizzes)

    def __contains__(self, quiz_id: object) -> bool:
        return quiz_id in self._quizzes

    def __iter__(self) -> Iterator[str]:
        return iter(self._quizzes)

    def __len__(self) -> int:
        return len(self._quizzes)

    def __repr__(self) -> str:
        return f"QuestionBank({list(self._quizzes)!r})"


def parse_bank(data: Mapping[str, Any]) -> QuestionBank:
    """Build a :class:`QuestionBank` from the JSON source layout.

    ``data`` maps quiz ids to ``{"categories": [...]}`` objects. A ``null``
    quiz entry is treated as an absent quiz.
    """

    if not isinstance(data, Mapping):
        raise BankLoadError(
            f"Bank root must be an object, found {type(data).__name__}."
        )
    quizzes: dict[str, Quiz] = {}
    for quiz_id, raw_quiz in data.items():
        if raw_quiz is None:
            continue
        quizzes[str(quiz_id)] = _parse_quiz(str(quiz_id), raw_quiz)
    return QuestionBank(quizzes)


def load_bank(path: Path) -> QuestionBank:
    """Read and parse a JSON bank file."""

    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise BankLoadError(f"Unable to read bank file {path}: {exc}") from exc
    return _parse_text(text, source=str(path))


def load_default_bank() -> QuestionBank:
    """Load the sample bank bundled with the package."""

    source = resources.files("quizdeck") / "data" / _DEFAULT_BANK
    return _parse_text(source.read_text(encoding="utf-8"), source=str(source))


def _parse_text(text: str, *, source: str) -> QuestionBank:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BankLoadError(f"Invalid JSON in {source}: {exc}") from exc
    return parse_bank(data)


def _parse_quiz(quiz_id: str, raw: Any) -> Quiz:
    if not isinstance(raw, Mapping):
        raise BankLoadError(f"Quiz '{quiz_id}' must be an object.")
    items = _list_field(raw, "categories", where=quiz_id)
    categories = tuple(_parse_category(quiz_id, item) for item in items)
    return Quiz(quiz_id=quiz_id, categories=categories)


def _parse_category(quiz_id: str, raw: Any) -> Category:
    if not isinstance(raw, Mapping):
        raise BankLoadError(f"Categories of '{quiz_id}' must be objects.")
    name = str(raw.get("category", ""))
    where = f"{quiz_id}/{name or '?'}"
    items = _list_field(raw, "questions", where=where)
    questions = tuple(_parse_question(where, item) for item in items)
    return Category(name=name, questions=questions)


def _list_field(raw: Mapping[str, Any], key: str, *, where: str) -> list[Any]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise BankLoadError(f"'{key}' of '{where}' must be a list.")
    return value


def _parse_question(where: str, raw: Any) -> Question:
    if not isinstance(raw, Mapping):
        raise BankLoadError(f"Questions in '{where}' must be objects.")
    missing = [
        key
        for key in ("number", "question", "choices", "correct_answer")
        if key not in raw
    ]
    if missing:
        raise BankLoadError(
            f"Question in '{where}' is missing: {', '.join(missing)}."
        )
    number = raw["number"]
    if isinstance(number, bool) or not isinstance(number, int):
        raise BankLoadError(
            f"Question number in '{where}' must be an integer, got {number!r}."
        )
    choices = raw["choices"]
    if not isinstance(choices, Mapping):
        raise BankLoadError(
            f"Choices of question {number} in '{where}' must be an object."
        )
    why_incorrect = raw.get("why_incorrect") or {}
    if not isinstance(why_incorrect, Mapping):
        raise BankLoadError(
            f"why_incorrect of question {number} in '{where}' must be an "
            "object."
        )
    return Question(
        number=number,
        prompt=str(raw["question"]),
        choices={str(k): str(v) for k, v in choices.items()},
        correct_answer=str(raw["correct_answer"]),
        why_correct=str(raw.get("why_correct") or ""),
        why_incorrect={str(k): str(v) for k, v in why_incorrect.items()},
    )
