"""Correctness and rationale lookups over a session snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, TypeVar

from .bank import Question
from .tracker import SessionSnapshot

__all__ = [
    "FALLBACK_RATIONALE",
    "Feedback",
    "feedback_for",
    "is_correct",
    "lookup_or",
    "rationale_for",
    "wrong_rationale",
]

FALLBACK_RATIONALE = "That option is off the mark."

_T = TypeVar("_T")


@dataclass(frozen=True)
class Feedback:
    """What to show once an answer has been submitted."""

    correct: bool
    headline: str
    rationale: str


def lookup_or(mapping: Mapping[str, _T], key: str | None, default: _T) -> _T:
    """Return ``mapping[key]`` when present, otherwise ``default``."""
    if key is not None and key in mapping:
        return mapping[key]
    return default


def is_correct(snapshot: SessionSnapshot) -> bool:
    question = snapshot.question
    if not snapshot.submitted or question is None:
        return False
    return snapshot.selected_choice == question.correct_answer


def wrong_rationale(snapshot: SessionSnapshot) -> str | None:
    """Rationale for a submitted wrong pick, or ``None``.

    ``None`` is also returned when the question has no entry for the pick;
    callers substitute their own fallback text.
    """
    question = snapshot.question
    selected = snapshot.selected_choice
    if not snapshot.submitted or question is None or selected is None:
        return None
    if selected == question.correct_answer:
        return None
    return lookup_or(question.why_incorrect, selected, None)


def rationale_for(
    question: Question, key: str, fallback: str = FALLBACK_RATIONALE
) -> str:
    """Explain ``key`` for ``question`` regardless of submission state."""
    if key == question.correct_answer:
        return question.why_correct
    return lookup_or(question.why_incorrect, key, fallback)


def feedback_for(
    snapshot: SessionSnapshot, fallback: str = FALLBACK_RATIONALE
) -> Feedback | None:
    """Bundle the post-submission message, or ``None`` before submitting."""
    if not snapshot.submitted or snapshot.question is None:
        return None
    if is_correct(snapshot):
        return Feedback(True, "Correct", snapshot.question.why_correct)
    return Feedback(False, "Not quite", wrong_rationale(snapshot) or fallback)
