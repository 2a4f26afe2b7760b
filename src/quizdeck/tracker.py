"""Quiz progression state machine.

A :class:`ProgressTracker` owns one session: the active quiz, its ordered
questions and a single tagged state describing where the user is::

    NoQuiz --select_quiz--> Answering(0)
    Answering --select_choice--> Answering (selection set)
    Answering --submit--> Graded
    Graded --select_choice--> Answering (same position, re-opened)
    Graded --advance--> Answering(position + 1) | Finished (at last index)
    Finished --replay--> Answering(0)
    any --exit_quiz--> NoQuiz

Requests that do not fit the current state are rejected: the operation
returns ``False`` and the state is left untouched. Nothing here raises for an
invalid request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .bank import EnrichedQuestion, QuestionBank
from .selector import DEFAULT_QUIZ_ORDER, first_available, flatten

__all__ = [
    "Answering",
    "Finished",
    "Graded",
    "NoQuiz",
    "ProgressTracker",
    "SessionSnapshot",
    "SessionState",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoQuiz:
    """No quiz is active."""


@dataclass(frozen=True)
class Answering:
    """The question at ``position`` is open; ``selected`` is a tentative pick."""

    position: int = 0
    selected: str | None = None


@dataclass(frozen=True)
class Graded:
    """``selected`` has been locked in for the question at ``position``."""

    position: int
    selected: str


@dataclass(frozen=True)
class Finished:
    """The user advanced past the last question.

    ``position`` stays on the last index and ``selected`` keeps the final
    graded pick, so the last question can still be displayed.
    """

    position: int
    selected: str


SessionState = NoQuiz | Answering | Graded | Finished


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for feedback and rendering."""

    active_quiz_id: str | None
    question: EnrichedQuestion | None
    position: int
    total: int
    selected_choice: str | None
    submitted: bool
    finished: bool

    @property
    def is_last(self) -> bool:
        return self.total > 0 and self.position == self.total - 1


class ProgressTracker:
    """Drives one user's walk through the quizzes of a bank."""

    def __init__(
        self,
        bank: QuestionBank,
        *,
        quiz_id: str | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._bank = bank
        self._log = logger or _LOGGER
        self._quiz_id: str | None = None
        self._questions: tuple[EnrichedQuestion, ...] = ()
        self._state: SessionState = NoQuiz()
        if quiz_id is not None:
            self.select_quiz(quiz_id)

    @classmethod
    def with_default_quiz(
        cls,
        bank: QuestionBank,
        quiz_order: Sequence[str] = DEFAULT_QUIZ_ORDER,
        *,
        default: str | None = None,
        logger: logging.Logger | None = None,
    ) -> "ProgressTracker":
        """Start on ``default`` when the bank has it, else the first
        available id of ``quiz_order``, else with no quiz."""
        quiz_id = default if default and default in bank else None
        if quiz_id is None:
            quiz_id = first_available(bank, quiz_order)
        return cls(bank, quiz_id=quiz_id, logger=logger)

    # Read access -------------------------------------------------------

    @property
    def bank(self) -> QuestionBank:
        return self._bank

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def active_quiz_id(self) -> str | None:
        return self._quiz_id

    @property
    def ordered_questions(self) -> tuple[EnrichedQuestion, ...]:
        return self._questions

    @property
    def has_questions(self) -> bool:
        return bool(self._questions)

    @property
    def position(self) -> int:
        if isinstance(self._state, NoQuiz):
            return 0
        return self._state.position

    @property
    def current_question(self) -> EnrichedQuestion | None:
        if isinstance(self._state, NoQuiz):
            return None
        if 0 <= self._state.position < len(self._questions):
            return self._questions[self._state.position]
        return None

    @property
    def is_last(self) -> bool:
        return bool(self._questions) and self.position == len(
            self._questions
        ) - 1

    def snapshot(self) -> SessionSnapshot:
        state = self._state
        selected = None if isinstance(state, NoQuiz) else state.selected
        return SessionSnapshot(
            active_quiz_id=self._quiz_id,
            question=self.current_question,
            position=self.position,
            total=len(self._questions),
            selected_choice=selected,
            submitted=isinstance(state, (Graded, Finished)),
            finished=isinstance(state, Finished),
        )

    # Transitions -------------------------------------------------------

    def select_quiz(self, quiz_id: str) -> bool:
        """Make ``quiz_id`` active and start it from the first question.

        Any progress in the previous quiz is discarded. Ids missing from the
        bank are accepted and produce an empty question list.
        """
        self._quiz_id = quiz_id
        self._questions = tuple(flatten(self._bank.get(quiz_id)))
        self._state = Answering()
        self._log.info(
            "Selected quiz %s",
            quiz_id,
            extra={"quiz_id": quiz_id, "total": len(self._questions)},
        )
        return True

    def select_choice(self, key: str) -> bool:
        state = self._state
        if not isinstance(state, (Answering, Graded)):
            return self._reject("select_choice", "no open question")
        question = self.current_question
        if question is None:
            return self._reject("select_choice", "no current question")
        if not question.has_choice(key):
            return self._reject("select_choice", f"unknown choice {key!r}")
        self._state = Answering(state.position, key)
        return True

    def submit(self) -> bool:
        state = self._state
        if not isinstance(state, Answering) or state.selected is None:
            return self._reject("submit", "nothing selected")
        self._state = Graded(state.position, state.selected)
        self._log.debug(
            "Submitted %s for position %d",
            state.selected,
            state.position,
            extra={"quiz_id": self._quiz_id},
        )
        return True

    def advance(self) -> bool:
        state = self._state
        if not isinstance(state, Graded):
            return self._reject("advance", "answer not submitted")
        if state.position < len(self._questions) - 1:
            self._state = Answering(state.position + 1)
            return True
        self._state = Finished(state.position, state.selected)
        self._log.info(
            "Finished quiz %s",
            self._quiz_id,
            extra={"quiz_id": self._quiz_id},
        )
        return True

    def replay(self) -> bool:
        """Restart the active quiz from the top without recomputing it."""
        if isinstance(self._state, NoQuiz):
            return self._reject("replay", "no active quiz")
        self._state = Answering()
        self._log.info(
            "Replaying quiz %s",
            self._quiz_id,
            extra={"quiz_id": self._quiz_id},
        )
        return True

    def exit_quiz(self) -> bool:
        self._quiz_id = None
        self._questions = ()
        self._state = NoQuiz()
        return True

    def _reject(self, operation: str, reason: str) -> bool:
        self._log.debug(
            "Ignored %s: %s",
            operation,
            reason,
            extra={"quiz_id": self._quiz_id, "state": repr(self._state)},
        )
        return False
