from __future__ import annotations

import logging

import pytest

from quizdeck.bank import QuestionBank
from quizdeck.tracker import (
    Answering,
    Finished,
    Graded,
    NoQuiz,
    ProgressTracker,
)


def _assert_fresh(tracker: ProgressTracker) -> None:
    snap = tracker.snapshot()
    assert snap.position == 0
    assert snap.selected_choice is None
    assert snap.submitted is False
    assert snap.finished is False


def test_new_tracker_without_quiz(bank: QuestionBank) -> None:
    tracker = ProgressTracker(bank)

    snap = tracker.snapshot()
    assert isinstance(tracker.state, NoQuiz)
    assert snap.active_quiz_id is None
    assert snap.question is None
    assert snap.total == 0
    assert not tracker.submit()
    assert not tracker.advance()
    assert not tracker.replay()
    assert not tracker.select_choice("A")


def test_with_default_quiz_picks_first_available(bank: QuestionBank) -> None:
    assert ProgressTracker.with_default_quiz(bank).active_quiz_id == "quiz1"
    assert (
        ProgressTracker.with_default_quiz(bank, ["quiz3", "quiz2"])
        .active_quiz_id
        == "quiz2"
    )
    assert (
        ProgressTracker.with_default_quiz(bank, default="quiz2").active_quiz_id
        == "quiz2"
    )
    assert (
        ProgressTracker.with_default_quiz(bank, default="quiz3").active_quiz_id
        == "quiz1"
    )
    assert ProgressTracker.with_default_quiz(bank, ["x"]).active_quiz_id is None


def test_select_quiz_resets_everything(tracker: ProgressTracker) -> None:
    tracker.select_choice("B")
    tracker.submit()
    tracker.advance()
    tracker.select_choice("A")
    assert tracker.position == 1

    assert tracker.select_quiz("quiz1")

    _assert_fresh(tracker)
    assert [q.number for q in tracker.ordered_questions] == [1, 2]


def test_select_quiz_resets_from_finished(tracker: ProgressTracker) -> None:
    for _ in range(2):
        tracker.select_choice("A")
        tracker.submit()
        tracker.advance()
    assert tracker.snapshot().finished

    tracker.select_quiz("quiz2")

    _assert_fresh(tracker)
    assert tracker.active_quiz_id == "quiz2"


def test_submit_requires_selection(tracker: ProgressTracker) -> None:
    assert not tracker.submit()
    assert tracker.snapshot().submitted is False


def test_select_choice_rejects_unknown_key(tracker: ProgressTracker) -> None:
    assert not tracker.select_choice("Z")
    assert tracker.snapshot().selected_choice is None


def test_reselect_after_submit_reopens(tracker: ProgressTracker) -> None:
    tracker.select_choice("B")
    assert tracker.submit()
    assert isinstance(tracker.state, Graded)
    assert not tracker.submit()

    assert tracker.select_choice("A")

    snap = tracker.snapshot()
    assert snap.submitted is False
    assert snap.selected_choice == "A"
    assert snap.position == 0
    assert tracker.state == Answering(0, "A")


def test_advance_requires_submission(tracker: ProgressTracker) -> None:
    assert not tracker.advance()
    tracker.select_choice("A")
    assert not tracker.advance()
    assert tracker.position == 0


def test_advance_moves_and_clears(tracker: ProgressTracker) -> None:
    tracker.select_choice("A")
    tracker.submit()

    assert tracker.advance()

    snap = tracker.snapshot()
    assert snap.position == 1
    assert snap.selected_choice is None
    assert snap.submitted is False
    assert snap.question.number == 2
    assert tracker.is_last


def test_advance_from_last_finishes_in_place(
    tracker: ProgressTracker,
) -> None:
    tracker.select_choice("A")
    tracker.submit()
    tracker.advance()
    tracker.select_choice("B")
    tracker.submit()

    assert tracker.advance()

    snap = tracker.snapshot()
    assert snap.finished is True
    assert snap.submitted is True
    assert snap.selected_choice == "B"
    assert snap.position == 1
    assert snap.question is tracker.ordered_questions[-1]
    assert tracker.state == Finished(1, "B")
    # Nothing moves once finished.
    assert not tracker.advance()
    assert not tracker.select_choice("A")
    assert not tracker.submit()
    assert tracker.snapshot().position == 1


def test_replay_restarts_same_quiz(tracker: ProgressTracker) -> None:
    order = tracker.ordered_questions
    for _ in range(2):
        tracker.select_choice("A")
        tracker.submit()
        tracker.advance()

    assert tracker.replay()

    _assert_fresh(tracker)
    assert tracker.active_quiz_id == "quiz1"
    assert tracker.ordered_questions is order


def test_replay_mid_quiz(tracker: ProgressTracker) -> None:
    tracker.select_choice("A")
    tracker.submit()
    tracker.advance()

    assert tracker.replay()
    _assert_fresh(tracker)


def test_exit_quiz_clears_session(tracker: ProgressTracker) -> None:
    tracker.select_choice("A")

    assert tracker.exit_quiz()

    snap = tracker.snapshot()
    assert snap.active_quiz_id is None
    assert snap.total == 0
    assert snap.question is None
    assert tracker.ordered_questions == ()
    assert isinstance(tracker.state, NoQuiz)


@pytest.mark.parametrize("quiz_id", ["quizX", "quiz2", "quiz3"])
def test_empty_quiz_is_inert(bank: QuestionBank, quiz_id: str) -> None:
    tracker = ProgressTracker(bank)
    tracker.select_quiz(quiz_id)

    assert tracker.ordered_questions == ()
    assert tracker.position == 0
    assert tracker.current_question is None
    assert not tracker.has_questions
    assert not tracker.select_choice("A")
    assert not tracker.submit()
    assert not tracker.advance()
    snap = tracker.snapshot()
    assert snap.active_quiz_id == quiz_id
    assert snap.finished is False
    assert snap.submitted is False


def test_rejections_are_logged(
    tracker: ProgressTracker, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.DEBUG, logger="quizdeck.tracker"):
        tracker.submit()

    assert any("Ignored submit" in r.getMessage() for r in caplog.records)


def test_custom_logger_receives_transitions(
    bank: QuestionBank, caplog: pytest.LogCaptureFixture
) -> None:
    logger = logging.getLogger("tests.tracker")
    with caplog.at_level(logging.INFO, logger="tests.tracker"):
        ProgressTracker(bank, quiz_id="quiz1", logger=logger)

    record = next(r for r in caplog.records if r.name == "tests.tracker")
    assert record.quiz_id == "quiz1"
    assert record.total == 2
