from __future__ import annotations

import copy
import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from quizdeck.bank import QuestionBank, parse_bank  # noqa: E402
from quizdeck.tracker import ProgressTracker  # noqa: E402

SAMPLE_DATA = {
    "quiz1": {
        "categories": [
            {
                "category": "Geography",
                "questions": [
                    {
                        "number": 2,
                        "question": "Select the even number.",
                        "choices": {"A": "2", "B": "3"},
                        "correct_answer": "A",
                        "why_correct": "2 is divisible by 2.",
                        "why_incorrect": {"B": "3 is odd."},
                    },
                ],
            },
            {
                "category": "Capitals",
                "questions": [
                    {
                        "number": 1,
                        "question": "What is the capital of France?",
                        "choices": {"A": "Paris", "B": "London", "C": "Rome"},
                        "correct_answer": "A",
                        "why_correct": "Paris is the capital of France.",
                        "why_incorrect": {"B": "London is in England."},
                    },
                ],
            },
        ]
    },
    "quiz2": {"categories": []},
    "quiz3": None,
}


@pytest.fixture
def bank_data() -> dict:
    """A fresh copy of the two-question sample layout."""

    return copy.deepcopy(SAMPLE_DATA)


@pytest.fixture
def bank(bank_data: dict) -> QuestionBank:
    return parse_bank(bank_data)


@pytest.fixture
def tracker(bank: QuestionBank) -> ProgressTracker:
    return ProgressTracker(bank, quiz_id="quiz1")


@pytest.fixture(autouse=True)
def _restore_quizdeck_logger():
    """Undo ``setup_logging`` side effects so caplog keeps working."""

    logger = logging.getLogger("quizdeck")
    yield
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
