"""quizdeck: multiple-choice quizzes with per-choice explanations."""

from .bank import (
    BankLoadError,
    Category,
    EnrichedQuestion,
    Question,
    QuestionBank,
    Quiz,
    load_bank,
    load_default_bank,
    parse_bank,
)
from .feedback import (
    FALLBACK_RATIONALE,
    Feedback,
    feedback_for,
    is_correct,
    lookup_or,
    rationale_for,
    wrong_rationale,
)
from .selector import (
    DEFAULT_QUIZ_ORDER,
    QuizMenuEntry,
    flatten,
    flatten_quiz,
    format_quiz_label,
    quiz_menu,
)
from .tracker import (
    Answering,
    Finished,
    Graded,
    NoQuiz,
    ProgressTracker,
    SessionSnapshot,
)

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
    "FALLBACK_RATIONALE",
    "Feedback",
    "feedback_for",
    "is_correct",
    "lookup_or",
    "rationale_for",
    "wrong_rationale",
    "DEFAULT_QUIZ_ORDER",
    "QuizMenuEntry",
    "flatten",
    "flatten_quiz",
    "format_quiz_label",
    "quiz_menu",
    "Answering",
    "Finished",
    "Graded",
    "NoQuiz",
    "ProgressTracker",
    "SessionSnapshot",
]
