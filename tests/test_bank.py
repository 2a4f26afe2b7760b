from __future__ import annotations

import json

import pytest

from quizdeck.bank import (
    BankLoadError,
    EnrichedQuestion,
    Question,
    QuestionBank,
    load_bank,
    load_default_bank,
    parse_bank,
)


def test_parse_bank_builds_models(bank: QuestionBank) -> None:
    quiz = bank.get("quiz1")
    assert quiz is not None
    assert [c.name for c in quiz.categories] == ["Geography", "Capitals"]
    question = quiz.categories[1].questions[0]
    assert question.number == 1
    assert question.prompt == "What is the capital of France?"
    assert question.choice_keys() == ("A", "B", "C")
    assert question.why_incorrect == {"B": "London is in England."}


def test_null_quiz_is_absent_and_lookup_misses(bank: QuestionBank) -> None:
    assert "quiz3" not in bank
    assert bank.get("quiz3") is None
    assert bank.get("missing") is None
    assert bank.get(None) is None
    assert bank.quiz_ids() == ("quiz1", "quiz2")
    assert len(bank) == 2


def test_question_mappings_are_read_only(bank: QuestionBank) -> None:
    question = bank.get("quiz1").categories[0].questions[0]
    with pytest.raises(TypeError):
        question.choices["Z"] = "nope"  # type: ignore[index]


def test_optional_fields_default() -> None:
    bank = parse_bank(
        {
            "q": {
                "categories": [
                    {
                        "category": "Only",
                        "questions": [
                            {
                                "number": 5,
                                "question": "Pick one",
                                "choices": {"X": "x", "Y": "y"},
                                "correct_answer": "Z",
                            }
                        ],
                    },
                    {"category": "Empty"},
                ]
            }
        }
    )
    quiz = bank.get("q")
    question = quiz.categories[0].questions[0]
    assert question.why_correct == ""
    assert dict(question.why_incorrect) == {}
    # correct_answer outside the choices is left for callers to cope with
    assert question.correct_answer == "Z"
    assert quiz.categories[1].questions == ()


@pytest.mark.parametrize(
    "payload, message",
    [
        ([], "root must be an object"),
        ({"q": "nope"}, "must be an object"),
        ({"q": {"categories": ["x"]}}, "must be objects"),
        (
            {"q": {"categories": [{"category": "c", "questions": [{}]}]}},
            "missing: number, question, choices, correct_answer",
        ),
        (
            {
                "q": {
                    "categories": [
                        {
                            "category": "c",
                            "questions": [
                                {
                                    "number": "1",
                                    "question": "?",
                                    "choices": {},
                                    "correct_answer": "A",
                                }
                            ],
                        }
                    ]
                }
            },
            "must be an integer",
        ),
        (
            {
                "q": {
                    "categories": [
                        {
                            "category": "c",
                            "questions": [
                                {
                                    "number": 1,
                                    "question": "?",
                                    "choices": ["A"],
                                    "correct_answer": "A",
                                }
                            ],
                        }
                    ]
                }
            },
            "Choices of question 1",
        ),
        ({"quiz1": {"categories": 5}}, "'categories' of 'quiz1' must be a list"),
        (
            {"quiz1": {"categories": [{"category": "c", "questions": 7}]}},
            "'questions' of 'quiz1/c' must be a list",
        ),
        ({"quiz1": {"categories": {"c": []}}}, "must be a list"),
    ],
)
def test_parse_bank_rejects_unparseable_structure(payload, message) -> None:
    with pytest.raises(BankLoadError, match=message):
        parse_bank(payload)


def test_load_bank_reads_json_file(tmp_path, bank_data) -> None:
    path = tmp_path / "bank.json"
    path.write_text(json.dumps(bank_data), encoding="utf-8")

    bank = load_bank(path)

    assert bank.quiz_ids() == ("quiz1", "quiz2")


def test_load_bank_errors(tmp_path) -> None:
    with pytest.raises(BankLoadError, match="Unable to read"):
        load_bank(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(BankLoadError, match="Invalid JSON"):
        load_bank(broken)


def test_load_default_bank_has_sample_quizzes() -> None:
    bank = load_default_bank()
    assert "quiz1" in bank
    assert "quiz2" in bank
    assert "quiz3" not in bank


def test_enriched_question_copies_fields() -> None:
    question = Question(
        number=7,
        prompt="Prompt",
        choices={"A": "a"},
        correct_answer="A",
        why_correct="because",
    )
    enriched = EnrichedQuestion.from_question(question, "Cat")
    assert enriched.category == "Cat"
    assert enriched.number == 7
    assert enriched.choices == question.choices
    assert enriched.has_choice("A")
    assert not enriched.has_choice(None)
