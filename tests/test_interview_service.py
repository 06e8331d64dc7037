"""
Interview quiz tests.

Guards against:
1. Malformed quiz JSON reaching the client
2. A failed improvement tip losing the assessment
3. Score drift between client and stored assessment
"""
import asyncio
import json

import pytest

from sensai.config import Settings
from sensai.errors import AIResponseMalformedError, AIUnavailableError
from sensai.models.user import User
from sensai.services.identity import Identity
from sensai.services.interview_service import (
    QUIZ_QUESTION_COUNT,
    InterviewService,
    build_quiz_prompt,
    parse_quiz,
    score_answers,
)

from fakes import FakeModel

USER = Identity("user_1", email="one@example.com")


def _run(coro):
    """Run an async coroutine in a sync test."""
    return asyncio.run(coro)


def _questions(count=QUIZ_QUESTION_COUNT):
    return [
        {
            "question": f"Question {i}?",
            "options": ["A", "B", "C", "D"],
            "correctAnswer": "A",
            "explanation": f"Because {i}",
        }
        for i in range(count)
    ]


def _quiz_json(count=QUIZ_QUESTION_COUNT):
    return "```json\n" + json.dumps({"questions": _questions(count)}) + "\n```"


@pytest.fixture
def user(db):
    row = User(
        external_user_id=USER.user_id,
        email=USER.email,
        industry="Data Engineering",
        skills=["Spark", "Airflow"],
    )
    db.add(row)
    db.commit()
    return row


# ---------------------------------------------------------------------------
# Parsing / scoring
# ---------------------------------------------------------------------------

def test_prompt_includes_industry_and_skills():
    prompt = build_quiz_prompt("Data Engineering", ["Spark", "Airflow"])

    assert "Data Engineering professional with expertise in Spark, Airflow" in prompt
    assert "Generate 10 technical" in prompt


def test_prompt_without_skills():
    assert "with expertise" not in build_quiz_prompt("Data Engineering", [])


def test_parse_quiz_rejects_invalid_json():
    with pytest.raises(AIResponseMalformedError):
        parse_quiz("{questions: nope")


@pytest.mark.parametrize("text", [
    '{"items": []}',
    '{"questions": []}',
    '{"questions": [{"question": "Q?", "options": ["A"]}]}',
    '[1, 2]',
])
def test_parse_quiz_rejects_bad_structure(text):
    with pytest.raises(AIResponseMalformedError):
        parse_quiz(text)


def test_parse_quiz_accepts_unexpected_count():
    assert len(parse_quiz(json.dumps({"questions": _questions(7)}))) == 7


def test_score_answers_missing_answer_is_wrong():
    results = score_answers(_questions(3), ["A", "B"])

    assert [r["is_correct"] for r in results] == [True, False, False]
    assert results[2]["user_answer"] is None


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

def test_generate_quiz(db, user):
    model = FakeModel(_quiz_json())

    questions = _run(InterviewService(db, model).generate_quiz(USER))

    assert len(questions) == QUIZ_QUESTION_COUNT
    assert "Spark, Airflow" in model.prompts[0]


def test_generate_quiz_malformed_answer_raises(db, user):
    with pytest.raises(AIResponseMalformedError):
        _run(InterviewService(db, FakeModel("Sorry, I can't do that.")).generate_quiz(USER))


def test_generate_quiz_without_model_raises(db, user):
    with pytest.raises(AIUnavailableError):
        _run(InterviewService(db, None).generate_quiz(USER))


def test_perfect_score_skips_tip(db, user):
    model = FakeModel("Keep practicing.")

    assessment = _run(InterviewService(db, model).save_quiz_result(USER, _questions(4), ["A"] * 4))

    assert assessment.quiz_score == 100.0
    assert assessment.improvement_tip is None
    assert model.calls == 0


def test_wrong_answers_get_tip(db, user):
    model = FakeModel("Review partitioning strategies in Spark.")

    assessment = _run(InterviewService(db, model).save_quiz_result(USER, _questions(3), ["A", "B", "C"]))

    assert assessment.quiz_score == 33.33
    assert assessment.improvement_tip == "Review partitioning strategies in Spark."
    assert 'User Answer: "B"' in model.prompts[0]
    assert len(assessment.questions) == 3


def test_tip_failure_still_saves_assessment(db, user):
    service = InterviewService(db, FakeModel(Exception("Invalid API key")))

    assessment = _run(service.save_quiz_result(USER, _questions(2), ["B", "A"]))

    assert assessment.id is not None
    assert assessment.quiz_score == 50.0
    assert assessment.improvement_tip is None


def test_assessments_oldest_first(db, user):
    service = InterviewService(db, None)
    first = _run(service.save_quiz_result(USER, _questions(2), ["A", "A"]))
    second = _run(service.save_quiz_result(USER, _questions(2), ["A", "A"]))

    assert [a.id for a in service.get_assessments(USER)] == [first.id, second.id]


def test_quiz_jitter_matches_insight_jitter():
    fields = Settings.model_fields

    assert fields["ai_quiz_max_jitter_seconds"].default == 1.2
    assert fields["ai_quiz_max_jitter_seconds"].default == fields["ai_max_jitter_seconds"].default
