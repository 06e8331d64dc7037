"""
Interview Preparation Service

Generates multiple-choice technical quizzes for the user's industry, scores
submitted answers and keeps the assessment history.
"""
import json
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from sensai.config import get_settings
from sensai.errors import AIResponseMalformedError, NotFoundError, StorageError
from sensai.models.assessment import Assessment
from sensai.models.user import User
from sensai.services.ai_client import TextModel, complete
from sensai.services.identity import Identity
from sensai.services.user_service import require_identity
from sensai.utils.logger import log

settings = get_settings()

QUIZ_QUESTION_COUNT = 10
QUESTION_FIELDS = ("question", "options", "correctAnswer")

QUIZ_PROMPT_TEMPLATE = """
Generate {count} technical interview questions for a {industry} professional{skills_clause}.

Each question should be multiple choice with 4 options.

Return the response in this JSON format only, no additional text:
{{
  "questions": [
    {{
      "question": "string",
      "options": ["string", "string", "string", "string"],
      "correctAnswer": "string",
      "explanation": "string"
    }}
  ]
}}
"""

TIP_PROMPT_TEMPLATE = """
The user got the following {industry} technical interview questions wrong:

{wrong_questions}

Based on these mistakes, provide a concise, specific improvement tip.
Focus on the knowledge gaps revealed by these wrong answers.
Keep the response under 2 sentences and make it encouraging.
Don't explicitly mention the mistakes, instead focus on what to learn/practice.
"""


def build_quiz_prompt(industry: Optional[str], skills: Optional[Sequence[str]]) -> str:
    skills_clause = f" with expertise in {', '.join(skills)}" if skills else ""
    return QUIZ_PROMPT_TEMPLATE.format(
        count=QUIZ_QUESTION_COUNT,
        industry=industry or "technology",
        skills_clause=skills_clause,
    )


def parse_quiz(text: str) -> List[Dict]:
    """
    Parse the model's quiz JSON.

    Raises:
        AIResponseMalformedError: invalid JSON or missing/invalid questions
    """
    try:
        quiz = json.loads(text)
    except json.JSONDecodeError as e:
        log.error(f"Failed to parse quiz JSON from AI response: {text[:500]!r} ({e})")
        raise AIResponseMalformedError("Failed to parse quiz questions from AI response") from e

    questions = quiz.get("questions") if isinstance(quiz, dict) else None
    if not isinstance(questions, list) or not questions:
        raise AIResponseMalformedError("Invalid quiz structure returned by AI")

    for index, question in enumerate(questions):
        if not isinstance(question, dict) or any(f not in question for f in QUESTION_FIELDS):
            raise AIResponseMalformedError(f"Invalid quiz question at position {index + 1}")
        if not isinstance(question["options"], list):
            raise AIResponseMalformedError(f"Quiz question {index + 1} has no option list")

    if len(questions) != QUIZ_QUESTION_COUNT:
        log.warning(f"Quiz returned {len(questions)} questions, expected {QUIZ_QUESTION_COUNT}")

    return questions


def score_answers(questions: Sequence[Dict], answers: Sequence[Optional[str]]) -> List[Dict]:
    """Per-question results; a missing answer counts as wrong."""
    results = []
    for index, question in enumerate(questions):
        user_answer = answers[index] if index < len(answers) else None
        results.append({
            "question": question.get("question"),
            "answer": question.get("correctAnswer"),
            "user_answer": user_answer,
            "is_correct": user_answer is not None and user_answer == question.get("correctAnswer"),
            "explanation": question.get("explanation"),
        })
    return results


class InterviewService:
    """Service for AI-generated technical quizzes"""

    def __init__(self, db: Session, model: Optional[TextModel] = None):
        self.db = db
        self.model = model

    def _get_user(self, identity: Optional[Identity]) -> User:
        identity = require_identity(identity)
        user = self.db.query(User).filter(User.external_user_id == identity.user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    async def generate_quiz(self, identity: Optional[Identity]) -> List[Dict]:
        """Ask the model for a quiz; there is no offline substitute, so failures raise."""
        user = self._get_user(identity)
        log.info(f"Generating quiz for industry={user.industry}, skills={user.skills}")
        prompt = build_quiz_prompt(user.industry, user.skills)
        # No database lock may be held across the AI round-trip
        self.db.rollback()

        text = await complete(
            self.model,
            prompt,
            label="quiz",
            max_jitter=settings.ai_quiz_max_jitter_seconds,
        )
        questions = parse_quiz(text)
        log.info(f"Returning {len(questions)} quiz questions")
        return questions

    async def _improvement_tip(self, industry: Optional[str], wrong: List[Dict]) -> Optional[str]:
        wrong_questions = "\n\n".join(
            f'Question: "{q["question"]}"\nCorrect Answer: "{q["answer"]}"\nUser Answer: "{q["user_answer"]}"'
            for q in wrong
        )
        prompt = TIP_PROMPT_TEMPLATE.format(industry=industry or "technical", wrong_questions=wrong_questions)

        try:
            tip = await complete(self.model, prompt, label="improvement_tip")
            return tip or None
        except Exception as e:
            # The assessment is still worth saving without a tip
            log.error(f"Error generating improvement tip: {str(e)}")
            return None

    async def save_quiz_result(
        self,
        identity: Optional[Identity],
        questions: Sequence[Dict],
        answers: Sequence[Optional[str]],
    ) -> Assessment:
        """Score the answers, add an improvement tip if anything was wrong, and save."""
        user = self._get_user(identity)
        user_id, industry = user.id, user.industry
        # No database lock may be held across the AI round-trip
        self.db.rollback()

        results = score_answers(questions, answers)
        correct = sum(1 for r in results if r["is_correct"])
        score = round(correct / len(results) * 100, 2) if results else 0.0

        wrong = [r for r in results if not r["is_correct"]]
        improvement_tip = await self._improvement_tip(industry, wrong) if wrong else None

        assessment = Assessment(
            user_id=user_id,
            quiz_score=score,
            questions=results,
            category="Technical",
            improvement_tip=improvement_tip,
        )
        self.db.add(assessment)
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            log.error(f"Error saving quiz result: {str(e)}")
            raise StorageError(f"Failed to save quiz result: {e}") from e

        self.db.refresh(assessment)
        log.info(f"Saved assessment {assessment.id} for user {user_id}: score={score}, wrong={len(wrong)}")
        return assessment

    def get_assessments(self, identity: Optional[Identity]) -> List[Assessment]:
        user = self._get_user(identity)
        return (
            self.db.query(Assessment)
            .filter(Assessment.user_id == user.id)
            .order_by(Assessment.created_at.asc(), Assessment.id.asc())
            .all()
        )
