"""
Interview preparation endpoints

Quiz generation, result submission and assessment history.
"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from sensai.api.deps import get_ai_model, get_identity, raise_http
from sensai.errors import SensaiError
from sensai.models.base import get_db
from sensai.services.identity import Identity
from sensai.services.interview_service import InterviewService
from sensai.utils.logger import log

router = APIRouter(prefix="/interview", tags=["interview"])


class QuizResultRequest(BaseModel):
    questions: List[Dict]
    answers: List[Optional[str]]


@router.post("/quiz")
async def generate_quiz(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    model=Depends(get_ai_model)
):
    """Generate 10 multiple-choice questions for the user's industry"""
    try:
        questions = await InterviewService(db, model).generate_quiz(identity)
        return {"success": True, "questions": questions}
    except SensaiError as e:
        raise_http(e)
    except Exception as e:
        log.error(f"Error generating quiz: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to generate quiz questions: {str(e)}")


@router.post("/results")
async def save_quiz_result(
    body: QuizResultRequest,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    model=Depends(get_ai_model)
):
    """Score a completed quiz and save it as an assessment"""
    try:
        assessment = await InterviewService(db, model).save_quiz_result(identity, body.questions, body.answers)
        return {"success": True, "data": assessment.to_dict()}
    except SensaiError as e:
        raise_http(e)


@router.get("/assessments")
async def get_assessments(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """All assessments for the user, oldest first"""
    try:
        assessments = InterviewService(db).get_assessments(identity)
        return {"success": True, "data": [a.to_dict() for a in assessments]}
    except SensaiError as e:
        raise_http(e)
    except Exception as e:
        log.error(f"Error fetching assessments: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch assessments")
