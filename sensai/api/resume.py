"""
Resume endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from sensai.api.deps import get_ai_model, get_identity, raise_http
from sensai.errors import SensaiError
from sensai.models.base import get_db
from sensai.services.identity import Identity
from sensai.services.resume_service import ResumeService
from sensai.utils.logger import log

router = APIRouter(prefix="/resume", tags=["resume"])


class SaveResumeRequest(BaseModel):
    content: str


class ImproveRequest(BaseModel):
    current: str
    type: str  # Section, e.g. "experience" or "project"


@router.get("")
async def get_resume(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Get the current user's resume (null if none saved yet)"""
    try:
        resume = ResumeService(db).get_resume(identity)
        return {"success": True, "data": resume.to_dict() if resume else None}
    except SensaiError as e:
        raise_http(e)


@router.put("")
async def save_resume(
    body: SaveResumeRequest,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Create or replace the current user's resume"""
    try:
        resume = ResumeService(db).save_resume(identity, body.content)
        return {"success": True, "data": resume.to_dict()}
    except SensaiError as e:
        raise_http(e)
    except Exception as e:
        log.error(f"Error saving resume: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to save resume")


@router.post("/improve")
async def improve_with_ai(
    body: ImproveRequest,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    model=Depends(get_ai_model)
):
    """Rewrite one resume entry (local polish if the AI is unavailable)"""
    try:
        improved = await ResumeService(db, model).improve_with_ai(identity, body.current, body.type)
        return {"success": True, "improved": improved}
    except SensaiError as e:
        raise_http(e)
