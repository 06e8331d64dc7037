"""
User profile endpoints

Onboarding status and profile updates (which also materialize the
industry insight for the chosen industry).
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from sensai.api.deps import get_ai_model, get_identity, raise_http
from sensai.errors import SensaiError
from sensai.models.base import get_db
from sensai.services.identity import Identity
from sensai.services.insight_generator import InsightGenerator
from sensai.services.user_service import UserService
from sensai.utils.logger import log

router = APIRouter(prefix="/user", tags=["user"])


class ProfileUpdateRequest(BaseModel):
    industry: str
    experience: Optional[int] = Field(default=None, ge=0, le=60)
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)


@router.get("/me")
async def get_me(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Return the current user's profile"""
    try:
        user = UserService(db).ensure_user(identity)
        return user.to_dict()
    except SensaiError as e:
        raise_http(e)


@router.get("/onboarding-status")
async def get_onboarding_status(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db)
):
    """Whether the user has picked an industry yet"""
    try:
        return UserService(db).get_onboarding_status(identity)
    except SensaiError as e:
        raise_http(e)
    except Exception as e:
        log.error(f"Error checking onboarding status: {str(e)}")
        return {"is_onboarded": False}


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    model=Depends(get_ai_model)
):
    """
    Update the profile

    Generates the industry insight first if this is a new industry; the
    profile is only saved if that succeeds.
    """
    try:
        service = UserService(db, InsightGenerator(model))
        result = await service.update_profile(
            identity,
            industry=body.industry,
            experience=body.experience,
            bio=body.bio,
            skills=body.skills,
        )
        return {
            "success": True,
            "user": result["updated_user"].to_dict(),
            "industry_insight": result["industry_insight"].to_dict(),
        }

    except SensaiError as e:
        raise_http(e)
    except Exception as e:
        log.error(f"Error updating profile: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Failed to update profile: {str(e)}")
