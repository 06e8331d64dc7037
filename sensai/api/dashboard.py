"""
Industry insight dashboard endpoint
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from sensai.api.deps import get_ai_model, get_identity, raise_http
from sensai.errors import SensaiError
from sensai.models.base import get_db
from sensai.services.identity import Identity
from sensai.services.insight_generator import InsightGenerator
from sensai.services.insight_service import InsightService
from sensai.utils.logger import log

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/insights")
async def get_industry_insights(
    identity: Identity = Depends(get_identity),
    db: Session = Depends(get_db),
    model=Depends(get_ai_model)
):
    """
    Get the industry insight for the current user's industry

    Generated on first request if no one has onboarded into the industry yet.
    """
    try:
        service = InsightService(db, InsightGenerator(model))
        insight = await service.get_industry_insights(identity)
        return {
            "success": True,
            "data": insight.to_dict()
        }

    except SensaiError as e:
        raise_http(e)
    except Exception as e:
        log.error(f"Error getting industry insights: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
