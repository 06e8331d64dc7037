"""Shared API dependencies"""
from functools import lru_cache
from typing import NoReturn, Optional

from fastapi import Depends, HTTPException, Request

from sensai.config import get_settings
from sensai.errors import SensaiError
from sensai.services.ai_client import TextModel, get_text_model
from sensai.services.identity import Identity


def get_identity(request: Request) -> Identity:
    """Dependency: raise 401 if no identity on request."""
    identity = getattr(request.state, "identity", None)
    if not identity:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return identity


def require_admin(identity: Identity = Depends(get_identity)) -> Identity:
    """Dependency: raise 403 unless the identity is a configured admin."""
    if identity.user_id not in get_settings().admin_user_ids:
        raise HTTPException(status_code=403, detail="Admin access required")
    return identity


@lru_cache()
def get_ai_model() -> Optional[TextModel]:
    """Dependency: the process-wide AI model (None when AI is disabled)."""
    return get_text_model()


def raise_http(error: SensaiError) -> NoReturn:
    """Translate a domain error into the matching HTTP error."""
    raise HTTPException(status_code=error.status_code, detail=error.message) from error
